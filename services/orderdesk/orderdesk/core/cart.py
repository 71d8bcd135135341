"""
OrderDesk — Cart sessions

Process-local scratch space: session id → ordered cart lines. Nothing here is
durable and no stock is held; a line may still fail reservation at checkout.
"""
import itertools
import threading
from dataclasses import dataclass, field, replace

from orderdesk.core.errors import CartLineNotFound, InvalidRequest


@dataclass(frozen=True)
class CartLine:
    id: int
    menu_id: str
    name: str
    price: int                    # unit price at the time the line was added
    quantity: int
    options: dict[str, bool] = field(default_factory=dict)
    option_surcharge: int = 0     # per unit

    @property
    def total_price(self) -> int:
        return (self.price + self.option_surcharge) * self.quantity


def _check_quantity(quantity: int) -> None:
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise InvalidRequest(f"Quantity must be a positive integer, got {quantity!r}.")


class CartStore:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._carts: dict[str, list[CartLine]] = {}
        self._ids = itertools.count(1)

    def get(self, session_id: str) -> list[CartLine]:
        with self._lock:
            return list(self._carts.get(session_id, []))

    def add(
        self,
        session_id: str,
        menu_id: str,
        name: str,
        price: int,
        quantity: int,
        options: dict[str, bool] | None = None,
        option_surcharge: int = 0,
    ) -> CartLine:
        _check_quantity(quantity)
        with self._lock:
            line = CartLine(
                id=next(self._ids),
                menu_id=menu_id,
                name=name,
                price=price,
                quantity=quantity,
                options=dict(options or {}),
                option_surcharge=option_surcharge,
            )
            self._carts.setdefault(session_id, []).append(line)
            return line

    def update_quantity(self, session_id: str, line_id: int, quantity: int) -> CartLine:
        _check_quantity(quantity)
        with self._lock:
            lines = self._carts.get(session_id, [])
            for idx, line in enumerate(lines):
                if line.id == line_id:
                    lines[idx] = replace(line, quantity=quantity)
                    return lines[idx]
        raise CartLineNotFound(line_id)

    def remove(self, session_id: str, line_id: int) -> None:
        with self._lock:
            lines = self._carts.get(session_id, [])
            for idx, line in enumerate(lines):
                if line.id == line_id:
                    del lines[idx]
                    return
        raise CartLineNotFound(line_id)

    def discard(self, session_id: str, line_ids: set[int]) -> None:
        """Drop the given lines (e.g. the ones just ordered), keeping any added since."""
        with self._lock:
            lines = self._carts.get(session_id)
            if lines is None:
                return
            remaining = [line for line in lines if line.id not in line_ids]
            if remaining:
                self._carts[session_id] = remaining
            else:
                del self._carts[session_id]

    def clear(self, session_id: str) -> None:
        with self._lock:
            self._carts.pop(session_id, None)


_cart_store = CartStore()


def get_cart_store() -> CartStore:
    return _cart_store
