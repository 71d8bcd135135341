"""
OrderDesk — Order placement: check stock, reserve, record, all or nothing

One placement is one transaction:
  - READ:   re-fetch every referenced menu item inside the transaction
  - CHECK:  stock >= quantity, else roll back → InsufficientStock
  - WRITE:  guarded decrement (UPDATE ... WHERE version_id = <seen> AND stock >= qty)
  - RECORD: snapshot the priced lines into a pending Order + stock ledger rows
  - COMMIT: nothing above is visible to anyone until here

If another transaction wins the race for a row, the guarded decrement
matches nothing → StaleDataError → the whole placement is retried from
fresh reads, and finally surfaced as Conflict.
"""
import logging
from typing import Protocol, Sequence

from sqlalchemy.exc import DBAPIError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from orderdesk.core.config import get_settings
from orderdesk.core.errors import (
    InsufficientStock,
    InvalidRequest,
    ItemNotFound,
    OrderDeskError,
    StorageError,
    TotalMismatch,
)
from orderdesk.core.optimistic_lock import StaleDataError, is_retryable_db_error, with_optimistic_retry
from orderdesk.db.catalog import decrement_stock, lock_menu_item, resolve_options
from orderdesk.db.order_store import create_order
from orderdesk.models.menu import StockMovement, StockMovementKind
from orderdesk.models.order import Order

settings = get_settings()
logger = logging.getLogger(__name__)


class OrderLine(Protocol):
    menu_id: str
    quantity: int
    options: dict[str, bool] | None


def _validate_lines(lines: Sequence[OrderLine]) -> None:
    if not lines:
        raise InvalidRequest("no items")
    for line in lines:
        qty = line.quantity
        if isinstance(qty, bool) or not isinstance(qty, int) or qty <= 0:
            raise InvalidRequest(
                f"Quantity for '{line.menu_id}' must be a positive integer, got {qty!r}.",
                menu_id=line.menu_id,
            )


def compute_line_total(unit_price: int, surcharges: Sequence[int], quantity: int) -> int:
    return (unit_price + sum(surcharges)) * quantity


@with_optimistic_retry()
async def place_order(
    db: AsyncSession,
    lines: Sequence[OrderLine],
    declared_total: int | None = None,
) -> Order:
    """
    Reserve stock for every line and persist a pending Order, atomically.

    Lines are checked in submitted order; the first failing line aborts the
    transaction and no earlier decrement survives. The persisted total is
    always the server-side sum; a declared total that differs is logged and,
    when ORDER_REJECT_TOTAL_MISMATCH is set, rejected as TotalMismatch.
    """
    _validate_lines(lines)

    try:
        snapshot: list[dict] = []
        for line in lines:
            item = await lock_menu_item(db, line.menu_id)
            if item is None:
                raise ItemNotFound(line.menu_id)
            if item.stock < line.quantity:
                raise InsufficientStock(
                    item.id, available=item.stock, requested=line.quantity, name=item.name
                )

            options = await resolve_options(db, line.options)
            await decrement_stock(db, item, line.quantity)

            snapshot.append({
                "menu_id": item.id,
                "name": item.name,
                "unit_price": item.price,
                "quantity": line.quantity,
                "options": [{"key": key, "surcharge": surcharge} for key, surcharge in options],
                "line_total": compute_line_total(item.price, [s for _, s in options], line.quantity),
            })

        total = sum(entry["line_total"] for entry in snapshot)
        if declared_total is not None and declared_total != total:
            logger.warning(
                "Declared total %d differs from computed total %d (%s)",
                declared_total, total,
                "rejected" if settings.ORDER_REJECT_TOTAL_MISMATCH else "using computed",
            )
            if settings.ORDER_REJECT_TOTAL_MISMATCH:
                raise TotalMismatch(declared_total, total)

        order = await create_order(db, snapshot, total, declared_amount=declared_total)
        for entry in snapshot:
            db.add(StockMovement(
                menu_item_id=entry["menu_id"],
                order_id=order.id,
                kind=StockMovementKind.ORDER_DEDUCTION,
                quantity=entry["quantity"],
            ))
        await db.commit()

    except (OrderDeskError, StaleDataError):
        await db.rollback()
        raise
    except DBAPIError as exc:
        await db.rollback()
        if is_retryable_db_error(exc):
            raise StaleDataError(f"Database rejected concurrent write: {exc.orig}") from exc
        logger.exception("Order placement failed")
        raise StorageError("Order could not be stored.") from exc
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.exception("Order placement failed")
        raise StorageError("Order could not be stored.") from exc

    logger.info(
        "Order %s placed: %d line(s), total=%d",
        order.id, len(snapshot), order.total_amount,
    )
    return order
