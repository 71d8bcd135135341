"""
OrderDesk — Error taxonomy

Every error the ordering core can raise. Each carries the HTTP status the
API layer answers with, a stable machine code, and any context fields that
are returned alongside the message.
"""


class OrderDeskError(Exception):
    status_code: int = 500
    code: str = "error"

    def __init__(self, message: str, **context):
        super().__init__(message)
        self.message = message
        self.context = context

    def to_dict(self) -> dict:
        return {"detail": self.message, "code": self.code, **self.context}


class InvalidRequest(OrderDeskError):
    """Malformed or empty input. Nothing was changed."""
    status_code = 400
    code = "invalid_request"


class ItemNotFound(OrderDeskError):
    status_code = 404
    code = "item_not_found"

    def __init__(self, menu_id: str):
        super().__init__(f"Menu item '{menu_id}' not found.", menu_id=menu_id)
        self.menu_id = menu_id


class OrderNotFound(OrderDeskError):
    status_code = 404
    code = "order_not_found"

    def __init__(self, order_id: str):
        super().__init__(f"Order '{order_id}' not found.", order_id=order_id)
        self.order_id = order_id


class CartLineNotFound(OrderDeskError):
    status_code = 404
    code = "cart_line_not_found"

    def __init__(self, line_id: int):
        super().__init__(f"Cart line {line_id} not found.", line_id=line_id)
        self.line_id = line_id


class InsufficientStock(OrderDeskError):
    """Requested quantity exceeds the stock observed inside the transaction."""
    status_code = 409
    code = "insufficient_stock"

    def __init__(self, menu_id: str, available: int, requested: int, name: str | None = None):
        super().__init__(
            f"Insufficient stock for '{name or menu_id}': "
            f"requested={requested}, available={available}",
            menu_id=menu_id,
            available=available,
            requested=requested,
        )
        self.menu_id = menu_id
        self.available = available
        self.requested = requested


class TotalMismatch(OrderDeskError):
    status_code = 409
    code = "total_mismatch"

    def __init__(self, declared: int, computed: int):
        super().__init__(
            f"Declared total {declared} does not match computed total {computed}.",
            declared=declared,
            computed=computed,
        )
        self.declared = declared
        self.computed = computed


class Conflict(OrderDeskError):
    """A concurrent write won the race and retries were exhausted. Safe to retry."""
    status_code = 409
    code = "conflict"


class StorageError(OrderDeskError):
    status_code = 503
    code = "storage_error"
