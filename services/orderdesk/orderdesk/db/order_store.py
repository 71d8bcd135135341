"""
OrderDesk — Order record store
"""
import logging
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from orderdesk.core.errors import InvalidRequest, OrderNotFound, StorageError
from orderdesk.models.order import Order, OrderStatus

logger = logging.getLogger(__name__)


async def create_order(
    db: AsyncSession,
    items: list[dict],
    total_amount: int,
    declared_amount: int | None = None,
) -> Order:
    """Stage a new pending order in the caller's transaction. Does not commit."""
    order = Order(
        items=items,
        total_amount=total_amount,
        declared_amount=declared_amount,
        status=OrderStatus.PENDING,
    )
    db.add(order)
    await db.flush()
    return order


async def get_order(db: AsyncSession, order_id: str) -> Order | None:
    result = await db.execute(select(Order).where(Order.id == order_id))
    return result.scalar_one_or_none()


async def list_orders(db: AsyncSession, status: OrderStatus | None = None) -> list[Order]:
    """All orders, newest first. Optional status filter."""
    query = select(Order).order_by(Order.created_at.desc())
    if status:
        query = query.where(Order.status == status)
    result = await db.execute(query)
    return list(result.scalars().all())


async def update_order_status(db: AsyncSession, order_id: str, status: OrderStatus | str) -> Order:
    """Set any of the four statuses. Transitions are not policed, and stock is not restored."""
    try:
        new_status = OrderStatus(status)
    except ValueError:
        raise InvalidRequest(
            f"Unknown status '{status}'. Expected one of: {', '.join(s.value for s in OrderStatus)}."
        ) from None

    order = await get_order(db, order_id)
    if order is None:
        raise OrderNotFound(order_id)

    order.status = new_status
    try:
        await db.commit()
        await db.refresh(order)
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.exception("Status update failed for order %s", order_id)
        raise StorageError("Could not update order status.") from exc
    logger.info("Order %s status -> %s", order_id, new_status.value)
    return order
