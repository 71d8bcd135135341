"""
OrderDesk — Menu catalog data access

Reads for display go through get_menu_item / list_menu_items. Reads that feed
a reservation decision go through lock_menu_item, which always hits the
database (row lock where supported) and never trusts the session's identity map.
"""
import logging
from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.attributes import set_committed_value

from orderdesk.core.errors import InsufficientStock, InvalidRequest, ItemNotFound, StorageError
from orderdesk.core.optimistic_lock import StaleDataError
from orderdesk.models.menu import MenuItem, MenuOption, StockMovement, StockMovementKind

logger = logging.getLogger(__name__)


async def get_menu_item(db: AsyncSession, menu_id: str) -> MenuItem | None:
    result = await db.execute(select(MenuItem).where(MenuItem.id == menu_id))
    return result.scalar_one_or_none()


async def list_menu_items(db: AsyncSession) -> list[MenuItem]:
    result = await db.execute(select(MenuItem).order_by(MenuItem.created_at, MenuItem.name))
    return list(result.scalars().all())


async def lock_menu_item(db: AsyncSession, menu_id: str) -> MenuItem | None:
    """Fresh read of one row for a read-modify-write inside the caller's transaction."""
    result = await db.execute(
        select(MenuItem)
        .where(MenuItem.id == menu_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def decrement_stock(db: AsyncSession, item: MenuItem, amount: int) -> MenuItem:
    """
    Guarded decrement, staged in the caller's transaction (no commit).

    Refuses outright when the observed stock is too low, and the UPDATE only
    matches if nobody wrote the row since we read it (version_id) and the
    stored stock still covers the amount. Zero matched rows → StaleDataError.
    """
    if amount <= 0:
        raise InvalidRequest(f"Decrement amount must be positive, got {amount}.")
    if item.stock < amount:
        raise InsufficientStock(item.id, available=item.stock, requested=amount, name=item.name)

    result = await db.execute(
        update(MenuItem)
        .where(
            MenuItem.id == item.id,
            MenuItem.version_id == item.version_id,
            MenuItem.stock >= amount,
        )
        .values(stock=MenuItem.stock - amount, version_id=MenuItem.version_id + 1)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        raise StaleDataError(f"Menu item '{item.id}' changed concurrently (seen v{item.version_id}).")

    # Mirror the write without marking the instance dirty.
    set_committed_value(item, "stock", item.stock - amount)
    set_committed_value(item, "version_id", item.version_id + 1)
    return item


async def set_stock(db: AsyncSession, menu_id: str, stock: int) -> MenuItem:
    """
    Admin overwrite. A single-row UPDATE in its own transaction; it bumps
    version_id so any placement that read the old row fails its guard.
    """
    if stock is None or stock < 0:
        raise InvalidRequest("Stock must be a non-negative integer.")

    try:
        result = await db.execute(
            update(MenuItem)
            .where(MenuItem.id == menu_id)
            .values(stock=stock, version_id=MenuItem.version_id + 1)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            await db.rollback()
            raise ItemNotFound(menu_id)
        db.add(StockMovement(menu_item_id=menu_id, kind=StockMovementKind.ADMIN_SET, quantity=stock))
        await db.commit()
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.exception("Stock overwrite failed for %s", menu_id)
        raise StorageError("Could not update stock.") from exc

    logger.info("Stock for %s set to %d by admin", menu_id, stock)
    result = await db.execute(
        select(MenuItem).where(MenuItem.id == menu_id).execution_options(populate_existing=True)
    )
    return result.scalar_one()


async def create_menu_item(
    db: AsyncSession,
    name: str,
    price: int,
    stock: int = 0,
    description: str | None = None,
    image: str | None = None,
) -> MenuItem:
    if price < 0 or stock < 0:
        raise InvalidRequest("Price and stock must be non-negative integers.")
    item = MenuItem(name=name, price=price, stock=stock, description=description, image=image)
    db.add(item)
    try:
        await db.commit()
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.exception("Creating menu item %r failed", name)
        raise StorageError("Could not create menu item.") from exc
    await db.refresh(item)
    return item


async def list_options(db: AsyncSession, active_only: bool = True) -> list[MenuOption]:
    query = select(MenuOption).order_by(MenuOption.key)
    if active_only:
        query = query.where(MenuOption.is_active.is_(True))
    result = await db.execute(query)
    return list(result.scalars().all())


async def resolve_options(db: AsyncSession, selected: dict[str, bool] | None) -> list[tuple[str, int]]:
    """Map the selected option keys to (key, surcharge), rejecting unknown keys."""
    keys = sorted(k for k, on in (selected or {}).items() if on)
    if not keys:
        return []
    result = await db.execute(
        select(MenuOption).where(MenuOption.key.in_(keys), MenuOption.is_active.is_(True))
    )
    found = {opt.key: opt.surcharge for opt in result.scalars().all()}
    unknown = [k for k in keys if k not in found]
    if unknown:
        raise InvalidRequest(f"Unknown option(s): {', '.join(unknown)}.", options=unknown)
    return [(k, found[k]) for k in keys]
