"""
Menu catalog data-access tests: guarded decrement, admin overwrite, options.
"""
import pytest

from orderdesk.core.errors import InsufficientStock, InvalidRequest, ItemNotFound
from orderdesk.core.optimistic_lock import StaleDataError
from orderdesk.db.catalog import (
    create_menu_item,
    decrement_stock,
    get_menu_item,
    list_menu_items,
    list_options,
    lock_menu_item,
    resolve_options,
    set_stock,
)
from orderdesk.db.seed import seed_defaults
from orderdesk.models.menu import MenuOption, StockMovement, StockMovementKind
from sqlalchemy import select


@pytest.mark.asyncio
async def test_seed_is_idempotent(db, menu):
    await seed_defaults(db)

    items = await list_menu_items(db)
    assert sorted(i.name for i in items) == ["Americano", "Cafe Latte", "Iced Americano"]
    assert {o.key: o.surcharge for o in await list_options(db)} == {"shot": 500, "syrup": 300}


@pytest.mark.asyncio
async def test_get_menu_item_returns_none_for_unknown_id(db, menu):
    assert await get_menu_item(db, "missing") is None
    assert (await get_menu_item(db, menu["Americano"].id)).price == 2500


@pytest.mark.asyncio
async def test_decrement_refuses_to_go_negative(db, menu, read_stock):
    menu_id = menu["Americano"].id
    item = await lock_menu_item(db, menu_id)

    with pytest.raises(InsufficientStock) as exc_info:
        await decrement_stock(db, item, 11)

    assert exc_info.value.available == 10
    await db.rollback()
    assert await read_stock(menu_id) == 10


@pytest.mark.asyncio
async def test_decrement_rejects_non_positive_amount(db, menu):
    item = await lock_menu_item(db, menu["Americano"].id)

    with pytest.raises(InvalidRequest):
        await decrement_stock(db, item, 0)


@pytest.mark.asyncio
async def test_decrement_detects_concurrent_write(db, session_factory, menu, read_stock):
    menu_id = menu["Americano"].id
    item = await lock_menu_item(db, menu_id)
    await db.commit()

    async with session_factory() as admin:
        await set_stock(admin, menu_id, 3)

    with pytest.raises(StaleDataError):
        await decrement_stock(db, item, 2)
    await db.rollback()

    assert await read_stock(menu_id) == 3


@pytest.mark.asyncio
async def test_decrement_updates_row_and_version(db, menu, read_stock):
    item = await lock_menu_item(db, menu["Americano"].id)
    version = item.version_id

    await decrement_stock(db, item, 4)
    await db.commit()

    assert item.stock == 6
    assert item.version_id == version + 1
    assert await read_stock(item.id) == 6


@pytest.mark.asyncio
async def test_set_stock_overwrites_and_records_ledger_entry(db, menu):
    americano = menu["Americano"]

    item = await set_stock(db, americano.id, 25)

    assert item.stock == 25
    assert item.version_id == americano.version_id + 1
    movements = (await db.execute(
        select(StockMovement).where(StockMovement.menu_item_id == americano.id)
    )).scalars().all()
    assert [(m.kind, m.quantity) for m in movements] == [(StockMovementKind.ADMIN_SET, 25)]


@pytest.mark.asyncio
async def test_set_stock_rejects_negative_values(db, menu, read_stock):
    with pytest.raises(InvalidRequest):
        await set_stock(db, menu["Americano"].id, -1)
    assert await read_stock(menu["Americano"].id) == 10


@pytest.mark.asyncio
async def test_set_stock_unknown_item(db, menu):
    with pytest.raises(ItemNotFound):
        await set_stock(db, "missing", 5)


@pytest.mark.asyncio
async def test_create_menu_item(db, menu):
    item = await create_menu_item(db, name="Vanilla Latte", price=4000, stock=5)

    assert item.id
    assert item.version_id == 1
    assert (await get_menu_item(db, item.id)).name == "Vanilla Latte"


@pytest.mark.asyncio
async def test_create_menu_item_rejects_negative_price(db, menu):
    with pytest.raises(InvalidRequest):
        await create_menu_item(db, name="Free money", price=-100)


@pytest.mark.asyncio
async def test_resolve_options_ignores_unselected_and_sorts(db, menu):
    assert await resolve_options(db, {"syrup": True, "shot": True}) == [("shot", 500), ("syrup", 300)]
    assert await resolve_options(db, {"shot": False}) == []
    assert await resolve_options(db, None) == []


@pytest.mark.asyncio
async def test_resolve_options_rejects_unknown_and_inactive_keys(db, menu):
    db.add(MenuOption(key="cream", label="Whipped cream", surcharge=400, is_active=False))
    await db.commit()

    with pytest.raises(InvalidRequest) as exc_info:
        await resolve_options(db, {"shot": True, "cream": True, "gold_leaf": True})

    assert exc_info.value.context["options"] == ["cream", "gold_leaf"]
    assert [o.key for o in await list_options(db)] == ["shot", "syrup"]
    assert [o.key for o in await list_options(db, active_only=False)] == ["cream", "shot", "syrup"]
