"""
OrderDesk test fixtures

Every test gets its own SQLite database file (aiosqlite) so concurrent
placements run against a real transactional store.
"""
import os

# Settings are cached on first import; configure before importing orderdesk.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./orderdesk-unused.db")
os.environ.setdefault("METRICS_ENABLED", "false")
os.environ.setdefault("SEED_ON_STARTUP", "false")
os.environ.setdefault("OPT_LOCK_BASE_DELAY_MS", "1")
os.environ.setdefault("OPT_LOCK_JITTER_MS", "5")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import httpx
import pytest
import pytest_asyncio
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from orderdesk.core.cart import CartStore, get_cart_store
from orderdesk.db.catalog import list_menu_items
from orderdesk.db.database import Base, get_db
from orderdesk.db.seed import seed_defaults
from orderdesk.main import app
from orderdesk.models.menu import MenuItem, StockMovement, StockMovementKind
from orderdesk.models.order import Order


class FakeRedis:
    """In-memory stand-in for the handful of redis.asyncio calls OrderDesk makes."""

    def __init__(self):
        self.data: dict[str, str] = {}

    async def get(self, key):
        return self.data.get(key)

    async def setex(self, key, ttl, value):
        self.data[key] = value

    async def set(self, key, value, nx=False, ex=None):
        if nx and key in self.data:
            return None
        self.data[key] = value
        return True

    async def delete(self, key):
        self.data.pop(key, None)

    async def ping(self):
        return True


@pytest_asyncio.fixture
async def engine(tmp_path):
    eng = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'orderdesk.db'}")
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def menu(session_factory) -> dict[str, MenuItem]:
    """Default menu (Americano 2500, Iced Americano 3000, Cafe Latte 3500; stock 10) keyed by name."""
    async with session_factory() as session:
        await seed_defaults(session)
        items = await list_menu_items(session)
    return {item.name: item for item in items}


@pytest.fixture
def read_stock(session_factory):
    async def _read(menu_id: str) -> int:
        async with session_factory() as session:
            result = await session.execute(select(MenuItem.stock).where(MenuItem.id == menu_id))
            return result.scalar_one()
    return _read


@pytest.fixture
def count_orders(session_factory):
    async def _count() -> int:
        async with session_factory() as session:
            result = await session.execute(select(Order))
            return len(result.scalars().all())
    return _count


@pytest.fixture
def ledger_total(session_factory):
    async def _total(menu_id: str) -> int:
        async with session_factory() as session:
            result = await session.execute(
                select(StockMovement).where(
                    StockMovement.menu_item_id == menu_id,
                    StockMovement.kind == StockMovementKind.ORDER_DEDUCTION,
                )
            )
            return sum(m.quantity for m in result.scalars().all())
    return _total


@pytest.fixture
def cart_store():
    return CartStore()


@pytest_asyncio.fixture
async def client(session_factory, menu, cart_store):
    async def _get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_cart_store] = lambda: cart_store
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def fake_redis(monkeypatch):
    fake = FakeRedis()
    monkeypatch.setattr("orderdesk.middleware.idempotency.get_redis", lambda: fake)
    monkeypatch.setattr("orderdesk.api.health.get_redis", lambda: fake)
    return fake
