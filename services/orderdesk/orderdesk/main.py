"""
OrderDesk — FastAPI entrypoint
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_fastapi_instrumentator import Instrumentator

from orderdesk.core.config import get_settings
from orderdesk.core.errors import OrderDeskError
from orderdesk.core.redis_client import close_redis
from orderdesk.db.database import engine, Base, AsyncSessionLocal
from orderdesk.db.seed import seed_defaults
from orderdesk.middleware.idempotency import IdempotencyMiddleware
from orderdesk.models import menu, order  # noqa: F401  (register tables on Base.metadata)
from orderdesk.api import admin, cart, health, menu as menu_api, orders

settings = get_settings()

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: create tables, seed default menu/options when empty
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    if settings.SEED_ON_STARTUP:
        async with AsyncSessionLocal() as session:
            await seed_defaults(session)
    yield
    # Shutdown
    await close_redis()
    await engine.dispose()


app = FastAPI(
    title="OrderDesk",
    description="Point-of-sale ordering: atomic stock reservation and order recording.",
    version=settings.SERVICE_VERSION,
    lifespan=lifespan,
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url=None,
)

app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_credentials=True,
                   allow_methods=["*"], allow_headers=["*"])
app.add_middleware(IdempotencyMiddleware)

if settings.METRICS_ENABLED:
    Instrumentator().instrument(app).expose(app, endpoint="/metrics")


@app.exception_handler(OrderDeskError)
async def orderdesk_error_handler(request: Request, exc: OrderDeskError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


app.include_router(menu_api.router)
app.include_router(cart.router)
app.include_router(orders.router)
app.include_router(admin.router)
app.include_router(health.router)


@app.get("/")
async def root():
    return {"service": settings.SERVICE_NAME, "version": settings.SERVICE_VERSION}
