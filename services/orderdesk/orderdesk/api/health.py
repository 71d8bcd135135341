"""
OrderDesk — Health endpoint

Probes the database through the catalog table (so a reachable but empty or
unmigrated database shows up) and, when idempotency is on, Redis.
"""
import asyncio
from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import func, select

from orderdesk.core.config import get_settings
from orderdesk.core.redis_client import get_redis, ping_redis
from orderdesk.db.database import engine
from orderdesk.models.menu import MenuItem

settings = get_settings()
router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check():
    deps: dict[str, str] = {}
    healthy = True

    try:
        async with engine.connect() as conn:
            result = await asyncio.wait_for(
                conn.execute(select(func.count()).select_from(MenuItem)),
                timeout=settings.HEALTH_CHECK_TIMEOUT,
            )
            menu_size = result.scalar_one()
        deps["database"] = "ok"
        deps["menu_items"] = str(menu_size)
    except Exception as e:
        deps["database"] = f"error: {str(e)[:100]}"
        healthy = False

    if settings.IDEMPOTENCY_ENABLED:
        try:
            await ping_redis(get_redis(), settings.HEALTH_CHECK_TIMEOUT)
            deps["redis"] = "ok"
        except Exception as e:
            deps["redis"] = f"error: {str(e)[:100]}"
            healthy = False

    return JSONResponse(
        content={
            "status": "healthy" if healthy else "degraded",
            "service": settings.SERVICE_NAME,
            "version": settings.SERVICE_VERSION,
            "dependencies": deps,
        },
        status_code=200 if healthy else 503,
    )
