"""
OrderDesk — Redis client singleton

Redis only backs the Idempotency-Key replay store; ordering itself never
depends on it.
"""
import asyncio

import redis.asyncio as aioredis
from orderdesk.core.config import get_settings

settings = get_settings()

_redis_client: aioredis.Redis | None = None


def get_redis() -> aioredis.Redis:
    global _redis_client
    if _redis_client is None:
        _redis_client = aioredis.from_url(
            settings.redis_url,
            decode_responses=True,
            socket_connect_timeout=settings.HEALTH_CHECK_TIMEOUT,
            socket_timeout=settings.HEALTH_CHECK_TIMEOUT,
        )
    return _redis_client


async def ping_redis(redis: aioredis.Redis, timeout: float) -> None:
    """Raise if Redis does not answer PING within timeout seconds."""
    if not await asyncio.wait_for(redis.ping(), timeout=timeout):
        raise ConnectionError("Redis PING returned a falsy reply")


async def close_redis():
    global _redis_client
    if _redis_client:
        await _redis_client.aclose()
        _redis_client = None
