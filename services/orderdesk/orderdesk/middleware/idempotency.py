"""
OrderDesk — Idempotency Key Middleware

Implements RFC-style idempotency using Redis for order-creating endpoints:
  - Cache hit    → return cached response immediately (no order placed)
  - In flight    → 409, the first request with this key is still running
  - Cache miss   → execute handler, store a successful response for 24h
Only 2xx responses are stored: a failed placement changed nothing, so the
client may retry it under the same key.
"""
import json
import logging
from fastapi import Request, Response
from fastapi.responses import JSONResponse
from redis.exceptions import RedisError
from starlette.middleware.base import BaseHTTPMiddleware

from orderdesk.core.config import get_settings
from orderdesk.core.redis_client import get_redis

settings = get_settings()
logger = logging.getLogger(__name__)

IDEMPOTENCY_PREFIX = "idempotent:"
IDEMPOTENCY_METHODS = {"POST"}
IDEMPOTENCY_PATHS = {"/orders", "/orders/", "/cart/checkout", "/cart/checkout/"}


class IdempotencyMiddleware(BaseHTTPMiddleware):
    """
    Applies to order-creating endpoints.
    Reads Idempotency-Key header and either:
      1. Returns cached response (replay)
      2. Executes handler and caches the response
    Redis being unavailable degrades to plain, non-idempotent handling.
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        if not settings.IDEMPOTENCY_ENABLED:
            return await call_next(request)

        if request.method not in IDEMPOTENCY_METHODS:
            return await call_next(request)

        if request.url.path not in IDEMPOTENCY_PATHS:
            return await call_next(request)

        idem_key = request.headers.get("Idempotency-Key")
        if not idem_key:
            return await call_next(request)

        redis = get_redis()
        # Keys are per client session: two clients reusing a key never see each other's order.
        session_id = request.headers.get("X-Session-Id", "anonymous")
        scope = f"{request.url.path.rstrip('/')}:{session_id}"
        cache_key = f"{IDEMPOTENCY_PREFIX}{scope}:{idem_key}"
        lock_key = f"{cache_key}:lock"

        try:
            # Cache HIT → replay stored response
            cached = await redis.get(cache_key)
            if cached:
                data = json.loads(cached)
                return JSONResponse(
                    content=data["body"],
                    status_code=data["status_code"],
                    headers={"X-Idempotency-Replay": "true"},
                )
            acquired = await redis.set(
                lock_key, "1", nx=True, ex=int(settings.ORDER_PLACEMENT_TIMEOUT_SECONDS) + 5
            )
        except RedisError as exc:
            logger.warning("Idempotency store unavailable, processing without it: %s", exc)
            return await call_next(request)

        if not acquired:
            return JSONResponse(
                status_code=409,
                content={
                    "detail": "A request with this Idempotency-Key is already being processed.",
                    "code": "idempotency_in_progress",
                },
            )

        try:
            # Cache MISS → proceed to handler
            response = await call_next(request)

            # Capture and cache response body
            body_bytes = b""
            async for chunk in response.body_iterator:
                body_bytes += chunk

            if 200 <= response.status_code < 300:
                try:
                    body = json.loads(body_bytes)
                    await redis.setex(
                        cache_key,
                        settings.IDEMPOTENCY_KEY_TTL_SECONDS,
                        json.dumps({"body": body, "status_code": response.status_code}),
                    )
                except (ValueError, RedisError) as exc:
                    logger.warning("Could not store idempotent response for %s: %s", idem_key, exc)
        finally:
            try:
                await redis.delete(lock_key)
            except RedisError as exc:
                logger.warning("Could not release idempotency lock %s: %s", lock_key, exc)

        return Response(
            content=body_bytes,
            status_code=response.status_code,
            media_type=response.media_type,
            headers=dict(response.headers),
        )
