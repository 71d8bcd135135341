"""
OrderDesk — Optimistic locking retry decorator

Uses exponential backoff + jitter to handle StaleDataError.
StaleDataError occurs when version_id in DB was incremented by another
concurrent transaction between our read and write, or when the database
itself aborted us for a serialization failure / deadlock.
"""
import asyncio
import random
import functools
import logging

from sqlalchemy.exc import DBAPIError

from orderdesk.core.config import get_settings
from orderdesk.core.errors import Conflict

settings = get_settings()
logger = logging.getLogger(__name__)

# serialization_failure, deadlock_detected
RETRYABLE_SQLSTATES = {"40001", "40P01"}


class StaleDataError(Exception):
    """Raised when an optimistic lock conflict is detected:
    the version_id in the DB changed between our read and update,
    meaning another concurrent transaction won the race.
    """
    pass


def is_retryable_db_error(exc: DBAPIError) -> bool:
    orig = getattr(exc, "orig", None)
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if sqlstate in RETRYABLE_SQLSTATES:
        return True
    return "database is locked" in str(orig or exc)


def with_optimistic_retry(max_retries: int | None = None):
    """
    Decorator for async functions that perform optimistic-lock DB writes.
    On StaleDataError, retries with exponential backoff + jitter. The wrapped
    function must roll back its own transaction before raising, so each
    attempt starts from fresh reads. Exhausted retries surface as Conflict.

    Usage:
        @with_optimistic_retry()
        async def place_order(db, ...):
            ...
    """

    def decorator(func):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            _max = max_retries or settings.OPT_LOCK_MAX_RETRIES
            for attempt in range(1, _max + 1):
                try:
                    return await func(*args, **kwargs)
                except StaleDataError as exc:
                    if attempt == _max:
                        logger.error(
                            "Optimistic lock conflict unresolved after %d attempts for %s",
                            _max, func.__name__,
                        )
                        raise Conflict(
                            "Concurrent update detected; please retry the request."
                        ) from exc
                    # Exponential backoff: base * 2^attempt + jitter
                    base_delay = settings.OPT_LOCK_BASE_DELAY_MS / 1000.0
                    max_delay = settings.OPT_LOCK_MAX_DELAY_MS / 1000.0
                    jitter = random.uniform(0, settings.OPT_LOCK_JITTER_MS / 1000.0)
                    delay = min(base_delay * (2 ** attempt), max_delay) + jitter
                    logger.warning(
                        "StaleDataError on attempt %d/%d (%s), retrying in %.3fs",
                        attempt, _max, exc, delay,
                    )
                    await asyncio.sleep(delay)
        return wrapper
    return decorator
