"""
Storefront — Optimistic locking retry decorator

Store writes guard their preconditions with WATCH/MULTI/EXEC. When another
client touches a watched key between our read and EXEC, redis-py raises
WatchError; the whole read-check-write is then retried with exponential
backoff + jitter.
"""
import asyncio
import functools
import logging
import random

from redis.exceptions import WatchError

from storefront.core.config import get_settings

settings = get_settings()
logger = logging.getLogger(__name__)


def with_optimistic_retry(max_retries: int | None = None):
    """
    Decorator for async functions that perform WATCH-guarded store writes.
    On WatchError, retries with exponential backoff + jitter.

    Usage:
        @with_optimistic_retry()
        async def update_if_exists(self, key, changes):
            ...
    """
    _max = max_retries or settings.OPT_LOCK_MAX_RETRIES

    def decorator(func):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            for attempt in range(1, _max + 1):
                try:
                    return await func(*args, **kwargs)
                except WatchError:
                    if attempt == _max:
                        logger.error(
                            "Optimistic lock conflict unresolved after %d retries for %s",
                            _max, func.__name__,
                        )
                        raise
                    base_delay = settings.OPT_LOCK_BASE_DELAY_MS / 1000.0
                    max_delay = settings.OPT_LOCK_MAX_DELAY_MS / 1000.0
                    jitter = random.uniform(0, settings.OPT_LOCK_JITTER_MS / 1000.0)
                    delay = min(base_delay * (2 ** attempt), max_delay) + jitter
                    logger.warning(
                        "WatchError on attempt %d/%d for %s, retrying in %.3fs",
                        attempt, _max, func.__name__, delay,
                    )
                    await asyncio.sleep(delay)
        return wrapper
    return decorator
