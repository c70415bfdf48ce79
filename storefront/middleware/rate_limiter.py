"""
Storefront — Sliding window rate limiter middleware (Redis-backed)

Limits staff login attempts per username (RATE_LIMIT_MAX_ATTEMPTS per
RATE_LIMIT_WINDOW_SECONDS). Uses sorted sets (ZADD/ZREMRANGEBYSCORE/ZCARD)
for a true sliding window.
"""
import json
import logging
import time

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from storefront.core.config import get_settings
from storefront.core.redis_client import get_redis

settings = get_settings()
logger = logging.getLogger(__name__)

RATE_LIMIT_PREFIX = "ratelimit:"
LOGIN_PATHS = ("/auth/login", "/auth/login/")


class SlidingWindowRateLimiter(BaseHTTPMiddleware):
    """
    Applies sliding-window rate limiting ONLY to POST /auth/login.
    Key is the username in the request body; falls back to the client IP
    when the body cannot be parsed.
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        if request.method == "POST" and request.url.path in LOGIN_PATHS:
            # Starlette caches the body, so the route can still read it
            body = await request.body()
            client_host = request.client.host if request.client else "unknown"
            try:
                tracking_key = json.loads(body).get("username") or client_host
            except (ValueError, AttributeError):
                tracking_key = client_host

            redis = get_redis()
            key = f"{RATE_LIMIT_PREFIX}{tracking_key}"
            now = time.time()
            window_start = now - settings.RATE_LIMIT_WINDOW_SECONDS

            pipe = redis.pipeline()
            pipe.zremrangebyscore(key, "-inf", window_start)
            pipe.zcard(key)
            pipe.zadd(key, {str(now): now})
            pipe.expire(key, settings.RATE_LIMIT_WINDOW_SECONDS + 1)
            results = await pipe.execute()

            attempt_count = results[1]  # count before this attempt

            if attempt_count >= settings.RATE_LIMIT_MAX_ATTEMPTS:
                logger.warning("Login rate limit hit for %s", tracking_key)
                return JSONResponse(
                    status_code=429,
                    content={
                        "detail": (
                            f"Too many login attempts. Maximum {settings.RATE_LIMIT_MAX_ATTEMPTS} "
                            f"attempts per {settings.RATE_LIMIT_WINDOW_SECONDS} seconds."
                        ),
                        "retry_after_seconds": settings.RATE_LIMIT_WINDOW_SECONDS,
                    },
                    headers={"Retry-After": str(settings.RATE_LIMIT_WINDOW_SECONDS)},
                )

        return await call_next(request)
