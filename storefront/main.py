"""
Storefront — FastAPI application entrypoint
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_fastapi_instrumentator import Instrumentator

from storefront.api import admin_orders, auth, health, inventory, menu, orders, stats, users
from storefront.core.config import get_settings
from storefront.core.errors import StorefrontError
from storefront.core.redis_client import close_redis
from storefront.db.store import get_store
from storefront.db.user_ops import ensure_default_super_admin
from storefront.middleware.auth import JWTAuthMiddleware
from storefront.middleware.idempotency import IdempotencyMiddleware
from storefront.middleware.rate_limiter import SlidingWindowRateLimiter

settings = get_settings()

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: make sure there is someone who can sign in
    await ensure_default_super_admin(get_store(), settings)
    yield
    # Shutdown
    await close_redis()


app = FastAPI(
    title="Storefront Orders",
    description="Order lifecycle, inventory and menu management for a pickup storefront.",
    version=settings.SERVICE_VERSION,
    lifespan=lifespan,
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url=None,
)

# ── CORS ──────────────────────────────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ── Rate limiting, idempotency, auth ─────────────────────────────────────────
app.add_middleware(SlidingWindowRateLimiter)
app.add_middleware(IdempotencyMiddleware)
app.add_middleware(JWTAuthMiddleware)

# ── Prometheus Metrics ────────────────────────────────────────────────────────
if settings.METRICS_ENABLED:
    Instrumentator().instrument(app).expose(app, endpoint="/metrics")


# ── Domain errors ─────────────────────────────────────────────────────────────
@app.exception_handler(StorefrontError)
async def storefront_error_handler(request: Request, exc: StorefrontError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


# ── Routers ───────────────────────────────────────────────────────────────────
app.include_router(health.router)
app.include_router(auth.router)
app.include_router(orders.router)
app.include_router(menu.router)
app.include_router(admin_orders.router)
app.include_router(inventory.router)
app.include_router(stats.router)
app.include_router(users.router)


@app.get("/")
async def root():
    return {"service": settings.SERVICE_NAME, "version": settings.SERVICE_VERSION}
