"""
Shared fixtures: an in-memory Redis per test, a store bound to it, an ASGI
client for the app, and helpers to seed staff, stock and menu items.
"""
from decimal import Decimal

import fakeredis
import httpx
import pytest_asyncio

from storefront.core.redis_client import set_redis
from storefront.core.security import create_access_token
from storefront.db.inventory_ops import create_inventory_item
from storefront.db.menu_ops import create_menu_item
from storefront.db.order_ops import create_order
from storefront.db.store import RedisStore
from storefront.main import app
from storefront.models.menu import Ingredient
from storefront.models.user import Actor, UserRole
from storefront.schemas.order import OrderItemRequest, OrderRequest

SUPER_ADMIN = Actor("root", UserRole.SUPER_ADMIN, "Root")
ADMIN = Actor("alice", UserRole.ADMIN, "Alice")
CASHIER = Actor("carl", UserRole.CASHIER, "Carl")
CHEF = Actor("chen", UserRole.CHEF, "Chen")


# ─── Fixtures ──────────────────────────────────────────────────────────────────
@pytest_asyncio.fixture
async def redis_client():
    client = fakeredis.FakeAsyncRedis(server=fakeredis.FakeServer(), decode_responses=True)
    set_redis(client)
    yield client
    set_redis(None)
    await client.aclose()


@pytest_asyncio.fixture
async def store(redis_client):
    return RedisStore(redis_client)


@pytest_asyncio.fixture
async def client(redis_client):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


# ─── Helpers ───────────────────────────────────────────────────────────────────
def auth_headers(actor: Actor) -> dict[str, str]:
    token = create_access_token({"sub": actor.username, "role": actor.role.value, "name": actor.name})
    return {"Authorization": f"Bearer {token}"}


async def add_stock(store: RedisStore, name: str, unit: str, amount, threshold=0):
    return await create_inventory_item(store, name, unit, Decimal(str(amount)), Decimal(str(threshold)))


async def add_menu_item(store: RedisStore, name: str, price, ingredients, category="Coffee"):
    """ingredients: list of (name, quantity, unit) tuples."""
    return await create_menu_item(
        store,
        name=name,
        description=f"{name} from the bar",
        category=category,
        category_slug=category.lower(),
        price=Decimal(str(price)),
        ingredients=[Ingredient(name=n, quantity=q, unit=u) for n, q, u in ingredients],
    )


def order_request(*lines, **overrides) -> OrderRequest:
    """lines: (slug, quantity) tuples."""
    data = {
        "customer_name": "Dana Pike",
        "customer_phone": "555-0100",
        "customer_email": "dana@example.com",
        "items": [OrderItemRequest(slug=slug, quantity=qty) for slug, qty in lines],
        "pickup_time": "12:30",
    }
    data.update(overrides)
    return OrderRequest(**data)


async def place_order(store: RedisStore, *lines):
    return await create_order(store, order_request(*lines))
