"""
Public HTTP surface: order placement, tracking, menu, health.
"""
import uuid

import pytest

from storefront.db.reconciler import reconcile_menu_availability
from tests.conftest import add_menu_item, add_stock

ORDER_BODY = {
    "customer_name": "Dana Pike",
    "customer_phone": "555-0100",
    "customer_email": "dana@example.com",
    "items": [{"slug": "latte", "quantity": 2, "allergy_notes": "oat milk please"}],
    "pickup_time": "12:30",
}


@pytest.mark.asyncio
async def test_place_and_track_order(client, store):
    await add_menu_item(store, "Latte", "4.50", [("Milk", "200", "ml")])

    r = await client.post("/orders", json=ORDER_BODY)
    assert r.status_code == 201, r.text
    placed = r.json()
    assert placed["status"] == "pending"
    assert placed["total"] == 10.17

    r = await client.get(f"/orders/{placed['order_id']}")
    assert r.status_code == 200
    tracked = r.json()
    assert tracked["items"][0]["name"] == "Latte"
    assert tracked["items"][0]["allergy_notes"] == "oat milk please"
    assert "customer_email" not in tracked


@pytest.mark.asyncio
async def test_unavailable_item_is_a_conflict(client, store):
    r = await client.post("/orders", json=ORDER_BODY)
    assert r.status_code == 409
    assert r.json()["code"] == "items_unavailable"
    assert r.json()["unavailable_items"] == ["latte"]


@pytest.mark.asyncio
async def test_invalid_body_is_rejected(client):
    r = await client.post("/orders", json={**ORDER_BODY, "items": []})
    assert r.status_code == 422


@pytest.mark.asyncio
async def test_unknown_order_is_404(client):
    r = await client.get("/orders/does-not-exist")
    assert r.status_code == 404
    assert r.json()["code"] == "not_found"


@pytest.mark.asyncio
async def test_idempotency_key_replays_first_response(client, store, redis_client):
    await add_menu_item(store, "Latte", "4.50", [])
    headers = {"Idempotency-Key": str(uuid.uuid4())}

    first = await client.post("/orders", json=ORDER_BODY, headers=headers)
    second = await client.post("/orders", json=ORDER_BODY, headers=headers)

    assert first.status_code == second.status_code == 201
    assert second.headers.get("X-Idempotency-Replay") == "true"
    assert first.json()["order_id"] == second.json()["order_id"]
    assert await redis_client.zcard("GSI1#ORDERS") == 1


@pytest.mark.asyncio
async def test_public_menu_hides_unavailable_items(client, store):
    await add_stock(store, "Milk", "ml", 0)
    await add_menu_item(store, "Latte", "4.50", [("Milk", "200", "ml")])
    await add_menu_item(store, "Scone", "2.75", [], category="Bakery")
    await reconcile_menu_availability(store)

    r = await client.get("/menu")
    assert [i["slug"] for i in r.json()["items"]] == ["scone"]

    r = await client.get("/menu", params={"category": "bakery"})
    assert [i["slug"] for i in r.json()["items"]] == ["scone"]


@pytest.mark.asyncio
async def test_health_and_root(client):
    r = await client.get("/health")
    assert r.status_code == 200
    assert r.json()["dependencies"]["redis"] == "ok"

    r = await client.get("/")
    assert r.json()["service"] == "storefront"
