"""
Inventory ledger: creation, restock, set-stock and their failure modes.
"""
from decimal import Decimal

import pytest

from storefront.core.errors import Conflict, NotFound, ValidationFailed
from storefront.db.inventory_ops import (
    delete_inventory_item,
    get_all_inventory,
    get_inventory_item,
    get_low_stock_items,
    restock,
    set_stock,
    update_inventory_item,
)
from tests.conftest import add_stock


@pytest.mark.asyncio
async def test_create_derives_slug_from_name(store):
    item = await add_stock(store, "Whole Milk", "ml", 5000, 500)
    assert item.slug == "whole-milk"
    stored = await get_inventory_item(store, "whole-milk")
    assert stored.current_stock == Decimal(5000)
    assert stored.low_stock_threshold == Decimal(500)


@pytest.mark.asyncio
async def test_duplicate_name_conflicts(store):
    await add_stock(store, "Milk", "ml", 100)
    with pytest.raises(Conflict):
        await add_stock(store, "milk", "ml", 200)


@pytest.mark.asyncio
async def test_list_is_sorted_by_name(store):
    await add_stock(store, "Sugar", "g", 10)
    await add_stock(store, "Espresso Beans", "g", 10)
    await add_stock(store, "Milk", "ml", 10)
    assert [i.name for i in await get_all_inventory(store)] == ["Espresso Beans", "Milk", "Sugar"]


@pytest.mark.asyncio
async def test_restock_adds_and_stamps(store):
    created = await add_stock(store, "Milk", "ml", 100)
    assert await restock(store, "milk", Decimal(250)) == Decimal(350)
    item = await get_inventory_item(store, "milk")
    assert item.current_stock == Decimal(350)
    assert item.last_restocked_at >= created.last_restocked_at


@pytest.mark.asyncio
async def test_restock_rejects_non_positive_amounts(store):
    await add_stock(store, "Milk", "ml", 100)
    with pytest.raises(ValidationFailed):
        await restock(store, "milk", Decimal(0))
    with pytest.raises(ValidationFailed):
        await restock(store, "milk", Decimal(-5))
    assert (await get_inventory_item(store, "milk")).current_stock == Decimal(100)


@pytest.mark.asyncio
async def test_restock_and_set_stock_on_missing_item(store):
    with pytest.raises(NotFound):
        await restock(store, "ghost", Decimal(5))
    with pytest.raises(NotFound):
        await set_stock(store, "ghost", Decimal(5))
    assert await get_inventory_item(store, "ghost") is None


@pytest.mark.asyncio
async def test_set_stock(store):
    await add_stock(store, "Milk", "ml", 100)
    item = await set_stock(store, "milk", Decimal(0))
    assert item.current_stock == Decimal(0)
    with pytest.raises(ValidationFailed):
        await set_stock(store, "milk", Decimal(-1))


@pytest.mark.asyncio
async def test_low_stock(store):
    await add_stock(store, "Milk", "ml", 100, threshold=500)
    await add_stock(store, "Sugar", "g", 1000, threshold=100)
    assert [i.slug for i in await get_low_stock_items(store)] == ["milk"]


@pytest.mark.asyncio
async def test_update_and_delete(store):
    await add_stock(store, "Milk", "ml", 100)
    item = await update_inventory_item(store, "milk", unit="l", low_stock_threshold=Decimal(2))
    assert item.unit == "l"
    assert item.current_stock == Decimal(100)
    with pytest.raises(ValidationFailed):
        await update_inventory_item(store, "milk")

    await delete_inventory_item(store, "milk")
    assert await get_all_inventory(store) == []
    with pytest.raises(NotFound):
        await delete_inventory_item(store, "milk")


@pytest.mark.asyncio
async def test_fractional_restocks_stay_exact(store):
    await add_stock(store, "Cream", "l", "0.7")
    assert await restock(store, "cream", Decimal("0.1")) == Decimal("0.8")
    assert (await get_inventory_item(store, "cream")).current_stock == Decimal("0.8")
