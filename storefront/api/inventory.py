"""
Storefront — Inventory routes
"""
from fastapi import APIRouter, Depends, status

from storefront.api.deps import get_actor, require_feature
from storefront.core.permissions import Feature
from storefront.db.inventory_ops import (
    create_inventory_item,
    delete_inventory_item,
    get_all_inventory,
    get_low_stock_items,
    restock,
    set_stock,
    update_inventory_item,
)
from storefront.db.store import RedisStore, get_store
from storefront.models.inventory import InventoryItem
from storefront.models.user import Actor
from storefront.schemas.inventory import (
    InventoryCreateRequest,
    InventoryListResponse,
    InventoryUpdateRequest,
    RestockRequest,
    SetStockRequest,
    StockLevelResponse,
)

router = APIRouter(prefix="/admin/inventory", tags=["inventory"])
manage_inventory = require_feature(Feature.MANAGE_INVENTORY)


@router.get("", response_model=InventoryListResponse)
async def list_inventory(_: Actor = Depends(manage_inventory), store: RedisStore = Depends(get_store)):
    return InventoryListResponse(items=await get_all_inventory(store))


@router.get("/low-stock", response_model=InventoryListResponse)
async def low_stock(_: Actor = Depends(get_actor), store: RedisStore = Depends(get_store)):
    """Any signed-in staff member; drives the dashboard's low-stock banner."""
    return InventoryListResponse(items=await get_low_stock_items(store))


@router.post("", response_model=InventoryItem, status_code=status.HTTP_201_CREATED)
async def create_item(
    payload: InventoryCreateRequest,
    _: Actor = Depends(manage_inventory),
    store: RedisStore = Depends(get_store),
):
    return await create_inventory_item(
        store, payload.name, payload.unit, payload.current_stock, payload.low_stock_threshold
    )


@router.put("/{slug}", response_model=InventoryItem)
async def update_item(
    slug: str,
    payload: InventoryUpdateRequest,
    _: Actor = Depends(manage_inventory),
    store: RedisStore = Depends(get_store),
):
    return await update_inventory_item(store, slug, **payload.model_dump())


@router.delete("/{slug}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_item(slug: str, _: Actor = Depends(manage_inventory), store: RedisStore = Depends(get_store)):
    await delete_inventory_item(store, slug)


@router.post("/{slug}/restock", response_model=StockLevelResponse)
async def restock_item(
    slug: str,
    payload: RestockRequest,
    _: Actor = Depends(manage_inventory),
    store: RedisStore = Depends(get_store),
):
    new_stock = await restock(store, slug, payload.amount)
    return StockLevelResponse(slug=slug, current_stock=new_stock)


@router.post("/{slug}/set-stock", response_model=InventoryItem)
async def set_item_stock(
    slug: str,
    payload: SetStockRequest,
    _: Actor = Depends(manage_inventory),
    store: RedisStore = Depends(get_store),
):
    return await set_stock(store, slug, payload.current_stock)
