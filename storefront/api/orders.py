"""
Storefront — Public order routes

Placing an order only records it as pending; nothing is reserved or
deducted until staff approve it.
"""
from fastapi import APIRouter, Depends, status

from storefront.db.order_ops import create_order, get_order
from storefront.db.store import RedisStore, get_store
from storefront.schemas.order import OrderPlacedResponse, OrderRequest, OrderTrackingResponse

router = APIRouter(prefix="/orders", tags=["orders"])


@router.post("", response_model=OrderPlacedResponse, status_code=status.HTTP_201_CREATED)
async def place_order(payload: OrderRequest, store: RedisStore = Depends(get_store)):
    """Idempotency enforced by IdempotencyMiddleware when a key is sent."""
    order = await create_order(store, payload)
    return OrderPlacedResponse(order_id=order.order_id, status=order.status, total=order.total)


@router.get("/{order_id}", response_model=OrderTrackingResponse)
async def track_order(order_id: str, store: RedisStore = Depends(get_store)):
    return OrderTrackingResponse.from_order(await get_order(store, order_id))
