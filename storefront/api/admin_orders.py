"""
Storefront — Staff order routes
"""
from fastapi import APIRouter, Depends, Query

from storefront.api.deps import get_actor, require_feature
from storefront.core.permissions import Feature, next_status_actions
from storefront.db.audit_log import get_audit_log
from storefront.db.order_lifecycle import request_transition
from storefront.db.order_ops import get_order, list_active_orders, list_finished_orders
from storefront.db.store import RedisStore, get_store
from storefront.models.order import Order
from storefront.models.user import Actor
from storefront.schemas.order import (
    AuditLogResponse,
    OrderListResponse,
    StatusActionResponse,
    StatusUpdateRequest,
)

router = APIRouter(prefix="/admin/orders", tags=["admin-orders"])


@router.get("", response_model=OrderListResponse)
async def active_orders(
    _: Actor = Depends(require_feature(Feature.VIEW_LIVE_ORDERS)),
    store: RedisStore = Depends(get_store),
):
    return OrderListResponse(orders=await list_active_orders(store))


@router.get("/history", response_model=OrderListResponse)
async def order_history(
    limit: int | None = Query(None),
    _: Actor = Depends(require_feature(Feature.VIEW_ORDER_HISTORY)),
    store: RedisStore = Depends(get_store),
):
    return OrderListResponse(orders=await list_finished_orders(store, limit))


@router.patch("/{order_id}/status", response_model=Order)
async def update_status(
    order_id: str,
    payload: StatusUpdateRequest,
    actor: Actor = Depends(get_actor),
    store: RedisStore = Depends(get_store),
):
    """The permission tables decide per (role, from, to); no feature gate here."""
    return await request_transition(store, order_id, payload.status, actor)


@router.get("/{order_id}/logs", response_model=AuditLogResponse)
async def order_logs(
    order_id: str,
    _: Actor = Depends(require_feature(Feature.VIEW_LIVE_ORDERS)),
    store: RedisStore = Depends(get_store),
):
    """404 for an unknown order, so an empty log always means no changes yet."""
    await get_order(store, order_id)
    return AuditLogResponse(logs=await get_audit_log(store, order_id))


@router.get("/{order_id}/actions", response_model=list[StatusActionResponse])
async def order_actions(
    order_id: str,
    actor: Actor = Depends(require_feature(Feature.VIEW_LIVE_ORDERS)),
    store: RedisStore = Depends(get_store),
):
    order = await get_order(store, order_id)
    return [
        StatusActionResponse(status=a.status, label=a.label, confirm_message=a.confirm_message)
        for a in next_status_actions(order.status, actor.role)
    ]
