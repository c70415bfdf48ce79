"""
Storefront — Order state machine

pending → approved → preparing → prepared → completed, with cancellation as
a side exit. Status only moves forward; skipping steps is allowed for the
roles listed in TRANSITION_ROLES.

The stock checkpoint sits at approval. Any move that crosses it (including
pending → completed in one go) validates the whole order first and deducts
after the status write lands. Cancelling never gives stock back.
"""
import logging

from storefront.core.errors import (
    ConcurrentUpdate,
    Forbidden,
    InsufficientStock,
    InvalidStatus,
    InvalidTransition,
    NotFound,
)
from storefront.core.permissions import can_cancel_order, can_transition_status
from storefront.db.audit_log import record_transition
from storefront.db.order_ops import get_order, update_order_status
from storefront.db.reconciler import reconcile_menu_availability
from storefront.db.stock_ops import deduct_for_order, validate_stock
from storefront.db.store import ConditionalCheckFailed, RedisStore
from storefront.models.order import STATUS_SEQUENCE, Order, OrderStatus
from storefront.models.user import Actor

logger = logging.getLogger(__name__)

CHECKPOINT_INDEX = STATUS_SEQUENCE.index(OrderStatus.APPROVED)


def parse_status(raw: str | OrderStatus) -> OrderStatus:
    try:
        return OrderStatus(raw)
    except ValueError:
        raise InvalidStatus(f'Invalid status "{raw}"', status=str(raw)) from None


async def _commit(store: RedisStore, order: Order, target: OrderStatus) -> Order:
    try:
        return await update_order_status(store, order.order_id, order.status, target)
    except ConditionalCheckFailed as exc:
        if exc.reason == "missing":
            raise NotFound("Order not found", order_id=order.order_id) from None
        raise ConcurrentUpdate(
            "Order status was changed by someone else. Refresh and try again.",
            order_id=order.order_id,
        ) from None


async def request_transition(
    store: RedisStore,
    order_id: str,
    target_status: str | OrderStatus,
    actor: Actor,
) -> Order:
    """
    Move an order to ``target_status`` on behalf of ``actor``.

    Every check runs before anything is written, so a rejected request
    leaves the order, its log and the inventory exactly as they were.
    """
    target = parse_status(target_status)
    order = await get_order(store, order_id)
    current = order.status

    # ── Cancellation ────────────────────────────────────────
    if target == OrderStatus.CANCELLED:
        # Terminal orders fail here too: nobody may cancel them.
        if not can_cancel_order(actor.role, current):
            raise Forbidden(
                f'Role "{actor.role.value}" cannot cancel an order that is "{current.value}".',
                role=actor.role.value,
                from_status=current.value,
                to_status=target.value,
            )
        updated = await _commit(store, order, target)
        await record_transition(store, order_id, actor, current, target, note="Order cancelled")
        logger.info("Order %s cancelled by %s (%s) from %s",
                    order_id, actor.username, actor.role.value, current.value)
        return updated

    # ── Forward move ────────────────────────────────────────
    if current not in STATUS_SEQUENCE:
        raise InvalidStatus(f'Order is in an unknown status "{current.value}"', status=current.value)
    current_index = STATUS_SEQUENCE.index(current)
    target_index = STATUS_SEQUENCE.index(target)
    if target_index <= current_index:
        raise InvalidTransition(current.value, target.value)
    if not can_transition_status(actor.role, current, target):
        raise Forbidden(
            f'Role "{actor.role.value}" cannot move an order from "{current.value}" to "{target.value}".',
            role=actor.role.value,
            from_status=current.value,
            to_status=target.value,
        )

    crosses_checkpoint = current_index < CHECKPOINT_INDEX <= target_index
    if crosses_checkpoint:
        validation = await validate_stock(store, order)
        if not validation.valid:
            logger.info("Order %s: %s rejected, short on %s", order_id, target.value,
                        ", ".join(s.slug for s in validation.insufficient_items))
            raise InsufficientStock(validation.insufficient_items)

    updated = await _commit(store, order, target)
    await record_transition(store, order_id, actor, current, target)
    logger.info("Order %s: %s -> %s by %s (%s)",
                order_id, current.value, target.value, actor.username, actor.role.value)

    if crosses_checkpoint:
        await deduct_for_order(store, order)
        await reconcile_menu_availability(store)
    return updated
