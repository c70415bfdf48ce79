"""
Storefront — Order audit log

One entry per successful status change, appended to LOG#<orderId>. Entries
are never updated or deleted.
"""
from storefront.db.store import LOG, RedisStore, entity_key
from storefront.models import utc_now
from storefront.models.order import AuditLogEntry, OrderStatus
from storefront.models.user import Actor


def log_key(order_id: str) -> str:
    return entity_key(LOG, order_id)


async def record_transition(
    store: RedisStore,
    order_id: str,
    actor: Actor,
    from_status: OrderStatus,
    to_status: OrderStatus,
    note: str | None = None,
) -> AuditLogEntry:
    entry = AuditLogEntry(
        order_id=order_id,
        timestamp=utc_now(),
        from_status=from_status,
        to_status=to_status,
        actor_username=actor.username,
        actor_role=actor.role.value,
        note=note,
    )
    await store.append(log_key(order_id), entry.model_dump(mode="json"))
    return entry


async def get_audit_log(store: RedisStore, order_id: str) -> list[AuditLogEntry]:
    """Entries for an order, oldest first."""
    return [AuditLogEntry.model_validate(r) for r in await store.read_list(log_key(order_id))]
