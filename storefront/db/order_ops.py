"""
Storefront — Order records

Orders are indexed in GSI1 partition ORDERS by creation time, so "newest
first" is a reverse lexicographic walk of the partition.
"""
import asyncio
import logging
import uuid
from collections import Counter
from datetime import datetime, time
from decimal import ROUND_HALF_UP, Decimal

from storefront.core.config import get_settings
from storefront.core.errors import ItemsUnavailable, NotFound
from storefront.db.menu_ops import get_menu_item
from storefront.db.store import ORDER, IndexKey, RedisStore, entity_key
from storefront.models import utc_now
from storefront.models.order import TERMINAL_STATUSES, Order, OrderLineItem, OrderStatus
from storefront.schemas.order import DailyStats, OrderRequest, TopItem

settings = get_settings()
logger = logging.getLogger(__name__)

ORDERS_PARTITION = "ORDERS"
CENT = Decimal("0.01")


def order_key(order_id: str) -> str:
    return entity_key(ORDER, order_id)


def to_cents(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def compute_totals(items: list[OrderLineItem]) -> tuple[Decimal, Decimal, Decimal]:
    """(subtotal, tax, total); tax and total are rounded half-up to cents."""
    subtotal = sum((line.price * line.quantity for line in items), Decimal(0))
    tax = to_cents(subtotal * settings.TAX_RATE)
    total = to_cents(subtotal + tax)
    return subtotal, tax, total


async def create_order(store: RedisStore, payload: OrderRequest) -> Order:
    """
    Place a pending order.

    Every referenced menu item must exist and be available right now. Name
    and price are copied from the catalog into the line items; later menu
    edits never reach this order.
    """
    menu_items = await asyncio.gather(*(get_menu_item(store, line.slug) for line in payload.items))

    unavailable = [
        menu_item.name if menu_item else line.slug
        for line, menu_item in zip(payload.items, menu_items)
        if menu_item is None or not menu_item.is_available
    ]
    if unavailable:
        raise ItemsUnavailable(unavailable)

    items = [
        OrderLineItem(
            slug=menu_item.slug,
            name=menu_item.name,
            price=menu_item.price,
            quantity=line.quantity,
            allergy_notes=line.allergy_notes,
        )
        for line, menu_item in zip(payload.items, menu_items)
    ]
    subtotal, tax, total = compute_totals(items)
    now = utc_now()
    order = Order(
        order_id=str(uuid.uuid4()),
        customer_name=payload.customer_name,
        customer_phone=payload.customer_phone,
        customer_email=payload.customer_email,
        items=items,
        subtotal=subtotal,
        tax=tax,
        total=total,
        pickup_time=payload.pickup_time,
        special_instructions=payload.special_instructions,
        payment_method=payload.payment_method,
        status=OrderStatus.PENDING,
        created_at=now,
        updated_at=now,
    )
    await store.put_if_absent(
        order_key(order.order_id),
        order.model_dump(),
        IndexKey(ORDERS_PARTITION, now.isoformat(timespec="microseconds")),
    )
    logger.info("Order %s placed: %d line(s), total %s", order.order_id, len(items), total)
    return order


async def get_order(store: RedisStore, order_id: str) -> Order:
    record = await store.get(order_key(order_id))
    if record is None:
        raise NotFound("Order not found", order_id=order_id)
    return Order.model_validate(record)


async def _all_orders_newest_first(store: RedisStore) -> list[Order]:
    records = await store.query(ORDERS_PARTITION, descending=True)
    return [Order.model_validate(r) for r in records]


async def list_active_orders(store: RedisStore) -> list[Order]:
    """Orders still in progress (not completed or cancelled), newest first."""
    return [o for o in await _all_orders_newest_first(store) if o.status not in TERMINAL_STATUSES]


async def list_finished_orders(store: RedisStore, limit: int | None = None) -> list[Order]:
    """Completed and cancelled orders, newest first; limit is clamped to 1..max."""
    if limit is None:
        limit = settings.ORDER_HISTORY_DEFAULT_LIMIT
    limit = min(max(limit, 1), settings.ORDER_HISTORY_MAX_LIMIT)
    finished = [o for o in await _all_orders_newest_first(store) if o.status in TERMINAL_STATUSES]
    return finished[:limit]


async def update_order_status(
    store: RedisStore, order_id: str, expected: OrderStatus, new_status: OrderStatus
) -> Order:
    """
    Set the status only if it still equals ``expected``.

    Raises ConditionalCheckFailed (reason "missing" or "mismatch") when the
    order vanished or another request changed its status first.
    """
    record = await store.compare_and_set(
        order_key(order_id),
        "status",
        expected.value,
        {"status": new_status, "updated_at": utc_now()},
    )
    return Order.model_validate(record)


async def get_daily_stats(store: RedisStore, now: datetime | None = None) -> DailyStats:
    """Totals for orders placed today (UTC) that have been completed."""
    now = now or utc_now()
    start_of_day = datetime.combine(now.date(), time.min, tzinfo=now.tzinfo)
    orders = [
        o for o in await _all_orders_newest_first(store)
        if o.status == OrderStatus.COMPLETED and o.created_at >= start_of_day
    ]

    revenue = sum((o.total for o in orders), Decimal(0))
    avg = revenue / len(orders) if orders else Decimal(0)

    counts: Counter[str] = Counter()
    names: dict[str, str] = {}
    for order in orders:
        for line in order.items:
            counts[line.slug] += line.quantity
            names.setdefault(line.slug, line.name)

    return DailyStats(
        order_count=len(orders),
        revenue=to_cents(revenue),
        avg_order_value=to_cents(avg),
        top_items=[TopItem(name=names[slug], count=n) for slug, n in counts.most_common(3)],
    )

