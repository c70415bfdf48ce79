"""
Storefront — Order records

[TRANSACTIONAL DATA] — orders are never deleted; completed and cancelled
orders are kept for history. Line items are snapshots taken when the order is
placed and are never rewritten afterwards.
"""
from datetime import datetime
from enum import Enum as PyEnum

from pydantic import BaseModel, Field

from storefront.models import DecimalNumber


class OrderStatus(str, PyEnum):
    PENDING = "pending"
    APPROVED = "approved"
    PREPARING = "preparing"
    PREPARED = "prepared"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# The forward path. CANCELLED is a side exit reachable from any
# non-terminal status.
STATUS_SEQUENCE: tuple[OrderStatus, ...] = (
    OrderStatus.PENDING,
    OrderStatus.APPROVED,
    OrderStatus.PREPARING,
    OrderStatus.PREPARED,
    OrderStatus.COMPLETED,
)

TERMINAL_STATUSES = frozenset({OrderStatus.COMPLETED, OrderStatus.CANCELLED})


class PaymentMethod(str, PyEnum):
    ONLINE = "online"
    PAY_AT_PICKUP = "pay_at_pickup"


class OrderLineItem(BaseModel):
    slug: str
    name: str
    price: DecimalNumber
    quantity: int = Field(..., ge=1)
    allergy_notes: str = ""


class Order(BaseModel):
    order_id: str
    customer_name: str
    customer_phone: str
    customer_email: str
    items: list[OrderLineItem]
    subtotal: DecimalNumber
    tax: DecimalNumber
    total: DecimalNumber
    pickup_time: str
    special_instructions: str = ""
    payment_method: PaymentMethod = PaymentMethod.PAY_AT_PICKUP
    status: OrderStatus = OrderStatus.PENDING
    created_at: datetime
    updated_at: datetime


class AuditLogEntry(BaseModel):
    """One status change. Append-only."""

    order_id: str
    timestamp: datetime
    from_status: OrderStatus
    to_status: OrderStatus
    actor_username: str
    actor_role: str
    note: str | None = None
