"""
Storefront — Order schemas
"""
from datetime import datetime

from pydantic import BaseModel, EmailStr, Field

from storefront.models import DecimalNumber
from storefront.models.order import AuditLogEntry, Order, OrderLineItem, OrderStatus, PaymentMethod


class OrderItemRequest(BaseModel):
    slug: str = Field(..., min_length=1, examples=["latte"])
    quantity: int = Field(..., ge=1, le=50)
    allergy_notes: str = Field("", max_length=500)


class OrderRequest(BaseModel):
    customer_name: str = Field(..., min_length=1, max_length=120)
    customer_phone: str = Field(..., min_length=1, max_length=40)
    customer_email: EmailStr
    items: list[OrderItemRequest] = Field(..., min_length=1, max_length=50)
    pickup_time: str = Field(..., min_length=1, examples=["12:30"])
    special_instructions: str = Field("", max_length=1000)
    payment_method: PaymentMethod = PaymentMethod.PAY_AT_PICKUP


class OrderPlacedResponse(BaseModel):
    order_id: str
    status: OrderStatus
    total: DecimalNumber


class OrderTrackingResponse(BaseModel):
    """What a customer sees when tracking an order (no contact details)."""

    order_id: str
    customer_name: str
    items: list[OrderLineItem]
    subtotal: DecimalNumber
    tax: DecimalNumber
    total: DecimalNumber
    pickup_time: str
    status: OrderStatus
    payment_method: PaymentMethod
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_order(cls, order: Order) -> "OrderTrackingResponse":
        return cls.model_validate(order.model_dump(include=set(cls.model_fields)))


class StatusUpdateRequest(BaseModel):
    # Plain string so unknown values reach the state machine and fail
    # with invalid_status rather than a schema error.
    status: str


class OrderListResponse(BaseModel):
    orders: list[Order]


class AuditLogResponse(BaseModel):
    logs: list[AuditLogEntry]


class StatusActionResponse(BaseModel):
    status: OrderStatus
    label: str
    confirm_message: str


class TopItem(BaseModel):
    name: str
    count: int


class DailyStats(BaseModel):
    order_count: int
    revenue: DecimalNumber
    avg_order_value: DecimalNumber
    top_items: list[TopItem]
