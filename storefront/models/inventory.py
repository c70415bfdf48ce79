"""
Storefront — Inventory records

current_stock is only ever changed through the store's atomic add / set
operations. It can drop below zero after an order deduction; the floor is
enforced earlier, when the order is validated.
"""
from datetime import datetime

from pydantic import BaseModel

from storefront.models import DecimalNumber


class InventoryItem(BaseModel):
    slug: str
    name: str
    unit: str
    current_stock: DecimalNumber
    low_stock_threshold: DecimalNumber
    last_restocked_at: datetime
    created_at: datetime
    updated_at: datetime

    @property
    def is_low(self) -> bool:
        return self.current_stock <= self.low_stock_threshold
