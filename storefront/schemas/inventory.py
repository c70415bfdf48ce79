"""
Storefront — Inventory schemas
"""
from decimal import Decimal

from pydantic import BaseModel, Field

from storefront.models import DecimalNumber
from storefront.models.inventory import InventoryItem


class InventoryCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    unit: str = Field(..., min_length=1, max_length=20, examples=["g"])
    current_stock: Decimal = Field(..., ge=0)
    low_stock_threshold: Decimal = Field(Decimal(0), ge=0)


class InventoryUpdateRequest(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=120)
    unit: str | None = Field(None, min_length=1, max_length=20)
    low_stock_threshold: Decimal | None = Field(None, ge=0)


class RestockRequest(BaseModel):
    amount: Decimal = Field(..., gt=0)


class SetStockRequest(BaseModel):
    current_stock: Decimal = Field(..., ge=0)


class StockLevelResponse(BaseModel):
    slug: str
    current_stock: DecimalNumber


class InventoryListResponse(BaseModel):
    items: list[InventoryItem]
