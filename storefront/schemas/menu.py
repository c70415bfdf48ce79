"""
Storefront — Menu schemas
"""
from decimal import Decimal

from pydantic import BaseModel, Field

from storefront.models.menu import Category, Ingredient, MenuItem


class IngredientRequest(BaseModel):
    name: str = Field(..., min_length=1)
    quantity: str = Field(..., min_length=1, examples=["18"])
    unit: str = Field("", max_length=20)
    ingredient_ref: str | None = None

    def to_ingredient(self) -> Ingredient:
        return Ingredient(**self.model_dump())


class MenuItemCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    description: str = Field("", max_length=1000)
    category: str = Field(..., min_length=1)
    category_slug: str = Field(..., min_length=1)
    price: Decimal = Field(..., ge=0)
    is_available: bool = True
    image_key: str = ""
    ingredients: list[IngredientRequest] = []


class MenuItemUpdateRequest(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=120)
    description: str | None = Field(None, max_length=1000)
    category: str | None = None
    category_slug: str | None = None
    price: Decimal | None = Field(None, ge=0)
    is_available: bool | None = None
    image_key: str | None = None
    ingredients: list[IngredientRequest] | None = None


class AvailabilityRequest(BaseModel):
    is_available: bool


class CategoryCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=60)
    sort_order: int = 0


class MenuListResponse(BaseModel):
    items: list[MenuItem]


class CategoryListResponse(BaseModel):
    categories: list[Category]
