"""
Storefront — Menu catalog records

[CONFIG DATA] — menu items and categories are edited by staff. Deleting a
menu item only removes the catalog entry; orders keep their own copies.
"""
from datetime import datetime

from pydantic import BaseModel

from storefront.core.slugs import slugify
from storefront.models import DecimalNumber


class Ingredient(BaseModel):
    name: str
    quantity: str
    unit: str
    # Inventory slug fixed when the recipe is saved. Records written before
    # the field existed fall back to the slug of the ingredient name.
    ingredient_ref: str | None = None

    @property
    def inventory_slug(self) -> str:
        return self.ingredient_ref or slugify(self.name)


class MenuItem(BaseModel):
    slug: str
    name: str
    description: str
    category: str
    category_slug: str
    price: DecimalNumber
    is_available: bool = True
    image_key: str = ""
    ingredients: list[Ingredient] = []
    created_at: datetime
    updated_at: datetime


class Category(BaseModel):
    slug: str
    name: str
    sort_order: int = 0
    created_at: datetime
    updated_at: datetime
