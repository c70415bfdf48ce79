"""
Storefront — Menu catalog and categories

Menu items are indexed under their category (GSI1 partition
CATEGORY#<categorySlug>, sort key MENU#<name>); the full menu is read with a
prefix scan.
"""
import logging
from decimal import Decimal

from storefront.core.errors import Conflict, NotFound, ValidationFailed
from storefront.core.slugs import parse_quantity, slugify
from storefront.db.store import (
    CATEGORY,
    MENU,
    ConditionalCheckFailed,
    IndexKey,
    RedisStore,
    entity_key,
)
from storefront.models import utc_now
from storefront.models.menu import Category, Ingredient, MenuItem

logger = logging.getLogger(__name__)

CATEGORIES_PARTITION = "CATEGORIES"


def menu_key(slug: str) -> str:
    return entity_key(MENU, slug)


def _menu_index(category_slug: str, name: str) -> IndexKey:
    return IndexKey(f"{CATEGORY}#{category_slug}", f"MENU#{name}")


def resolve_ingredients(ingredients: list[Ingredient]) -> list[Ingredient]:
    """Pin each recipe line to an inventory slug at edit time."""
    resolved = []
    for ingredient in ingredients:
        if not ingredient.name.strip():
            raise ValidationFailed("Ingredient name is required")
        if parse_quantity(ingredient.quantity) < 0:
            raise ValidationFailed(f'Ingredient "{ingredient.name}" has a negative quantity')
        ref = slugify(ingredient.ingredient_ref or ingredient.name)
        resolved.append(ingredient.model_copy(update={"ingredient_ref": ref}))
    return resolved


async def get_menu_item(store: RedisStore, slug: str) -> MenuItem | None:
    record = await store.get(menu_key(slug))
    return MenuItem.model_validate(record) if record else None


async def list_menu_items(
    store: RedisStore,
    category_slug: str | None = None,
    available_only: bool = False,
) -> list[MenuItem]:
    if category_slug:
        records = await store.query(f"{CATEGORY}#{category_slug}")
    else:
        records = await store.scan_prefix(MENU)
    items = [MenuItem.model_validate(r) for r in records]
    if available_only:
        items = [item for item in items if item.is_available]
    return items


async def create_menu_item(
    store: RedisStore,
    name: str,
    description: str,
    category: str,
    category_slug: str,
    price: Decimal,
    is_available: bool = True,
    image_key: str = "",
    ingredients: list[Ingredient] | None = None,
) -> MenuItem:
    if price < 0:
        raise ValidationFailed("Price must be a non-negative number")
    slug = slugify(name)
    if not slug:
        raise ValidationFailed("Name must contain at least one letter or digit")
    now = utc_now()
    item = MenuItem(
        slug=slug,
        name=name,
        description=description,
        category=category,
        category_slug=category_slug,
        price=price,
        is_available=is_available,
        image_key=image_key or f"menu/{slug}.jpg",
        ingredients=resolve_ingredients(ingredients or []),
        created_at=now,
        updated_at=now,
    )
    try:
        await store.put_if_absent(menu_key(slug), item.model_dump(), _menu_index(category_slug, name))
    except ConditionalCheckFailed:
        raise Conflict("A menu item with this name already exists", slug=slug)
    logger.info("Created menu item %s", slug)
    return item


async def update_menu_item(store: RedisStore, slug: str, **fields) -> MenuItem:
    """Partial update. Accepts any MenuItem attribute except slug and timestamps."""
    changes = {name: value for name, value in fields.items() if value is not None}
    if not changes:
        raise ValidationFailed("No fields to update")
    if "price" in changes and changes["price"] < 0:
        raise ValidationFailed("Price must be a non-negative number")
    if "ingredients" in changes:
        changes["ingredients"] = [
            i.model_dump() for i in resolve_ingredients(changes["ingredients"])
        ]

    index = None
    if "name" in changes or "category_slug" in changes:
        current = await get_menu_item(store, slug)
        if current is None:
            raise NotFound("Menu item not found", slug=slug)
        index = _menu_index(
            changes.get("category_slug", current.category_slug),
            changes.get("name", current.name),
        )

    changes["updated_at"] = utc_now()
    try:
        record = await store.update_if_exists(menu_key(slug), changes, index)
    except ConditionalCheckFailed:
        raise NotFound("Menu item not found", slug=slug)
    return MenuItem.model_validate(record)


async def toggle_availability(store: RedisStore, slug: str, is_available: bool) -> MenuItem:
    try:
        record = await store.update_if_exists(
            menu_key(slug), {"is_available": is_available, "updated_at": utc_now()}
        )
    except ConditionalCheckFailed:
        raise NotFound("Menu item not found", slug=slug)
    logger.info("Menu item %s availability set to %s", slug, is_available)
    return MenuItem.model_validate(record)


async def delete_menu_item(store: RedisStore, slug: str) -> None:
    try:
        await store.delete_if_exists(menu_key(slug))
    except ConditionalCheckFailed:
        raise NotFound("Menu item not found", slug=slug)
    logger.info("Deleted menu item %s", slug)


# ── Categories ───────────────────────────────────────────────

async def list_categories(store: RedisStore) -> list[Category]:
    records = await store.query(CATEGORIES_PARTITION)
    return sorted((Category.model_validate(r) for r in records), key=lambda c: c.sort_order)


async def create_category(store: RedisStore, name: str, sort_order: int = 0) -> Category:
    slug = slugify(name)
    if not slug:
        raise ValidationFailed("Name must contain at least one letter or digit")
    now = utc_now()
    category = Category(slug=slug, name=name, sort_order=sort_order, created_at=now, updated_at=now)
    try:
        await store.put_if_absent(
            entity_key(CATEGORY, slug),
            category.model_dump(),
            IndexKey(CATEGORIES_PARTITION, f"{sort_order:06d}#{slug}"),
        )
    except ConditionalCheckFailed:
        raise Conflict("A category with this name already exists", slug=slug)
    return category
