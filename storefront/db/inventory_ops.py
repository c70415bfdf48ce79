"""
Storefront — Inventory ledger

current_stock is mutated only through RedisStore.add_if_exists (WATCH-guarded
Decimal add) or update_if_exists (atomic HSET), both guarded by key
existence so a mistyped slug can never create a phantom record.
"""
import logging
from decimal import Decimal

from storefront.core.errors import Conflict, NotFound, ValidationFailed
from storefront.core.slugs import slugify
from storefront.db.store import (
    INVENTORY,
    ConditionalCheckFailed,
    IndexKey,
    RedisStore,
    entity_key,
)
from storefront.models import utc_now
from storefront.models.inventory import InventoryItem

logger = logging.getLogger(__name__)

INVENTORY_PARTITION = "INVENTORY"


def inventory_key(slug: str) -> str:
    return entity_key(INVENTORY, slug)


def _index(name: str) -> IndexKey:
    return IndexKey(INVENTORY_PARTITION, f"ITEM#{name}")


async def get_inventory_item(store: RedisStore, slug: str) -> InventoryItem | None:
    record = await store.get(inventory_key(slug))
    return InventoryItem.model_validate(record) if record else None


async def get_all_inventory(store: RedisStore) -> list[InventoryItem]:
    records = await store.query(INVENTORY_PARTITION)
    return [InventoryItem.model_validate(r) for r in records]


async def get_low_stock_items(store: RedisStore) -> list[InventoryItem]:
    return [item for item in await get_all_inventory(store) if item.is_low]


async def restock(store: RedisStore, slug: str, amount: Decimal) -> Decimal:
    """Add ``amount`` to an existing record; returns the new stock level."""
    if amount <= 0:
        raise ValidationFailed("Amount must be a positive number")
    now = utc_now()
    try:
        new_stock = await store.add_if_exists(
            inventory_key(slug),
            "current_stock",
            amount,
            {"updated_at": now, "last_restocked_at": now},
        )
    except ConditionalCheckFailed:
        raise NotFound("Inventory item not found", slug=slug)
    logger.info("Restocked %s by %s (now %s)", slug, amount, new_stock)
    return new_stock


async def set_stock(store: RedisStore, slug: str, amount: Decimal) -> InventoryItem:
    """Overwrite current_stock on an existing record."""
    if amount < 0:
        raise ValidationFailed("Stock must be a non-negative number")
    try:
        record = await store.update_if_exists(
            inventory_key(slug),
            {"current_stock": amount, "updated_at": utc_now()},
        )
    except ConditionalCheckFailed:
        raise NotFound("Inventory item not found", slug=slug)
    logger.info("Stock for %s set to %s", slug, amount)
    return InventoryItem.model_validate(record)


async def adjust_stock(store: RedisStore, slug: str, delta: Decimal) -> Decimal:
    """Atomic signed adjustment with no floor. Raises ConditionalCheckFailed if absent."""
    return await store.add_if_exists(
        inventory_key(slug), "current_stock", delta, {"updated_at": utc_now()}
    )


async def create_inventory_item(
    store: RedisStore,
    name: str,
    unit: str,
    current_stock: Decimal,
    low_stock_threshold: Decimal,
) -> InventoryItem:
    if current_stock < 0 or low_stock_threshold < 0:
        raise ValidationFailed("Stock values must be non-negative")
    slug = slugify(name)
    if not slug:
        raise ValidationFailed("Name must contain at least one letter or digit")
    now = utc_now()
    item = InventoryItem(
        slug=slug,
        name=name,
        unit=unit,
        current_stock=current_stock,
        low_stock_threshold=low_stock_threshold,
        last_restocked_at=now,
        created_at=now,
        updated_at=now,
    )
    try:
        await store.put_if_absent(inventory_key(slug), item.model_dump(), _index(name))
    except ConditionalCheckFailed:
        raise Conflict("An inventory item with this name already exists", slug=slug)
    logger.info("Created inventory item %s", slug)
    return item


async def update_inventory_item(
    store: RedisStore,
    slug: str,
    name: str | None = None,
    unit: str | None = None,
    low_stock_threshold: Decimal | None = None,
) -> InventoryItem:
    changes: dict = {}
    if name is not None:
        changes["name"] = name
    if unit is not None:
        changes["unit"] = unit
    if low_stock_threshold is not None:
        if low_stock_threshold < 0:
            raise ValidationFailed("Low stock threshold must be a non-negative number")
        changes["low_stock_threshold"] = low_stock_threshold
    if not changes:
        raise ValidationFailed("No fields to update")
    changes["updated_at"] = utc_now()
    try:
        record = await store.update_if_exists(
            inventory_key(slug), changes, _index(name) if name is not None else None
        )
    except ConditionalCheckFailed:
        raise NotFound("Inventory item not found", slug=slug)
    return InventoryItem.model_validate(record)


async def delete_inventory_item(store: RedisStore, slug: str) -> None:
    try:
        await store.delete_if_exists(inventory_key(slug))
    except ConditionalCheckFailed:
        raise NotFound("Inventory item not found", slug=slug)
    logger.info("Deleted inventory item %s", slug)
