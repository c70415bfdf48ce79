"""
Storefront — Menu availability reconciler

Runs after each approval-time deduction. Any available menu item with a
recipe ingredient whose inventory record is at or below zero is switched
off. Items are never switched back on here: restocking does not re-enable
anything, a staff member does that by hand.
"""
import logging

from storefront.core.errors import NotFound
from storefront.db.inventory_ops import get_all_inventory
from storefront.db.menu_ops import list_menu_items, toggle_availability
from storefront.db.store import RedisStore

logger = logging.getLogger(__name__)


async def reconcile_menu_availability(store: RedisStore) -> list[str]:
    """Disable menu items that depend on depleted stock; returns their slugs."""
    depleted = {item.slug for item in await get_all_inventory(store) if item.current_stock <= 0}
    if not depleted:
        return []

    disabled = []
    for item in await list_menu_items(store, available_only=True):
        empty = [i.inventory_slug for i in item.ingredients if i.inventory_slug in depleted]
        if not empty:
            continue
        try:
            await toggle_availability(store, item.slug, False)
        except NotFound:
            continue
        logger.info("Menu item %s disabled: out of %s", item.slug, ", ".join(empty))
        disabled.append(item.slug)
    return disabled
