"""
Storefront — Stock validation and order-driven deduction

Both sides share one aggregation: every line item's *current* catalog recipe
is scaled by the line quantity and summed per inventory slug across the whole
order. Menu items deleted since the order was placed contribute nothing.

The two sides treat a missing inventory record differently:
  - validation counts it as 0 available, so it blocks approval when any
    amount is required;
  - deduction skips it and carries on with the other ingredients.
"""
import asyncio
import logging
from dataclasses import dataclass
from decimal import Decimal

from pydantic import BaseModel

from storefront.core.slugs import parse_quantity
from storefront.db.inventory_ops import adjust_stock, inventory_key
from storefront.db.menu_ops import menu_key
from storefront.db.store import ConditionalCheckFailed, RedisStore
from storefront.models import DecimalNumber
from storefront.models.inventory import InventoryItem
from storefront.models.menu import MenuItem
from storefront.models.order import Order

logger = logging.getLogger(__name__)


@dataclass
class Demand:
    slug: str
    name: str
    unit: str
    amount: Decimal


class Shortfall(BaseModel):
    slug: str
    name: str
    required: DecimalNumber
    available: DecimalNumber
    unit: str


class StockValidation(BaseModel):
    valid: bool
    insufficient_items: list[Shortfall] = []


async def aggregate_demand(store: RedisStore, order: Order) -> dict[str, Demand]:
    """Total ingredient demand of an order, keyed by inventory slug."""
    slugs = list(dict.fromkeys(line.slug for line in order.items))
    records = await asyncio.gather(*(store.get(menu_key(slug)) for slug in slugs))
    recipes = {
        slug: MenuItem.model_validate(record)
        for slug, record in zip(slugs, records)
        if record is not None
    }

    demand: dict[str, Demand] = {}
    for line in order.items:
        menu_item = recipes.get(line.slug)
        if menu_item is None:
            logger.info("Order %s: menu item %s no longer exists, skipped", order.order_id, line.slug)
            continue
        for ingredient in menu_item.ingredients:
            slug = ingredient.inventory_slug
            amount = parse_quantity(ingredient.quantity) * line.quantity
            if slug in demand:
                demand[slug].amount += amount
            else:
                demand[slug] = Demand(slug, ingredient.name, ingredient.unit, amount)
    return demand


async def validate_stock(store: RedisStore, order: Order) -> StockValidation:
    """Read-only check of an order's demand against current stock."""
    demand = await aggregate_demand(store, order)
    # Nothing required means nothing to check, even without an inventory record
    slugs = [slug for slug, need in demand.items() if need.amount > 0]
    records = await asyncio.gather(*(store.get(inventory_key(slug)) for slug in slugs))

    shortfalls = []
    for slug, record in zip(slugs, records):
        need = demand[slug]
        if record is None:
            shortfalls.append(
                Shortfall(slug=slug, name=need.name, required=need.amount, available=0, unit=need.unit)
            )
            continue
        item = InventoryItem.model_validate(record)
        if item.current_stock < need.amount:
            shortfalls.append(
                Shortfall(
                    slug=slug,
                    name=item.name,
                    required=need.amount,
                    available=item.current_stock,
                    unit=item.unit,
                )
            )
    return StockValidation(valid=not shortfalls, insufficient_items=shortfalls)


async def deduct_for_order(store: RedisStore, order: Order) -> dict[str, Decimal]:
    """
    Decrement every ingredient the order consumes, one atomic op per slug.

    Decrements run concurrently and all of them are allowed to settle before
    any error is raised. There is no rollback: if one fails, the others that
    succeeded stay applied. Returns the amounts actually deducted.
    """
    demand = await aggregate_demand(store, order)
    slugs = [slug for slug, need in demand.items() if need.amount != 0]
    results = await asyncio.gather(
        *(adjust_stock(store, slug, -demand[slug].amount) for slug in slugs),
        return_exceptions=True,
    )

    deducted: dict[str, Decimal] = {}
    failure: BaseException | None = None
    for slug, result in zip(slugs, results):
        if isinstance(result, ConditionalCheckFailed):
            logger.info("Order %s: no inventory record for %s, skipped", order.order_id, slug)
        elif isinstance(result, BaseException):
            logger.error("Order %s: deduction of %s failed: %s", order.order_id, slug, result)
            failure = failure or result
        else:
            deducted[slug] = demand[slug].amount
            logger.info(
                "Order %s: deducted %s from %s (now %s)",
                order.order_id, demand[slug].amount, slug, result,
            )
    if failure is not None:
        raise failure
    return deducted
