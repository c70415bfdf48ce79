"""
Storefront — Slug and recipe-quantity helpers

slugify() is the join between menu ingredient names and inventory records:
an ingredient named "Oat Milk" deducts from inventory slug "oat-milk".
"""
import logging
import re
from decimal import Decimal, InvalidOperation

logger = logging.getLogger(__name__)

_NON_SLUG = re.compile(r"[^a-z0-9]+")
_LEADING_NUMBER = re.compile(r"^\s*[-+]?(\d+(\.\d*)?|\.\d+)")


def slugify(name: str) -> str:
    return _NON_SLUG.sub("-", name.lower()).strip("-")


def parse_quantity(raw: str) -> Decimal:
    """
    Parse a recipe quantity such as "200", "0.5" or legacy "200ml".

    Only the leading number counts. Anything unparsable contributes nothing
    and is logged, so a single bad recipe line cannot block an approval.
    """
    match = _LEADING_NUMBER.match(raw or "")
    if not match:
        logger.warning("Unparsable ingredient quantity %r treated as 0", raw)
        return Decimal(0)
    try:
        return Decimal(match.group(0).strip())
    except InvalidOperation:
        logger.warning("Unparsable ingredient quantity %r treated as 0", raw)
        return Decimal(0)
