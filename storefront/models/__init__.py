"""
Storefront — Domain records

These are the shapes persisted in the store; API schemas live in
storefront.schemas.
"""
from datetime import datetime, timezone
from decimal import Decimal
from typing import Annotated

from pydantic import PlainSerializer

# Decimal in memory and in Redis, plain JSON number on the wire.
DecimalNumber = Annotated[
    Decimal,
    PlainSerializer(lambda v: float(v), return_type=float, when_used="json"),
]


def utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)
