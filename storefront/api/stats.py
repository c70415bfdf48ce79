"""
Storefront — Dashboard stats
"""
from fastapi import APIRouter, Depends

from storefront.api.deps import require_feature
from storefront.core.permissions import Feature
from storefront.db.order_ops import get_daily_stats
from storefront.db.store import RedisStore, get_store
from storefront.models.user import Actor
from storefront.schemas.order import DailyStats

router = APIRouter(prefix="/admin/stats", tags=["stats"])


@router.get("", response_model=DailyStats)
async def daily_stats(
    _: Actor = Depends(require_feature(Feature.VIEW_DASHBOARD_STATS)),
    store: RedisStore = Depends(get_store),
):
    return await get_daily_stats(store)
