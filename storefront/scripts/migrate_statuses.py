"""
Storefront — Rename legacy order statuses

  confirmed -> approved
  ready     -> prepared

Rewrites stored orders and the from/to fields of their audit log entries.
Idempotent: running it again finds nothing left to rename.

Run: python -m storefront.scripts.migrate_statuses
"""
import asyncio
import json
import logging

from storefront.core.redis_client import close_redis, get_redis
from storefront.db.store import LOG, ORDER, ConditionalCheckFailed, RedisStore, decode_value
from storefront.models import utc_now

logger = logging.getLogger(__name__)

STATUS_MAP = {
    "confirmed": "approved",
    "ready": "prepared",
}


async def migrate_orders(store: RedisStore) -> int:
    updated = 0
    async for key in store.redis.scan_iter(match=f"{ORDER}#*"):
        raw = await store.redis.hget(key, "status")
        if raw is None:
            continue
        old_status = decode_value(raw)
        new_status = STATUS_MAP.get(old_status)
        if new_status is None:
            continue
        try:
            await store.compare_and_set(
                key, "status", old_status, {"status": new_status, "updated_at": utc_now()}
            )
        except ConditionalCheckFailed:
            # Changed or removed since we read it; nothing to rename.
            continue
        logger.info("  %s : %s -> %s", key, old_status, new_status)
        updated += 1
    return updated


async def migrate_logs(store: RedisStore) -> int:
    updated = 0
    async for key in store.redis.scan_iter(match=f"{LOG}#*"):
        for position, raw in enumerate(await store.redis.lrange(key, 0, -1)):
            entry = json.loads(raw)
            renamed = {
                field: STATUS_MAP[entry[field]]
                for field in ("from_status", "to_status")
                if entry.get(field) in STATUS_MAP
            }
            if not renamed:
                continue
            entry.update(renamed)
            await store.redis.lset(key, position, json.dumps(entry))
            updated += 1
    return updated


async def migrate(store: RedisStore) -> tuple[int, int]:
    logger.info("Scanning for orders with old status names...")
    orders = await migrate_orders(store)
    logs = await migrate_logs(store)
    logger.info("Done. Orders updated: %d, log entries updated: %d", orders, logs)
    return orders, logs


async def main() -> None:
    try:
        await migrate(RedisStore(get_redis()))
    finally:
        await close_redis()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    asyncio.run(main())
