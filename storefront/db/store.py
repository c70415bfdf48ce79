"""
Storefront — Redis store adapter

Layout:
  <TYPE>#<id>        hash, one field per attribute
  GSI1#<partition>   sorted set, every score 0, members "<sortKey>\\x1f<key>"
                     so ZRANGEBYLEX walks a partition in sort-key order
  LOG#<orderId>      list, append-only JSON entries

Numeric attributes are stored as bare decimal strings and summed in Decimal
under WATCH; every other attribute is JSON-encoded. Conditional
writes WATCH the entity key, check their guard, then commit in MULTI/EXEC.
A failed guard raises ConditionalCheckFailed and writes nothing; a WatchError
from a concurrent writer is retried by with_optimistic_retry.
"""
import json
import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any

import redis.asyncio as aioredis

from storefront.core.optimistic_lock import with_optimistic_retry
from storefront.core.redis_client import get_redis

logger = logging.getLogger(__name__)

ORDER = "ORDER"
INVENTORY = "INV"
MENU = "MENU"
USER = "USER"
CATEGORY = "CATEGORY"
LOG = "LOG"

INDEX_PREFIX = "GSI1#"
INDEX_SEPARATOR = "\x1f"
GSI_PK_FIELD = "_gsi1pk"
GSI_SK_FIELD = "_gsi1sk"


class ConditionalCheckFailed(Exception):
    """A conditional write's guard did not hold; nothing was written."""

    def __init__(self, key: str, reason: str = "missing"):
        super().__init__(f"Condition failed for {key}: {reason}")
        self.key = key
        self.reason = reason


@dataclass(frozen=True)
class IndexKey:
    partition: str
    sort_key: str

    def member(self, key: str) -> str:
        return f"{self.sort_key}{INDEX_SEPARATOR}{key}"


def entity_key(kind: str, ident: str) -> str:
    return f"{kind}#{ident}"


def _json_default(obj: Any) -> Any:
    if isinstance(obj, Decimal):
        return str(obj)
    if isinstance(obj, datetime):
        return obj.isoformat()
    if isinstance(obj, Enum):
        return obj.value
    raise TypeError(f"Cannot encode {type(obj).__name__}")


def encode_value(value: Any) -> str:
    if value is None or isinstance(value, bool):
        return json.dumps(value)
    if isinstance(value, (int, float, Decimal)):
        return str(value)
    return json.dumps(value, default=_json_default)


def decode_value(raw: str) -> Any:
    return json.loads(raw, parse_float=Decimal)


def _encode_fields(record: dict[str, Any], index: IndexKey | None = None) -> dict[str, str]:
    fields = {name: encode_value(value) for name, value in record.items()}
    if index is not None:
        fields[GSI_PK_FIELD] = encode_value(index.partition)
        fields[GSI_SK_FIELD] = encode_value(index.sort_key)
    return fields


def _decode_fields(raw: dict[str, str]) -> dict[str, Any]:
    return {
        name: decode_value(value)
        for name, value in raw.items()
        if name not in (GSI_PK_FIELD, GSI_SK_FIELD)
    }


def _index_name(partition: str) -> str:
    return f"{INDEX_PREFIX}{partition}"


class RedisStore:
    """Key/value access with one secondary index and guarded writes."""

    def __init__(self, redis: aioredis.Redis):
        self.redis = redis

    # ── Reads ─────────────────────────────────────────────────
    async def get(self, key: str) -> dict[str, Any] | None:
        raw = await self.redis.hgetall(key)
        return _decode_fields(raw) if raw else None

    async def get_many(self, keys: list[str]) -> list[dict[str, Any]]:
        """Fetch several entities in one round trip, skipping missing keys."""
        if not keys:
            return []
        async with self.redis.pipeline(transaction=False) as pipe:
            for key in keys:
                pipe.hgetall(key)
            rows = await pipe.execute()
        return [_decode_fields(row) for row in rows if row]

    async def query(
        self,
        partition: str,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        """All entities in an index partition, ordered by sort key."""
        index = _index_name(partition)
        paging = {"start": 0, "num": limit} if limit else {}
        if descending:
            members = await self.redis.zrevrangebylex(index, "+", "-", **paging)
        else:
            members = await self.redis.zrangebylex(index, "-", "+", **paging)
        keys = [member.rsplit(INDEX_SEPARATOR, 1)[-1] for member in members]
        return await self.get_many(keys)

    async def scan_prefix(self, kind: str) -> list[dict[str, Any]]:
        keys = sorted([key async for key in self.redis.scan_iter(match=f"{kind}#*")])
        return await self.get_many(keys)

    # ── Conditional writes ───────────────────────────────────
    @with_optimistic_retry()
    async def put_if_absent(
        self, key: str, record: dict[str, Any], index: IndexKey | None = None
    ) -> None:
        async with self.redis.pipeline(transaction=True) as pipe:
            await pipe.watch(key)
            if await pipe.exists(key):
                raise ConditionalCheckFailed(key, "exists")
            pipe.multi()
            pipe.hset(key, mapping=_encode_fields(record, index))
            if index is not None:
                pipe.zadd(_index_name(index.partition), {index.member(key): 0})
            await pipe.execute()

    @with_optimistic_retry()
    async def update_if_exists(
        self, key: str, changes: dict[str, Any], index: IndexKey | None = None
    ) -> dict[str, Any]:
        """Apply changes to an existing entity and return the new record.

        Passing ``index`` moves the entity to that partition / sort key.
        """
        async with self.redis.pipeline(transaction=True) as pipe:
            await pipe.watch(key)
            if not await pipe.exists(key):
                raise ConditionalCheckFailed(key)
            old_index = None
            if index is not None:
                old_pk, old_sk = await pipe.hmget(key, GSI_PK_FIELD, GSI_SK_FIELD)
                if old_pk is not None and old_sk is not None:
                    old_index = IndexKey(decode_value(old_pk), decode_value(old_sk))
            pipe.multi()
            if index is not None and old_index != index:
                if old_index is not None:
                    pipe.zrem(_index_name(old_index.partition), old_index.member(key))
                pipe.zadd(_index_name(index.partition), {index.member(key): 0})
            pipe.hset(key, mapping=_encode_fields(changes, index))
            pipe.hgetall(key)
            results = await pipe.execute()
        return _decode_fields(results[-1])

    @with_optimistic_retry()
    async def compare_and_set(
        self, key: str, field: str, expected: Any, changes: dict[str, Any]
    ) -> dict[str, Any]:
        """Apply changes only while ``field`` still holds ``expected``."""
        async with self.redis.pipeline(transaction=True) as pipe:
            await pipe.watch(key)
            raw = await pipe.hget(key, field)
            if raw is None:
                raise ConditionalCheckFailed(key)
            if decode_value(raw) != expected:
                raise ConditionalCheckFailed(key, "mismatch")
            pipe.multi()
            pipe.hset(key, mapping=_encode_fields(changes))
            pipe.hgetall(key)
            results = await pipe.execute()
        return _decode_fields(results[-1])

    @with_optimistic_retry()
    async def add_if_exists(
        self,
        key: str,
        field: str,
        delta: Decimal,
        changes: dict[str, Any] | None = None,
    ) -> Decimal:
        """Atomically add ``delta`` to a numeric field; returns the new value.

        The sum is done in Decimal under WATCH, so 0.7 + 0.1 is stored as 0.8.
        """
        async with self.redis.pipeline(transaction=True) as pipe:
            await pipe.watch(key)
            if not await pipe.exists(key):
                raise ConditionalCheckFailed(key)
            raw = await pipe.hget(key, field)
            new_value = (Decimal(raw) if raw is not None else Decimal(0)) + delta
            pipe.multi()
            pipe.hset(key, mapping=_encode_fields({field: new_value, **(changes or {})}))
            await pipe.execute()
        return new_value

    @with_optimistic_retry()
    async def delete_if_exists(self, key: str) -> dict[str, Any]:
        """Delete an entity and its index entry; returns the removed record."""
        async with self.redis.pipeline(transaction=True) as pipe:
            await pipe.watch(key)
            raw = await pipe.hgetall(key)
            if not raw:
                raise ConditionalCheckFailed(key)
            pipe.multi()
            pipe.delete(key)
            if GSI_PK_FIELD in raw and GSI_SK_FIELD in raw:
                index = IndexKey(decode_value(raw[GSI_PK_FIELD]), decode_value(raw[GSI_SK_FIELD]))
                pipe.zrem(_index_name(index.partition), index.member(key))
            await pipe.execute()
        return _decode_fields(raw)

    # ── Append-only lists ────────────────────────────────────
    async def append(self, key: str, record: dict[str, Any]) -> None:
        await self.redis.rpush(key, json.dumps(record, default=_json_default))

    async def read_list(self, key: str) -> list[dict[str, Any]]:
        return [decode_value(raw) for raw in await self.redis.lrange(key, 0, -1)]


def get_store() -> RedisStore:
    """FastAPI dependency: a store bound to the shared Redis client."""
    return RedisStore(get_redis())
