# src/cache/redis_store.py — v3
"""Redis-based cache record store (CACHE_BACKEND=redis).

Requires 'redis' package: pip install redis.
Suitable for multi-instance deployments. Each record is a Redis hash so
usage accounting can use HINCRBY inside a server-side script instead of
a read-modify-write.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime

from pydantic import ValidationError

from inspectcache.cache.base_cache_store import BaseCacheStore
from inspectcache.cache.models import CacheRecord

logger = logging.getLogger(__name__)

_KEY_PREFIX = "inspectcache:"

_RECORD_USAGE_LUA = """
if redis.call("EXISTS", KEYS[1]) == 0 then
    return {}
end
redis.call("HINCRBY", KEYS[1], "usage_count", 1)
redis.call("HSET", KEYS[1], "last_used_at", ARGV[1])
return redis.call("HGETALL", KEYS[1])
"""


class RedisCacheStore(BaseCacheStore):
    """Redis-backed cache record store."""

    def __init__(self, redis_url: str, collection: str) -> None:
        try:
            import redis
        except ImportError as e:
            raise ImportError(
                "redis package required: pip install redis"
            ) from e

        self._client = redis.Redis.from_url(redis_url, decode_responses=True)
        self._collection = collection
        self._record_usage_script = self._client.register_script(_RECORD_USAGE_LUA)

    async def get(self, scope: str) -> CacheRecord | None:
        """Retrieve the record for a scope."""
        fields = self._client.hgetall(self._key(scope))
        return self._to_record(scope, fields)

    async def put(self, scope: str, record: CacheRecord) -> None:
        """Store a record, replacing any existing one."""
        key = self._key(scope)
        pipe = self._client.pipeline(transaction=True)
        pipe.delete(key)
        pipe.hset(
            key,
            mapping={
                "data": record.model_dump_json(),
                "usage_count": record.usage_count,
                "last_used_at": record.last_used_at.isoformat(),
            },
        )
        pipe.sadd(self._index_key(), scope)
        pipe.execute()

    async def delete(self, scope: str) -> None:
        """Remove the record for a scope."""
        pipe = self._client.pipeline(transaction=True)
        pipe.delete(self._key(scope))
        pipe.srem(self._index_key(), scope)
        pipe.execute()

    async def record_usage(
        self, scope: str, used_at: datetime
    ) -> CacheRecord | None:
        """Increment usage_count and refresh last_used_at.

        The existence check, both writes and the read-back run as one Lua
        script, so a missing key is never recreated as a partial hash and
        concurrent hits on the same scope never conflict.
        """
        fields = self._record_usage_script(
            keys=[self._key(scope)], args=[used_at.isoformat()]
        )
        if not fields:
            return None
        return self._to_record(scope, _pairs_to_dict(fields))

    async def list_records(self) -> list[CacheRecord]:
        """List all records in the collection."""
        records: list[CacheRecord] = []
        for scope in sorted(self._client.smembers(self._index_key())):
            record = await self.get(scope)
            if record is not None:
                records.append(record)
        return records

    def close(self) -> None:
        """Close the Redis connection."""
        self._client.close()

    def _key(self, scope: str) -> str:
        return f"{_KEY_PREFIX}{self._collection}:{scope}"

    def _index_key(self) -> str:
        return f"{_KEY_PREFIX}{self._collection}:__index__"

    def _to_record(self, scope: str, fields: dict[str, str]) -> CacheRecord | None:
        if not fields or "data" not in fields:
            return None
        try:
            payload = json.loads(fields["data"])
            payload["usage_count"] = int(fields.get("usage_count", 0))
            payload["last_used_at"] = fields.get(
                "last_used_at", payload.get("last_used_at")
            )
            return CacheRecord(**payload)
        except (json.JSONDecodeError, ValidationError, ValueError) as e:
            logger.warning("Failed to deserialize cache record %s: %s", scope, e)
            return None


def _pairs_to_dict(flat: list[str]) -> dict[str, str]:
    """Convert a flat HGETALL reply ([k1, v1, k2, v2, ...]) to a dict."""
    return dict(zip(flat[::2], flat[1::2]))
