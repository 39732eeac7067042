# src/cache/redis_store.py — v2
"""Redis-based cache store (CACHE_BACKEND=redis).

Requires 'redis' package: pip install redis.
Suitable for a shared cache on a multi-instance server deployment.
Redis expires keys itself; the stored entry still carries its own TTL.
"""

from __future__ import annotations

import json
import logging

from agenticad.cache.base_cache_store import BaseCacheStore
from agenticad.cache.models import CacheEntry

logger = logging.getLogger(__name__)

_KEY_PREFIX = "agenticad:cache:"
_INDEX_KEY = "agenticad:cache:__index__"


class RedisCacheStore(BaseCacheStore):
    """Redis-backed cache store."""

    def __init__(self, redis_url: str = "", client=None) -> None:
        if client is None:
            try:
                import redis
            except ImportError as e:
                raise ImportError(
                    "redis package required: pip install redis"
                ) from e
            client = redis.Redis.from_url(redis_url, decode_responses=True)
        self._client = client

    async def get(self, key: str) -> CacheEntry | None:
        """Retrieve cache entry by key."""
        data = self._client.get(f"{_KEY_PREFIX}{key}")
        if data is None:
            return None
        try:
            return CacheEntry(**json.loads(data))
        except ValueError as e:
            logger.warning("Failed to deserialize cache entry %s: %s", key, e)
            return None

    async def put(self, entry: CacheEntry) -> None:
        """Store a cache entry with a native Redis expiry."""
        redis_key = f"{_KEY_PREFIX}{entry.key}"
        self._client.set(redis_key, entry.model_dump_json(), px=entry.ttl_ms)
        # Maintain a set of all cache keys for list_entries / clear
        self._client.sadd(_INDEX_KEY, entry.key)

    async def delete(self, key: str) -> None:
        """Remove a cache entry."""
        self._client.delete(f"{_KEY_PREFIX}{key}")
        self._client.srem(_INDEX_KEY, key)

    async def clear(self, kind: str | None = None) -> int:
        removed = 0
        for key in list(self._client.smembers(_INDEX_KEY)):
            if kind is not None:
                entry = await self.get(key)
                if entry is not None and entry.kind != kind:
                    continue
            await self.delete(key)
            removed += 1
        return removed

    async def list_entries(self) -> list[CacheEntry]:
        """List all cached entries, pruning index members Redis expired."""
        entries: list[CacheEntry] = []
        for key in self._client.smembers(_INDEX_KEY):
            entry = await self.get(key)
            if entry is None:
                self._client.srem(_INDEX_KEY, key)
                continue
            entries.append(entry)
        return entries

    async def close(self) -> None:
        """Close the Redis connection."""
        self._client.close()
