# src/cache/memory_store.py — v1
"""In-process cache store (CACHE_BACKEND=memory).

Not durable. Used by tests and short-lived tooling.
"""

from __future__ import annotations

from agenticad.cache.base_cache_store import BaseCacheStore
from agenticad.cache.models import CacheEntry


class MemoryCacheStore(BaseCacheStore):
    """Dict-backed cache store."""

    def __init__(self) -> None:
        self._entries: dict[str, CacheEntry] = {}

    async def get(self, key: str) -> CacheEntry | None:
        return self._entries.get(key)

    async def put(self, entry: CacheEntry) -> None:
        self._entries[entry.key] = entry

    async def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    async def clear(self, kind: str | None = None) -> int:
        if kind is None:
            removed = len(self._entries)
            self._entries.clear()
            return removed
        keys = [k for k, e in self._entries.items() if e.kind == kind]
        for k in keys:
            del self._entries[k]
        return len(keys)

    async def list_entries(self) -> list[CacheEntry]:
        return list(self._entries.values())

    async def count(self) -> int:
        return len(self._entries)
