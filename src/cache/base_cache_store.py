# src/cache/base_cache_store.py — v3
"""Abstract interface shared by every cache tier backend.

Tiers store entries as given; expiry is interpreted by TieredCache.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from agenticad.cache.models import CacheEntry


class BaseCacheStore(ABC):
    """Unified interface for cache storage backends."""

    @abstractmethod
    async def get(self, key: str) -> CacheEntry | None:
        """Retrieve an entry by key, expired or not."""

    @abstractmethod
    async def put(self, entry: CacheEntry) -> None:
        """Store or overwrite an entry."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove an entry. Missing keys are ignored."""

    @abstractmethod
    async def clear(self, kind: str | None = None) -> int:
        """Remove all entries, or those of one kind. Returns count removed."""

    @abstractmethod
    async def list_entries(self) -> list[CacheEntry]:
        """List every stored entry (diagnostics, sweeps)."""

    async def delete_expired(self, now_ms: int) -> int:
        """Remove entries expired at ``now_ms``. Returns count removed.

        Backends with an expiry index override this with a single sweep.
        """
        removed = 0
        for entry in await self.list_entries():
            if entry.is_expired(now_ms):
                await self.delete(entry.key)
                removed += 1
        return removed

    async def count(self) -> int:
        """Number of stored entries."""
        return len(await self.list_entries())

    async def close(self) -> None:
        """Release backend resources."""
