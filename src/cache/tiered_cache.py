# src/cache/tiered_cache.py — v2
"""Two-tier cache: authoritative local tier plus optional remote sync tier.

Reads go local first, then read through the remote tier and backfill.
Writes always land locally; remote propagation is a fire-and-forget task
whose failure is only logged. Expiry is lazy: an entry past
``created_at_ms + ttl_ms`` reads as absent even if still stored.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Callable

from agenticad.cache.base_cache_store import BaseCacheStore
from agenticad.cache.models import CacheEntry, CacheKind, CacheStats
from agenticad.cache.policy import CachePolicy
from agenticad.core.errors import CacheUnavailable
from agenticad.tracking.models import CacheCounters

logger = logging.getLogger(__name__)

Clock = Callable[[], int]


def wall_clock_ms() -> int:
    """Current time in epoch milliseconds."""
    return int(time.time() * 1000)


class TieredCache:
    """Cache store shared by every orchestrator invocation in the process."""

    def __init__(
        self,
        local: BaseCacheStore,
        remote: BaseCacheStore | None = None,
        policy: CachePolicy | None = None,
        clock: Clock = wall_clock_ms,
        counters: CacheCounters | None = None,
    ) -> None:
        self._local = local
        self._remote = remote
        self.policy = policy or CachePolicy()
        self._clock = clock
        self.counters = counters or CacheCounters()
        self._pending: set[asyncio.Task[None]] = set()
        self._remote_warned = False

    @property
    def has_remote(self) -> bool:
        return self._remote is not None

    async def get(self, key: str, kind: CacheKind) -> CacheEntry | None:
        """Return a live entry for ``key`` or None.

        Raises:
            CacheUnavailable: If the local tier cannot be read.
        """
        self.counters.reads += 1
        now = self._clock()

        try:
            entry = await self._local.get(key)
        except Exception as e:
            raise CacheUnavailable("read", e) from e

        if entry is not None and entry.kind == kind:
            if not entry.is_expired(now):
                self.counters.hits += 1
                return entry
            logger.debug("Cache entry %s expired, evicting", key)
            await self._evict_local(key)

        entry = await self._remote_get(key, kind, now)
        if entry is not None:
            self.counters.hits += 1
            self.counters.remote_hits += 1
            return entry

        self.counters.misses += 1
        return None

    async def put(
        self,
        key: str,
        kind: CacheKind,
        value: Any,
        ttl_ms: int,
        sync_to_remote: bool = True,
    ) -> CacheEntry:
        """Store ``value`` locally and optionally schedule a remote upsert.

        Raises:
            CacheUnavailable: If the local tier cannot be written.
        """
        entry = CacheEntry(
            key=key,
            kind=kind,
            value=value,
            created_at_ms=self._clock(),
            ttl_ms=ttl_ms,
            sync_to_remote=sync_to_remote,
        )
        try:
            await self._local.put(entry)
        except Exception as e:
            raise CacheUnavailable("write", e) from e
        self.counters.writes += 1

        if sync_to_remote and self._remote is not None:
            task = asyncio.get_running_loop().create_task(self._sync(entry))
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)
        return entry

    async def drain(self) -> None:
        """Wait for outstanding remote sync tasks."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def stats(self) -> CacheStats:
        """Diagnostics for operational tooling. Never raises."""
        now = self._clock()
        stats = CacheStats(remote_available=self._remote is not None)
        try:
            entries = await self._local.list_entries()
        except Exception as e:
            logger.warning("Failed to read local cache stats: %s", e)
            entries = []

        by_kind: dict[str, int] = {}
        for entry in entries:
            by_kind[entry.kind] = by_kind.get(entry.kind, 0) + 1
            stats.total_size_approx += entry.approx_size()
            if entry.is_expired(now):
                stats.expired_entries += 1
        stats.local_entries = len(entries)
        stats.entries_by_kind = by_kind
        if entries:
            stats.oldest_entry_timestamp = min(e.created_at_ms for e in entries)
            stats.newest_entry_timestamp = max(e.created_at_ms for e in entries)

        if self._remote is not None:
            try:
                stats.remote_entries = await self._remote.count()
            except Exception as e:
                self._log_remote_failure("stats", e)
                stats.remote_available = False
        return stats

    def fallback_for(self, kind: str, context: dict[str, Any] | None = None) -> Any:
        """Conservative canned value used when providers and cache all miss."""
        from agenticad.analysis.heuristic import (
            analyze_heuristically,
            fallback_image_result,
        )

        context = context or {}
        if kind == "ai_response":
            return analyze_heuristically(context.get("input", ""))
        if kind == "image_analysis":
            return fallback_image_result()
        # No canned audio for voice synthesis.
        return None

    async def clear(self, kind: str | None = None) -> int:
        """Reset the local tier (and the remote tier, best-effort)."""
        try:
            removed = await self._local.clear(kind)
        except Exception as e:
            raise CacheUnavailable("clear", e) from e
        if self._remote is not None:
            try:
                await self._remote.clear(kind)
            except Exception as e:
                self._log_remote_failure("clear", e)
        logger.info("Cleared %d local cache entries (kind=%s)", removed, kind or "all")
        return removed

    async def purge_expired(self) -> int:
        """Sweep expired local entries. Reads never depend on this."""
        purged = await self._local.delete_expired(self._clock())
        logger.info("Purged %d expired local cache entries", purged)
        return purged

    async def close(self) -> None:
        await self.drain()
        await self._local.close()
        if self._remote is not None:
            await self._remote.close()

    # --- Internal helpers ---

    async def _evict_local(self, key: str) -> None:
        try:
            await self._local.delete(key)
        except Exception as e:
            logger.debug("Failed to evict expired entry %s: %s", key, e)

    async def _remote_get(self, key: str, kind: str, now: int) -> CacheEntry | None:
        if self._remote is None:
            return None
        try:
            entry = await self._remote.get(key)
        except Exception as e:
            self._log_remote_failure("read", e)
            return None
        if entry is None or entry.kind != kind or entry.is_expired(now):
            return None

        try:
            await self._local.put(entry)
        except Exception as e:
            logger.warning("Failed to backfill local cache for %s: %s", key, e)
        return entry

    async def _sync(self, entry: CacheEntry) -> None:
        try:
            await self._remote.put(entry)  # type: ignore[union-attr]
        except Exception as e:
            self.counters.remote_sync_failures += 1
            self._log_remote_failure("sync", e)

    def _log_remote_failure(self, operation: str, error: Exception) -> None:
        if not self._remote_warned:
            logger.warning(
                "Remote cache %s failed, continuing with local tier only: %s",
                operation, error,
            )
            self._remote_warned = True
        else:
            logger.debug("Remote cache %s failed: %s", operation, error)
