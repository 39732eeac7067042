# src/cache/json_store.py — v2
"""JSON file-based cache store (CACHE_BACKEND=json).

Stores cache entries as individual JSON files under CACHE_ROOT.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from agenticad.cache.base_cache_store import BaseCacheStore
from agenticad.cache.models import CacheEntry

logger = logging.getLogger(__name__)


class JsonCacheStore(BaseCacheStore):
    """File-based cache store using JSON files."""

    def __init__(self, cache_root: Path | str) -> None:
        self._root = Path(cache_root).expanduser()
        self._root.mkdir(parents=True, exist_ok=True)

    async def get(self, key: str) -> CacheEntry | None:
        """Retrieve cache entry by key."""
        path = self._entry_path(key)
        if not path.exists():
            return None
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            return CacheEntry(**data)
        except (json.JSONDecodeError, ValueError) as e:
            logger.warning("Failed to read cache entry %s: %s", key, e)
            return None

    async def put(self, entry: CacheEntry) -> None:
        """Store a cache entry."""
        path = self._entry_path(entry.key)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(entry.model_dump_json(indent=2), encoding="utf-8")

    async def delete(self, key: str) -> None:
        """Remove a cache entry."""
        path = self._entry_path(key)
        if path.exists():
            path.unlink()

    async def clear(self, kind: str | None = None) -> int:
        removed = 0
        for path in self._root.glob("*.json"):
            if kind is not None:
                entry = self._load(path)
                if entry is None or entry.kind != kind:
                    continue
            path.unlink(missing_ok=True)
            removed += 1
        return removed

    async def list_entries(self) -> list[CacheEntry]:
        """List all cached entries."""
        entries: list[CacheEntry] = []
        if not self._root.is_dir():
            return entries

        for path in self._root.glob("*.json"):
            entry = self._load(path)
            if entry is not None:
                entries.append(entry)
        return entries

    @staticmethod
    def _load(path: Path) -> CacheEntry | None:
        try:
            return CacheEntry(**json.loads(path.read_text(encoding="utf-8")))
        except (OSError, ValueError):
            return None

    def _entry_path(self, key: str) -> Path:
        """Return file path for a cache key."""
        safe_key = key.replace("/", "_").replace("\\", "_")
        return self._root / f"{safe_key}.json"
