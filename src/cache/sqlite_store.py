# src/cache/sqlite_store.py — v2
"""SQLite-based cache store (CACHE_BACKEND=sqlite, the default local tier).

Uses stdlib sqlite3, no external dependency. Durable per device.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from pathlib import Path

from agenticad.cache.base_cache_store import BaseCacheStore
from agenticad.cache.models import CacheEntry

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS cache_entries (
    key TEXT PRIMARY KEY,
    kind TEXT NOT NULL,
    data TEXT NOT NULL,
    created_at_ms INTEGER NOT NULL,
    expires_at_ms INTEGER NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_kind ON cache_entries(kind);
CREATE INDEX IF NOT EXISTS idx_expires_at ON cache_entries(expires_at_ms);
"""


class SqliteCacheStore(BaseCacheStore):
    """SQLite-backed cache store."""

    def __init__(self, db_path: Path | str) -> None:
        self._db_path = Path(db_path).expanduser()
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(str(self._db_path))
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.executescript(_SCHEMA)

    async def get(self, key: str) -> CacheEntry | None:
        """Retrieve cache entry by key."""
        cursor = self._conn.execute(
            "SELECT data FROM cache_entries WHERE key = ?", (key,)
        )
        row = cursor.fetchone()
        if row is None:
            return None
        try:
            return CacheEntry(**json.loads(row[0]))
        except ValueError as e:
            logger.warning("Failed to deserialize cache entry %s: %s", key, e)
            return None

    async def put(self, entry: CacheEntry) -> None:
        """Store a cache entry (upsert)."""
        self._conn.execute(
            """INSERT OR REPLACE INTO cache_entries
               (key, kind, data, created_at_ms, expires_at_ms)
               VALUES (?, ?, ?, ?, ?)""",
            (
                entry.key,
                entry.kind,
                entry.model_dump_json(),
                entry.created_at_ms,
                entry.expires_at_ms,
            ),
        )
        self._conn.commit()

    async def delete(self, key: str) -> None:
        """Remove a cache entry."""
        self._conn.execute("DELETE FROM cache_entries WHERE key = ?", (key,))
        self._conn.commit()

    async def clear(self, kind: str | None = None) -> int:
        if kind is None:
            cursor = self._conn.execute("DELETE FROM cache_entries")
        else:
            cursor = self._conn.execute(
                "DELETE FROM cache_entries WHERE kind = ?", (kind,)
            )
        self._conn.commit()
        return cursor.rowcount

    async def delete_expired(self, now_ms: int) -> int:
        """Indexed sweep of expired rows."""
        cursor = self._conn.execute(
            "DELETE FROM cache_entries WHERE expires_at_ms <= ?", (now_ms,)
        )
        self._conn.commit()
        return cursor.rowcount

    async def list_entries(self) -> list[CacheEntry]:
        """List all cached entries."""
        cursor = self._conn.execute("SELECT data FROM cache_entries")
        entries: list[CacheEntry] = []
        for row in cursor.fetchall():
            try:
                entries.append(CacheEntry(**json.loads(row[0])))
            except ValueError:
                continue
        return entries

    async def count(self) -> int:
        cursor = self._conn.execute("SELECT COUNT(*) FROM cache_entries")
        return int(cursor.fetchone()[0])

    async def close(self) -> None:
        """Close the database connection."""
        self._conn.close()
