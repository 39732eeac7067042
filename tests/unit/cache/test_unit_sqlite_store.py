# tests/unit/cache/test_unit_sqlite_store.py — v2
"""Tests for cache/sqlite_store.py — SQLite specifics (stdlib sqlite3)."""

from __future__ import annotations

import pytest

from agenticad.cache.models import CacheEntry
from agenticad.cache.sqlite_store import SqliteCacheStore


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "nested" / "test_cache.db"


def _entry(key: str, created_at_ms: int = 0, ttl_ms: int = 100) -> CacheEntry:
    return CacheEntry(
        key=key, kind="ai_response", value={"k": key},
        created_at_ms=created_at_ms, ttl_ms=ttl_ms,
    )


class TestSqliteCacheStore:
    @pytest.mark.asyncio
    async def test_creates_parent_directory(self, db_path):
        store = SqliteCacheStore(db_path=db_path)
        assert db_path.parent.is_dir()
        await store.close()

    @pytest.mark.asyncio
    async def test_persists_across_reopen(self, db_path):
        store = SqliteCacheStore(db_path=db_path)
        await store.put(_entry("persisted"))
        await store.close()

        reopened = SqliteCacheStore(db_path=db_path)
        result = await reopened.get("persisted")
        assert result is not None
        assert result.value == {"k": "persisted"}
        await reopened.close()

    @pytest.mark.asyncio
    async def test_delete_expired(self, db_path):
        store = SqliteCacheStore(db_path=db_path)
        await store.put(_entry("old", created_at_ms=0, ttl_ms=100))
        await store.put(_entry("fresh", created_at_ms=0, ttl_ms=10_000))
        removed = await store.delete_expired(now_ms=100)
        assert removed == 1
        assert await store.get("old") is None
        assert await store.get("fresh") is not None
        await store.close()

    @pytest.mark.asyncio
    async def test_count(self, db_path):
        store = SqliteCacheStore(db_path=db_path)
        await store.put(_entry("a"))
        await store.put(_entry("b"))
        assert await store.count() == 2
        await store.close()
