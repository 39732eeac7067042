# tests/unit/cache/test_unit_cache_factory.py — v4
"""Tests for cache/cache_factory.py."""

from __future__ import annotations

import pytest

from agenticad.cache.cache_factory import (
    create_cache,
    create_cache_policy,
    create_local_store,
    create_remote_store,
)
from agenticad.cache.json_store import JsonCacheStore
from agenticad.cache.memory_store import MemoryCacheStore
from agenticad.cache.remote_store import SupabaseRemoteStore
from agenticad.cache.sqlite_store import SqliteCacheStore
from agenticad.config.settings import Settings


class TestCreateLocalStore:
    def test_memory_backend(self, settings):
        assert isinstance(create_local_store(settings), MemoryCacheStore)

    def test_json_backend(self, tmp_path):
        s = Settings(_env_file=None, cache_backend="json", cache_root=tmp_path)
        assert isinstance(create_local_store(s), JsonCacheStore)

    @pytest.mark.asyncio
    async def test_sqlite_backend(self, tmp_path):
        s = Settings(_env_file=None, cache_backend="sqlite", cache_root=tmp_path)
        store = create_local_store(s)
        assert isinstance(store, SqliteCacheStore)
        await store.close()

    def test_redis_missing_url(self, settings):
        s = settings.model_copy(update={"cache_backend": "redis", "cache_redis_url": ""})
        with pytest.raises(ValueError, match="CACHE_REDIS_URL"):
            create_local_store(s)

    def test_unsupported_backend(self, settings):
        s = settings.model_copy(update={"cache_backend": "nonexistent"})
        with pytest.raises(ValueError, match="Unsupported"):
            create_local_store(s)


class TestCreateRemoteStore:
    def test_none_without_url(self, settings):
        assert create_remote_store(settings) is None
        assert create_remote_store(None) is None

    @pytest.mark.asyncio
    async def test_supabase_when_configured(self, settings):
        s = settings.model_copy(
            update={"cache_remote_url": "https://x.supabase.co", "cache_remote_key": "k"}
        )
        store = create_remote_store(s)
        assert isinstance(store, SupabaseRemoteStore)
        await store.close()


class TestCreateCache:
    def test_policy_from_settings(self, settings):
        s = settings.model_copy(update={"cache_ttl_voice_ms": 42})
        assert create_cache_policy(s).for_voice().ttl_ms == 42

    def test_disabled_cache_is_memory_only(self, settings):
        s = settings.model_copy(
            update={
                "cache_enabled": False,
                "cache_remote_url": "https://x.supabase.co",
                "cache_remote_key": "k",
            }
        )
        cache = create_cache(s)
        assert cache.has_remote is False

    def test_clock_injected(self, settings, clock):
        cache = create_cache(settings, clock=clock)
        assert cache.has_remote is False
