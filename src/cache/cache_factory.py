# src/cache/cache_factory.py — v3
"""Factory for cache tier instantiation."""

from __future__ import annotations

from pathlib import Path

from agenticad.cache.base_cache_store import BaseCacheStore
from agenticad.cache.policy import CachePolicy
from agenticad.cache.tiered_cache import Clock, TieredCache, wall_clock_ms
from agenticad.config.settings import Settings


def create_local_store(settings: Settings | None = None) -> BaseCacheStore:
    """Instantiate the configured local tier backend.

    Args:
        settings: Application settings. Defaults to the SQLite backend.

    Returns:
        Configured BaseCacheStore implementation.
    """
    backend = "sqlite" if settings is None else settings.cache_backend
    cache_root = Path("~/.agenticad/cache") if settings is None else settings.cache_root

    if backend == "memory":
        from agenticad.cache.memory_store import MemoryCacheStore
        return MemoryCacheStore()

    if backend == "json":
        from agenticad.cache.json_store import JsonCacheStore
        return JsonCacheStore(cache_root=cache_root)

    if backend == "sqlite":
        from agenticad.cache.sqlite_store import SqliteCacheStore
        return SqliteCacheStore(db_path=Path(cache_root) / "agenticad_cache.db")

    if backend == "redis":
        from agenticad.cache.redis_store import RedisCacheStore
        if settings is None or not settings.cache_redis_url:
            raise ValueError(
                "CACHE_REDIS_URL must be set when CACHE_BACKEND=redis"
            )
        return RedisCacheStore(redis_url=settings.cache_redis_url)

    raise ValueError(f"Unsupported cache backend: {backend!r}")


def create_remote_store(settings: Settings | None = None) -> BaseCacheStore | None:
    """Instantiate the remote sync tier, or None when not configured."""
    if settings is None or not settings.cache_remote_url:
        return None

    from agenticad.cache.remote_store import SupabaseRemoteStore
    return SupabaseRemoteStore(
        base_url=settings.cache_remote_url,
        api_key=settings.cache_remote_key,
        table=settings.cache_remote_table,
        user_id=settings.cache_user_id or None,
        timeout_s=settings.cache_remote_timeout_s,
    )


def create_cache_policy(settings: Settings | None = None) -> CachePolicy:
    if settings is None:
        return CachePolicy()
    return CachePolicy(
        text_primary_ttl_ms=settings.cache_ttl_text_primary_ms,
        text_secondary_ttl_ms=settings.cache_ttl_text_secondary_ms,
        image_primary_ttl_ms=settings.cache_ttl_image_primary_ms,
        image_secondary_ttl_ms=settings.cache_ttl_image_secondary_ms,
        heuristic_ttl_ms=settings.cache_ttl_heuristic_ms,
        voice_ttl_ms=settings.cache_ttl_voice_ms,
        model_ttl_ms=settings.cache_ttl_model_ms,
    )


def create_cache(
    settings: Settings | None = None,
    clock: Clock = wall_clock_ms,
) -> TieredCache:
    """Build the TieredCache from settings.

    CACHE_ENABLED=false yields a memory-only cache with no remote tier.
    """
    if settings is not None and not settings.cache_enabled:
        from agenticad.cache.memory_store import MemoryCacheStore
        local: BaseCacheStore = MemoryCacheStore()
        remote = None
    else:
        local = create_local_store(settings)
        remote = create_remote_store(settings)
    return TieredCache(
        local=local,
        remote=remote,
        policy=create_cache_policy(settings),
        clock=clock,
    )
