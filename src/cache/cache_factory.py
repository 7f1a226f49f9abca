# src/cache/cache_factory.py — v3
"""Factory for cache record store instantiation."""

from __future__ import annotations

from inspectcache.cache.base_cache_store import BaseCacheStore
from inspectcache.config.settings import Settings


def create_cache_store(
    collection: str, settings: Settings | None = None
) -> BaseCacheStore:
    """Instantiate the configured cache backend for one collection.

    Args:
        collection: Record collection (one per scope family).
        settings: Application settings. Defaults to JSON backend.

    Returns:
        Configured BaseCacheStore implementation.
    """
    backend = "json" if settings is None else settings.cache_backend
    cache_root = ".inspectcache/cache" if settings is None else str(settings.cache_root)

    if backend == "json":
        from inspectcache.cache.json_store import JsonCacheStore
        return JsonCacheStore(cache_root=cache_root, collection=collection)

    if backend == "sqlite":
        from inspectcache.cache.sqlite_store import SqliteCacheStore
        db_path = f"{cache_root}/inspectcache.db"
        return SqliteCacheStore(db_path=db_path, collection=collection)

    if backend == "redis":
        from inspectcache.cache.redis_store import RedisCacheStore
        if settings is None or not settings.cache_redis_url:
            raise ValueError(
                "CACHE_REDIS_URL must be set when CACHE_BACKEND=redis"
            )
        return RedisCacheStore(
            redis_url=settings.cache_redis_url, collection=collection
        )

    raise ValueError(f"Unsupported cache backend: {backend!r}")
