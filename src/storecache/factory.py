"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Factory helpers for selecting storage backends from environment variables.
"""

from __future__ import annotations

from typing import Any

from .settings import CacheSettings
from .storage import InMemoryStorage, KeyValueStorage, SQLiteStorage
from .store import CacheStore


def create_storage_from_env(
    settings: CacheSettings | None = None,
    *,
    redis_client: Any | None = None,
) -> KeyValueStorage:
    """
    Create a storage backend from `STORECACHE_*` settings.

    Backends:
    - `inmemory` (default)
    - `sqlite`
    - `redis`

    Redis resolution:
    - Uses the provided `redis_client` when supplied.
    - Otherwise builds a client from `STORECACHE_REDIS_URL`, falling back to
      host/port/db/password variables, then to localhost.
    """
    settings = settings or CacheSettings.from_env()
    backend = settings.backend.strip().lower()

    if backend in ("mem", "memory", "inmemory", "in_memory"):
        return InMemoryStorage(quota_chars=settings.inmemory_quota_chars)

    if backend in ("sqlite", "sqlite3"):
        return SQLiteStorage(settings.sqlite_path)

    if backend in ("redis",):
        try:
            from .storage.redis import RedisStorage
        except ModuleNotFoundError as exc:  # pragma: no cover
            raise RuntimeError(
                "Redis storage backend requires `redis` to be installed."
            ) from exc

        client = redis_client
        if client is None:
            import redis

            client = redis.Redis.from_url(settings.redis_url or "redis://localhost:6379/0")
        return RedisStorage(client, namespace=settings.redis_namespace)

    raise ValueError(f"Unknown STORECACHE_BACKEND: {backend}")


def create_cache_store_from_env(
    settings: CacheSettings | None = None,
    *,
    redis_client: Any | None = None,
) -> CacheStore[Any]:
    """Create a `CacheStore` over the storage backend selected by settings."""
    settings = settings or CacheSettings.from_env()
    storage = create_storage_from_env(settings, redis_client=redis_client)
    return CacheStore(
        storage,
        prefix=settings.prefix,
        default_ttl_ms=settings.default_ttl_ms,
    )
