"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

This module provides the public API for storecache, a client-side response
cache with TTL expiry, periodic sweeping and pattern-based invalidation.
"""

from __future__ import annotations

from .codec import CorruptEntryError, JsonPayloadCodec, PayloadCodec, StoredEnvelope
from .factory import create_cache_store_from_env, create_storage_from_env
from .fetch import (
    CATEGORIES_TTL_MS,
    FEATURED_PRODUCTS_TTL_MS,
    PRODUCTS_TTL_MS,
    aget_or_fetch,
    get_or_fetch,
)
from .invalidation import (
    CATEGORY_UPDATED,
    DEFAULT_INVALIDATION_BINDINGS,
    PRODUCT_UPDATED,
    PatternInvalidator,
)
from .keys import CACHE_PREFIX, build_cache_key
from .settings import CacheSettings
from .storage import (
    InMemoryStorage,
    KeyValueStorage,
    RedisStorage,
    SQLiteStorage,
    StorageError,
    StorageQuotaExceededError,
    StorageUnavailableError,
)
from .store import DEFAULT_TTL_MS, CacheStore
from .sweeper import DEFAULT_SWEEP_INTERVAL_S, ExpirationSweeper
from .types import CacheEntry, CacheStats, JsonObject, JsonValue
from .utils import now_ms

__all__ = [
    "CACHE_PREFIX",
    "DEFAULT_TTL_MS",
    "DEFAULT_SWEEP_INTERVAL_S",
    "CATEGORIES_TTL_MS",
    "PRODUCTS_TTL_MS",
    "FEATURED_PRODUCTS_TTL_MS",
    "JsonValue",
    "JsonObject",
    "CacheEntry",
    "CacheStats",
    "now_ms",
    "build_cache_key",
    "PayloadCodec",
    "JsonPayloadCodec",
    "StoredEnvelope",
    "CorruptEntryError",
    "KeyValueStorage",
    "StorageError",
    "StorageQuotaExceededError",
    "StorageUnavailableError",
    "InMemoryStorage",
    "SQLiteStorage",
    "RedisStorage",
    "CacheStore",
    "ExpirationSweeper",
    "PatternInvalidator",
    "PRODUCT_UPDATED",
    "CATEGORY_UPDATED",
    "DEFAULT_INVALIDATION_BINDINGS",
    "get_or_fetch",
    "aget_or_fetch",
    "CacheSettings",
    "create_storage_from_env",
    "create_cache_store_from_env",
]
