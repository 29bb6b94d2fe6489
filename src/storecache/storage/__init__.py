"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

This module provides storage media the cache can persist entries in.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .base import (
    KeyValueStorage,
    StorageError,
    StorageQuotaExceededError,
    StorageUnavailableError,
)
from .inmemory import InMemoryStorage
from .sqlite import SQLiteStorage

RedisStorage = None  # type: ignore[assignment]


__all__ = [
    "KeyValueStorage",
    "StorageError",
    "StorageQuotaExceededError",
    "StorageUnavailableError",
    "InMemoryStorage",
    "SQLiteStorage",
    "RedisStorage",
]

try:
    from .redis import RedisStorage as _RedisStorage
except ModuleNotFoundError:  # optional dependency: redis
    pass
else:
    RedisStorage = _RedisStorage

if TYPE_CHECKING:
    from .redis import RedisStorage
