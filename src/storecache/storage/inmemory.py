"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Module: storage/inmemory.py.
"""

from __future__ import annotations

from threading import Lock

from ..utils import utf16_length
from .base import KeyValueStorage, StorageQuotaExceededError


class InMemoryStorage(KeyValueStorage):
    """
    Process-local storage suitable for development/test workloads.

    Args:
        quota_chars: Optional capacity in UTF-16 code units counted over keys
            plus values, the way browser storage quotas are measured. Writes
            that would exceed it raise ``StorageQuotaExceededError``.
    """

    backend_id = "inmemory"

    def __init__(self, *, quota_chars: int | None = None) -> None:
        if quota_chars is not None and quota_chars <= 0:
            raise ValueError("quota_chars must be > 0")
        self._items: dict[str, str] = {}
        self._quota_chars = quota_chars
        self._lock = Lock()

    def _used_chars(self) -> int:
        return sum(utf16_length(k) + utf16_length(v) for k, v in self._items.items())

    def get_item(self, key: str) -> str | None:
        with self._lock:
            return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        with self._lock:
            if self._quota_chars is not None:
                previous = self._items.get(key)
                used = self._used_chars()
                if previous is not None:
                    used -= utf16_length(key) + utf16_length(previous)
                if used + utf16_length(key) + utf16_length(value) > self._quota_chars:
                    raise StorageQuotaExceededError(
                        f"Writing '{key}' would exceed quota of {self._quota_chars} chars"
                    )
            self._items[key] = value

    def remove_item(self, key: str) -> None:
        with self._lock:
            self._items.pop(key, None)

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._items)

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)
