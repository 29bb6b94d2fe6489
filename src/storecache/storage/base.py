"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Module: storage/base.py.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


class StorageError(RuntimeError):
    """Base error raised by storage backends."""


class StorageQuotaExceededError(StorageError):
    """Raised when a write would exceed the medium's capacity."""


class StorageUnavailableError(StorageError):
    """Raised when the medium is disabled or cannot be reached."""


@runtime_checkable
class KeyValueStorage(Protocol):
    """
    Synchronous string-keyed, string-valued storage medium.

    Mirrors the browser's persistent storage API: item get/set/remove, key
    enumeration and length. ``keys()`` returns a snapshot so callers may remove
    items while iterating it.
    """

    backend_id: str

    def get_item(self, key: str) -> str | None: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...

    def keys(self) -> list[str]: ...

    def __len__(self) -> int: ...
