"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

This module defines core data models and JSON aliases for the cache subsystem.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeAlias, TypeVar

JsonPrimitive: TypeAlias = str | int | float | bool | None
JsonValue: TypeAlias = JsonPrimitive | list["JsonValue"] | dict[str, "JsonValue"]
JsonObject: TypeAlias = dict[str, JsonValue]

T = TypeVar("T")


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    """One cached response body with its write time and validity window."""

    key: str
    payload: T
    stored_at: int
    ttl_ms: int

    @property
    def expires_at(self) -> int:
        return self.stored_at + self.ttl_ms

    def is_live(self, now_ms: int) -> bool:
        """Entry is live while ``now - stored_at`` has not passed its TTL."""
        return now_ms - self.stored_at <= self.ttl_ms


@dataclass(frozen=True, slots=True)
class CacheStats:
    """
    Snapshot of the owned keyspace.

    Attributes:
        total_entries: Owned keys found in storage.
        expired_entries: Entries past their TTL (or unreadable) that have not
            been physically removed yet.
        active_entries: ``total_entries - expired_entries``.
        total_bytes: Sum of stored value sizes in UTF-16 code units.
    """

    total_entries: int = 0
    expired_entries: int = 0
    active_entries: int = 0
    total_bytes: int = 0

    @property
    def total_kb(self) -> float:
        return round(self.total_bytes / 1024, 2)
