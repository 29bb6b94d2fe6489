"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

CacheStore: the read/write/delete surface over persisted cache entries.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from typing import Generic, TypeVar

from .codec import CorruptEntryError, JsonPayloadCodec, PayloadCodec, decode_entry, encode_entry
from .keys import CACHE_PREFIX, QueryParams, build_cache_key
from .storage.base import KeyValueStorage, StorageError, StorageQuotaExceededError
from .types import CacheEntry, CacheStats
from .utils import now_ms, utf16_length

logger = logging.getLogger("storecache.store")

DEFAULT_TTL_MS = 5 * 60 * 1000

T = TypeVar("T")
R = TypeVar("R")


class CacheStore(Generic[T]):
    """
    TTL cache over an injected key-value storage medium.

    The store is fail-open: every public method runs through
    ``_safe_execute``, so storage errors, corrupt entries and bad keys are
    logged and turned into a miss (or a no-op) instead of reaching the caller.

    Only keys starting with ``prefix`` are owned by the store. Anything else in
    the same medium is left alone by clears, sweeps and stats.
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        *,
        prefix: str = CACHE_PREFIX,
        default_ttl_ms: int = DEFAULT_TTL_MS,
        codec: PayloadCodec[T] | None = None,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        if not prefix:
            raise ValueError("Cache prefix must be non-empty")
        if default_ttl_ms < 0:
            raise ValueError("default_ttl_ms must be >= 0")
        self._storage = storage
        self._prefix = prefix
        self._default_ttl_ms = default_ttl_ms
        self._codec: PayloadCodec[T] = codec or JsonPayloadCodec()
        self._clock = clock

    @property
    def prefix(self) -> str:
        return self._prefix

    @property
    def default_ttl_ms(self) -> int:
        return self._default_ttl_ms

    @property
    def storage(self) -> KeyValueStorage:
        return self._storage

    def key_for(self, key: str, params: QueryParams | None = None) -> str:
        """Canonical storage key for a resource path (or an already-built key)."""
        return build_cache_key(key, params, prefix=self._prefix)

    def _safe_execute(self, operation: str, fn: Callable[[], R], default: R) -> R:
        try:
            return fn()
        except StorageError as exc:
            logger.warning("Cache %s skipped, storage error: %s", operation, exc)
        except Exception:  # noqa: BLE001
            logger.exception("Cache %s failed", operation)
        return default

    def _owned_keys(self) -> Iterator[str]:
        for key in self._storage.keys():
            if key.startswith(self._prefix):
                yield key

    def _read(self, storage_key: str) -> CacheEntry[T] | None:
        raw = self._storage.get_item(storage_key)
        if raw is None:
            return None
        try:
            entry = decode_entry(storage_key, raw, codec=self._codec)
        except CorruptEntryError:
            logger.warning("Removing corrupt cache entry %s", storage_key)
            self._storage.remove_item(storage_key)
            return None
        if not entry.is_live(self._clock()):
            self._storage.remove_item(storage_key)
            return None
        return entry

    def get_entry(self, key: str, params: QueryParams | None = None) -> CacheEntry[T] | None:
        """
        Return the live entry for ``key`` or ``None``.

        Expired and corrupt entries are deleted on the way out.
        """
        return self._safe_execute("get", lambda: self._read(self.key_for(key, params)), None)

    def get(self, key: str, params: QueryParams | None = None) -> T | None:
        """Return the cached payload for ``key``, or ``None`` on a miss."""
        entry = self.get_entry(key, params)
        return None if entry is None else entry.payload

    def _write(self, storage_key: str, payload: T, ttl_ms: int) -> None:
        raw = encode_entry(payload, stored_at=self._clock(), ttl_ms=ttl_ms, codec=self._codec)
        try:
            self._storage.set_item(storage_key, raw)
            return
        except StorageQuotaExceededError:
            logger.warning("Storage quota exceeded writing %s, sweeping expired entries", storage_key)
        self._sweep()
        try:
            self._storage.set_item(storage_key, raw)
        except StorageQuotaExceededError:
            logger.warning("Cache still full after cleanup, dropping write for %s", storage_key)
            # The previous value is superseded by the payload that could not be stored.
            self._storage.remove_item(storage_key)

    def set(
        self,
        key: str,
        payload: T,
        ttl_ms: int | None = None,
        *,
        params: QueryParams | None = None,
    ) -> None:
        """
        Store ``payload`` under ``key`` for ``ttl_ms`` milliseconds.

        Writes are best-effort: a full medium triggers one sweep of expired
        entries and a single retry, after which the write is dropped.
        """

        def _run() -> None:
            effective_ttl = self._default_ttl_ms if ttl_ms is None else int(ttl_ms)
            if effective_ttl < 0:
                raise ValueError(f"ttl_ms must be >= 0, got {effective_ttl}")
            self._write(self.key_for(key, params), payload, effective_ttl)

        self._safe_execute("set", _run, None)

    def remove(self, key: str, params: QueryParams | None = None) -> None:
        """Delete one entry. Missing keys are ignored."""
        self._safe_execute(
            "remove", lambda: self._storage.remove_item(self.key_for(key, params)), None
        )

    def _remove_matching(self, predicate: Callable[[str], bool]) -> int:
        doomed = [key for key in self._owned_keys() if predicate(key)]
        for key in doomed:
            self._storage.remove_item(key)
        return len(doomed)

    def clear_all(self) -> int:
        """Remove every owned entry and return how many were removed."""

        def _run() -> int:
            removed = self._remove_matching(lambda _key: True)
            logger.info("Cleared all %d cache entries", removed)
            return removed

        return self._safe_execute("clear_all", _run, 0)

    def clear_by_pattern(self, pattern: str) -> int:
        """
        Remove every owned entry whose storage key contains ``pattern``.

        ``pattern`` is a plain substring, not a regular expression, so
        ``"/api/products"`` also drops every paginated or filtered variant.
        """

        def _run() -> int:
            removed = self._remove_matching(lambda key: pattern in key)
            logger.info("Cleared %d cache entries matching pattern %r", removed, pattern)
            return removed

        return self._safe_execute("clear_by_pattern", _run, 0)

    def _sweep(self) -> int:
        now = self._clock()
        doomed: list[str] = []
        for key in self._owned_keys():
            try:
                raw = self._storage.get_item(key)
            except StorageError as exc:
                logger.warning("Sweep could not read %s: %s", key, exc)
                continue
            if raw is None:
                continue
            try:
                entry = decode_entry(key, raw, codec=self._codec)
            except CorruptEntryError:
                doomed.append(key)
                continue
            if not entry.is_live(now):
                doomed.append(key)

        removed = 0
        for key in doomed:
            try:
                self._storage.remove_item(key)
            except StorageError as exc:
                logger.warning("Sweep could not remove %s: %s", key, exc)
                continue
            removed += 1
        if removed:
            logger.info("Cleared %d expired cache entries", removed)
        else:
            logger.debug("No expired cache entries to clear")
        return removed

    def sweep_expired(self) -> int:
        """Remove expired and unreadable entries; returns the count removed."""
        return self._safe_execute("sweep_expired", self._sweep, 0)

    def _stats(self) -> CacheStats:
        now = self._clock()
        total = expired = size = 0
        for key in self._owned_keys():
            raw = self._storage.get_item(key)
            if raw is None:
                continue
            total += 1
            size += utf16_length(raw)
            try:
                entry = decode_entry(key, raw, codec=self._codec)
            except CorruptEntryError:
                expired += 1
                continue
            if not entry.is_live(now):
                expired += 1
        return CacheStats(
            total_entries=total,
            expired_entries=expired,
            active_entries=total - expired,
            total_bytes=size,
        )

    def stats(self) -> CacheStats:
        """Scan owned keys and report entry counts and stored size."""
        return self._safe_execute("stats", self._stats, CacheStats())

    def __repr__(self) -> str:
        backend = getattr(self._storage, "backend_id", type(self._storage).__name__)
        return f"CacheStore(backend={backend!r}, prefix={self._prefix!r})"
