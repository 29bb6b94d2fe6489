"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Pattern-based invalidation for write-path mutations.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from threading import Lock
from typing import Any

from .store import CacheStore

logger = logging.getLogger("storecache.invalidation")

PRODUCT_UPDATED = "product_updated"
CATEGORY_UPDATED = "category_updated"

# Product listings embed category names, so category edits purge them too.
DEFAULT_INVALIDATION_BINDINGS: Mapping[str, tuple[str, ...]] = {
    PRODUCT_UPDATED: ("/api/products",),
    CATEGORY_UPDATED: ("/api/categories", "/api/products"),
}


class PatternInvalidator:
    """
    Purges cached reads that a mutation may have made stale.

    Writers name a resource path (or a mutation event bound to paths) instead
    of the exact keys, and every owned key containing that substring is
    removed regardless of its query parameters. Removing too much only costs a
    refetch; removing too little would serve stale data.
    """

    def __init__(
        self,
        store: CacheStore[Any],
        bindings: Mapping[str, Sequence[str]] | None = None,
    ) -> None:
        self._store = store
        self._lock = Lock()
        source = DEFAULT_INVALIDATION_BINDINGS if bindings is None else bindings
        self._bindings: dict[str, list[str]] = {}
        for event, patterns in source.items():
            self.bind(event, *patterns)

    def bind(self, event: str, *patterns: str) -> None:
        """Register patterns purged whenever ``event`` is notified."""
        key = event.strip().lower()
        if not key:
            raise ValueError("Invalidation event name must be non-empty")
        if not patterns or any(not p for p in patterns):
            raise ValueError(f"Event '{event}' needs at least one non-empty pattern")
        with self._lock:
            bound = self._bindings.setdefault(key, [])
            for pattern in patterns:
                if pattern not in bound:
                    bound.append(pattern)

    def patterns_for(self, event: str) -> list[str]:
        with self._lock:
            return list(self._bindings.get(event.strip().lower(), []))

    def invalidate(self, *patterns: str) -> int:
        """Purge entries matching any of ``patterns``; returns the total removed."""
        return sum(self._store.clear_by_pattern(pattern) for pattern in patterns)

    def notify(self, event: str) -> int:
        """Purge every pattern bound to ``event``. Unknown events purge nothing."""
        patterns = self.patterns_for(event)
        if not patterns:
            logger.debug("No invalidation patterns bound to event %r", event)
            return 0
        removed = self.invalidate(*patterns)
        logger.info("Event %r invalidated %d cache entries", event, removed)
        return removed
