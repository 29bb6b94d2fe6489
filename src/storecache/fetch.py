"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Read-through helpers combining the cache with a remote fetch.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from .keys import QueryParams
from .store import CacheStore

logger = logging.getLogger("storecache.fetch")

T = TypeVar("T")

CATEGORIES_TTL_MS = 5 * 60 * 1000
# Inventory changes more often than the category tree.
PRODUCTS_TTL_MS = 3 * 60 * 1000
FEATURED_PRODUCTS_TTL_MS = 3 * 60 * 1000


def _cached(
    store: CacheStore[T],
    path: str,
    params: QueryParams | None,
    force_refresh: bool,
) -> tuple[bool, T | None]:
    if force_refresh:
        return False, None
    entry = store.get_entry(path, params)
    if entry is None:
        return False, None
    logger.debug("Cache hit for %s", store.key_for(path, params))
    return True, entry.payload


def get_or_fetch(
    store: CacheStore[T],
    path: str,
    fetch: Callable[[], T],
    *,
    params: QueryParams | None = None,
    ttl_ms: int | None = None,
    force_refresh: bool = False,
) -> T:
    """
    Return the cached payload for ``path`` or fetch and cache it.

    Errors raised by ``fetch`` propagate unchanged; nothing is cached for a
    failed fetch. Cache failures never do, they only turn into a refetch.
    """
    hit, payload = _cached(store, path, params, force_refresh)
    if hit:
        return payload  # type: ignore[return-value]
    fresh = fetch()
    store.set(path, fresh, ttl_ms, params=params)
    return fresh


async def aget_or_fetch(
    store: CacheStore[T],
    path: str,
    fetch: Callable[[], Awaitable[T]],
    *,
    params: QueryParams | None = None,
    ttl_ms: int | None = None,
    force_refresh: bool = False,
) -> T:
    """Async variant of ``get_or_fetch`` for coroutine fetchers."""
    hit, payload = _cached(store, path, params, force_refresh)
    if hit:
        return payload  # type: ignore[return-value]
    fresh = await fetch()
    store.set(path, fresh, ttl_ms, params=params)
    return fresh
