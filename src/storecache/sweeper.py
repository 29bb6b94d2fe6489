"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Expiration sweeper: background loop that purges expired cache entries.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from .store import CacheStore

logger = logging.getLogger("storecache.sweeper")

DEFAULT_SWEEP_INTERVAL_S = 10 * 60.0


class ExpirationSweeper:
    """
    Reclaims space held by expired entries instead of waiting for reads.

    ``start()`` runs one sweep immediately (unless ``sweep_on_start`` is
    false) and then repeats it every ``interval_s`` on an asyncio task until
    ``stop()`` is called. Each sweep runs in a worker thread so storage I/O
    never blocks the event loop. Sweeps never remove live entries, so running
    them more often than needed is harmless.
    """

    def __init__(
        self,
        store: CacheStore[Any],
        *,
        interval_s: float = DEFAULT_SWEEP_INTERVAL_S,
        sweep_on_start: bool = True,
    ) -> None:
        if interval_s <= 0:
            raise ValueError("interval_s must be > 0")
        self._store = store
        self._interval_s = interval_s
        self._sweep_on_start = sweep_on_start
        self._task: asyncio.Task[None] | None = None
        self._running = False
        self._sweep_count = 0
        self._last_removed = 0

    @property
    def interval_s(self) -> float:
        return self._interval_s

    @property
    def is_running(self) -> bool:
        """Whether the periodic loop is active."""
        return self._running

    @property
    def sweep_count(self) -> int:
        """Number of completed sweeps."""
        return self._sweep_count

    @property
    def last_removed(self) -> int:
        """Entries removed by the most recent sweep."""
        return self._last_removed

    def sweep_once(self) -> int:
        """Run one sweep synchronously and return the number of removed entries."""
        removed = self._store.sweep_expired()
        self._sweep_count += 1
        self._last_removed = removed
        return removed

    async def start(self) -> None:
        """Sweep once, then keep sweeping on the configured interval."""
        if self._running:
            return
        self._running = True
        if self._sweep_on_start:
            await asyncio.to_thread(self.sweep_once)
        self._task = asyncio.create_task(self._loop())
        logger.info("ExpirationSweeper started (interval_s=%s)", self._interval_s)

    async def stop(self) -> None:
        """Cancel the periodic loop."""
        self._running = False
        if self._task and not self._task.done():
            self._task.cancel()
            await asyncio.gather(self._task, return_exceptions=True)
        self._task = None
        logger.info("ExpirationSweeper stopped after %d sweeps", self._sweep_count)

    async def _loop(self) -> None:
        """Main sweep loop."""
        while self._running:
            try:
                await asyncio.sleep(self._interval_s)
                await asyncio.to_thread(self.sweep_once)
            except asyncio.CancelledError:
                break
            except Exception:
                logger.exception("Sweeper loop error")
