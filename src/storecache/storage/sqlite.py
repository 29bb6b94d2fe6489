"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Module: storage/sqlite.py.
"""

from __future__ import annotations

import sqlite3
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from .base import KeyValueStorage, StorageQuotaExceededError, StorageUnavailableError

_SQLITE_FULL = 13

_SCHEMA = """
CREATE TABLE IF NOT EXISTS cache_items (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL
)
"""


class SQLiteStorage(KeyValueStorage):
    """
    File-backed storage that survives process restarts.

    Args:
        path: SQLite database file, or ``":memory:"``.
        max_pages: Optional ``PRAGMA max_page_count`` cap. When the file
            reaches it, writes raise ``StorageQuotaExceededError``.
    """

    backend_id = "sqlite"

    def __init__(self, path: str | Path, *, max_pages: int | None = None) -> None:
        self._path = str(path)
        self._lock = threading.RLock()
        try:
            self._conn = sqlite3.connect(self._path, check_same_thread=False)
            self._conn.execute(_SCHEMA)
            if max_pages is not None:
                self._conn.execute(f"PRAGMA max_page_count = {int(max_pages)}")
            self._conn.commit()
        except sqlite3.Error as exc:
            raise StorageUnavailableError(f"Cannot open SQLite storage at {self._path}") from exc

    @contextmanager
    def _translate_errors(self) -> Iterator[None]:
        try:
            yield
        except sqlite3.OperationalError as exc:
            if getattr(exc, "sqlite_errorcode", None) == _SQLITE_FULL or "is full" in str(exc):
                raise StorageQuotaExceededError(str(exc)) from exc
            raise StorageUnavailableError(str(exc)) from exc
        except sqlite3.Error as exc:
            raise StorageUnavailableError(str(exc)) from exc

    def get_item(self, key: str) -> str | None:
        with self._lock, self._translate_errors():
            row = self._conn.execute(
                "SELECT value FROM cache_items WHERE key = ?", (key,)
            ).fetchone()
        return None if row is None else row[0]

    def set_item(self, key: str, value: str) -> None:
        with self._lock, self._translate_errors():
            try:
                self._conn.execute(
                    "INSERT INTO cache_items (key, value) VALUES (?, ?) "
                    "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
                    (key, value),
                )
                self._conn.commit()
            except sqlite3.Error:
                self._conn.rollback()
                raise

    def remove_item(self, key: str) -> None:
        with self._lock, self._translate_errors():
            self._conn.execute("DELETE FROM cache_items WHERE key = ?", (key,))
            self._conn.commit()

    def keys(self) -> list[str]:
        with self._lock, self._translate_errors():
            rows = self._conn.execute("SELECT key FROM cache_items ORDER BY key").fetchall()
        return [row[0] for row in rows]

    def __len__(self) -> int:
        with self._lock, self._translate_errors():
            (count,) = self._conn.execute("SELECT COUNT(*) FROM cache_items").fetchone()
        return int(count)

    def close(self) -> None:
        with self._lock:
            self._conn.close()
