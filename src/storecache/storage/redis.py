"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Module: storage/redis.py.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import RedisError, ResponseError, TimeoutError as RedisTimeoutError

from .base import KeyValueStorage, StorageQuotaExceededError, StorageUnavailableError


_GLOB_SPECIAL = "\\*?[]"


def _escape_glob(text: str) -> str:
    """Escape Redis glob metacharacters so ``text`` matches literally."""
    return "".join(f"\\{ch}" if ch in _GLOB_SPECIAL else ch for ch in text)


class RedisStorage(KeyValueStorage):
    """
    Redis-backed storage for caches shared across processes.

    Every item lives under ``{namespace}{key}``. Enumeration scans only that
    namespace, so other users of the same database are never visible.

    Requires ``redis`` (``pip install redis``).

    Args:
        redis: A synchronous ``redis.Redis`` client instance.
        namespace: Key prefix for namespacing.
    """

    backend_id = "redis"

    def __init__(self, redis: Any, *, namespace: str = "storecache:") -> None:
        self._redis = redis
        self._namespace = namespace

    def _full_key(self, key: str) -> str:
        return f"{self._namespace}{key}"

    @staticmethod
    def _decode(raw: str | bytes) -> str:
        if isinstance(raw, bytes):
            return raw.decode("utf-8")
        return raw

    @contextmanager
    def _translate_errors(self) -> Iterator[None]:
        try:
            yield
        except ResponseError as exc:
            if str(exc).startswith("OOM"):
                raise StorageQuotaExceededError(str(exc)) from exc
            raise StorageUnavailableError(str(exc)) from exc
        except (RedisConnectionError, RedisTimeoutError) as exc:
            raise StorageUnavailableError(f"Redis unreachable: {exc}") from exc
        except RedisError as exc:
            raise StorageUnavailableError(str(exc)) from exc

    def get_item(self, key: str) -> str | None:
        with self._translate_errors():
            raw = self._redis.get(self._full_key(key))
        return None if raw is None else self._decode(raw)

    def set_item(self, key: str, value: str) -> None:
        with self._translate_errors():
            self._redis.set(self._full_key(key), value)

    def remove_item(self, key: str) -> None:
        with self._translate_errors():
            self._redis.delete(self._full_key(key))

    def keys(self) -> list[str]:
        cut = len(self._namespace)
        with self._translate_errors():
            found = [
                self._decode(raw)[cut:]
                for raw in self._redis.scan_iter(match=f"{_escape_glob(self._namespace)}*")
            ]
        return found

    def __len__(self) -> int:
        return len(self.keys())
