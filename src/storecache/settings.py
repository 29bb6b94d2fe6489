"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Cache settings and explicit config loading.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from .keys import CACHE_PREFIX
from .store import DEFAULT_TTL_MS
from .sweeper import DEFAULT_SWEEP_INTERVAL_S


def _env_first(*names: str, default: str | None = None) -> str | None:
    """
    Return the first non-empty environment variable in `names`.

    Args:
        *names: Environment variable names to check in order.
        default: Value returned if no non-empty variable is found.
    """
    for name in names:
        raw = os.getenv(name)
        if raw is None:
            continue
        value = raw.strip()
        if value:
            return value
    return default


@dataclass(frozen=True, slots=True)
class CacheSettings:
    """Explicit settings used to build storage backends and the cache store."""

    prefix: str = CACHE_PREFIX
    default_ttl_ms: int = DEFAULT_TTL_MS
    sweep_interval_s: float = DEFAULT_SWEEP_INTERVAL_S

    backend: str = "inmemory"
    inmemory_quota_chars: int | None = None
    sqlite_path: str = "storecache.sqlite3"
    redis_url: str | None = None
    redis_namespace: str = "storecache:"

    @staticmethod
    def from_env() -> "CacheSettings":
        """Load settings from `STORECACHE_*` environment variables."""
        quota = _env_first("STORECACHE_INMEMORY_QUOTA_CHARS")
        return CacheSettings(
            prefix=_env_first("STORECACHE_PREFIX", default=CACHE_PREFIX) or CACHE_PREFIX,
            default_ttl_ms=int(
                _env_first("STORECACHE_DEFAULT_TTL_MS", default=str(DEFAULT_TTL_MS))
                or DEFAULT_TTL_MS
            ),
            sweep_interval_s=float(
                _env_first(
                    "STORECACHE_SWEEP_INTERVAL_S", default=str(DEFAULT_SWEEP_INTERVAL_S)
                )
                or DEFAULT_SWEEP_INTERVAL_S
            ),
            backend=(_env_first("STORECACHE_BACKEND", default="inmemory") or "inmemory").lower(),
            inmemory_quota_chars=int(quota) if quota else None,
            sqlite_path=_env_first("STORECACHE_SQLITE_PATH", default="storecache.sqlite3")
            or "storecache.sqlite3",
            redis_url=_redis_url_from_env(),
            redis_namespace=_env_first("STORECACHE_REDIS_NAMESPACE", default="storecache:")
            or "storecache:",
        )


def _redis_url_from_env() -> str | None:
    url = _env_first("STORECACHE_REDIS_URL")
    if url:
        return url
    host = _env_first("STORECACHE_REDIS_HOST")
    if not host:
        return None
    port = _env_first("STORECACHE_REDIS_PORT", default="6379") or "6379"
    db = _env_first("STORECACHE_REDIS_DB", default="0") or "0"
    password = _env_first("STORECACHE_REDIS_PASSWORD", default="") or ""
    if password:
        return f"redis://:{password}@{host}:{port}/{db}"
    return f"redis://{host}:{port}/{db}"
