"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Canonical cache-key construction.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from urllib.parse import quote

from .types import JsonPrimitive

CACHE_PREFIX = "eme6_cache_"

QueryParams = Mapping[str, JsonPrimitive]


def _format_param_value(value: JsonPrimitive) -> str:
    # Same rendering a browser client uses when it interpolates the value.
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer():
            return str(int(value))
    return str(value)


def _encode(part: str) -> str:
    return quote(part, safe="/:,")


def build_cache_key(
    path: str,
    params: QueryParams | None = None,
    *,
    prefix: str = CACHE_PREFIX,
) -> str:
    """
    Build the canonical storage key for a resource path and its query params.

    Parameters are sorted by name so insertion order never changes the key. A
    ``path`` that already carries ``prefix`` is returned unchanged.

    Raises:
        TypeError: If ``path`` is not a string.
        ValueError: If ``path`` is empty.
    """
    if not isinstance(path, str):
        raise TypeError(f"Cache key path must be a string, got {type(path).__name__}")
    if not path:
        raise ValueError("Cache key path must be non-empty")
    if path.startswith(prefix):
        return path

    if not params:
        return f"{prefix}{path}"

    query = "&".join(
        f"{_encode(str(name))}={_encode(_format_param_value(params[name]))}"
        for name in sorted(params)
    )
    return f"{prefix}{path}?{query}"

