"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Utility functions for cache functionality.
"""

import json
import time
from typing import Any, cast

from storecache.types import JsonValue


def now_ms() -> int:
    return int(time.time() * 1000)


def json_dumps(obj: JsonValue | dict[str, Any] | list[Any] | Any) -> str:
    return json.dumps(obj, ensure_ascii=False, separators=(",", ":"))


def json_loads(s: str) -> JsonValue:
    return cast(JsonValue, json.loads(s))


def utf16_length(s: str) -> int:
    """Length of ``s`` in UTF-16 code units (what browser storage quotas count)."""
    return len(s.encode("utf-16-le")) // 2
