"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Stored envelope format and payload codecs.
"""

from __future__ import annotations

from typing import Any, Generic, Protocol, TypeVar

from pydantic import BaseModel, ConfigDict, StrictInt, ValidationError

from .types import CacheEntry, JsonValue
from .utils import json_dumps

T = TypeVar("T")


class CorruptEntryError(ValueError):
    """Raised when a stored value is not a readable cache envelope."""


class PayloadCodec(Protocol[T]):
    """Converts payloads to and from the JSON value kept under ``data``."""

    def encode(self, payload: T) -> JsonValue: ...

    def decode(self, data: JsonValue) -> T: ...


class JsonPayloadCodec(Generic[T]):
    """Identity codec for payloads that already are JSON-compatible values."""

    def encode(self, payload: T) -> JsonValue:
        return payload  # type: ignore[return-value]

    def decode(self, data: JsonValue) -> T:
        return data  # type: ignore[return-value]


class StoredEnvelope(BaseModel):
    """Wire shape of one stored value: ``{"data", "timestamp", "ttl"}``."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    data: Any
    timestamp: StrictInt
    ttl: StrictInt


def encode_entry(payload: T, *, stored_at: int, ttl_ms: int, codec: PayloadCodec[T]) -> str:
    """
    Serialize a payload into the stored envelope string.

    Raises:
        TypeError / ValueError: If the encoded payload is not JSON-serializable.
    """
    return json_dumps(
        {"data": codec.encode(payload), "timestamp": stored_at, "ttl": ttl_ms}
    )


def decode_entry(key: str, raw: str, *, codec: PayloadCodec[T]) -> CacheEntry[T]:
    """
    Parse a stored envelope string back into a ``CacheEntry``.

    Raises:
        CorruptEntryError: If ``raw`` is not valid JSON, does not match the
            envelope shape, or the codec rejects the payload.
    """
    try:
        envelope = StoredEnvelope.model_validate_json(raw)
    except ValidationError as exc:
        raise CorruptEntryError(f"Unreadable cache entry under '{key}'") from exc
    try:
        payload = codec.decode(envelope.data)
    except Exception as exc:  # noqa: BLE001
        raise CorruptEntryError(f"Payload codec rejected entry under '{key}'") from exc
    return CacheEntry(
        key=key,
        payload=payload,
        stored_at=envelope.timestamp,
        ttl_ms=envelope.ttl,
    )
