from __future__ import annotations

import json
import logging

import pytest

from storecache import (
    CACHE_PREFIX,
    CacheEntry,
    CacheStats,
    CacheStore,
    InMemoryStorage,
    StorageQuotaExceededError,
    StorageUnavailableError,
    build_cache_key,
)


class FakeClock:
    def __init__(self, start_ms: int = 1_700_000_000_000) -> None:
        self.now = start_ms

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


class AlwaysFullStorage(InMemoryStorage):
    def __init__(self) -> None:
        super().__init__()
        self.write_attempts = 0

    def set_item(self, key: str, value: str) -> None:
        self.write_attempts += 1
        raise StorageQuotaExceededError("quota exceeded")


class UnavailableStorage:
    backend_id = "disabled"

    def get_item(self, key: str) -> str | None:
        raise StorageUnavailableError("storage disabled")

    def set_item(self, key: str, value: str) -> None:
        raise StorageUnavailableError("storage disabled")

    def remove_item(self, key: str) -> None:
        raise StorageUnavailableError("storage disabled")

    def keys(self) -> list[str]:
        raise StorageUnavailableError("storage disabled")

    def __len__(self) -> int:
        return 0


def make_store(**kwargs) -> tuple[CacheStore, InMemoryStorage, FakeClock]:
    storage = kwargs.pop("storage", None)
    if storage is None:
        storage = InMemoryStorage()
    clock = FakeClock()
    return CacheStore(storage, clock=clock, **kwargs), storage, clock


def test_set_then_get_returns_payload_until_ttl_lapses():
    store, _, clock = make_store()
    categories = [{"id": 1, "name": "Seals"}]

    store.set("/api/categories", categories, 300_000)
    assert store.get("/api/categories") == categories

    clock.advance(300_000)
    assert store.get("/api/categories") == categories

    clock.advance(1_000)
    assert store.get("/api/categories") is None


def test_expired_read_evicts_entry_and_stats_stop_counting_it():
    store, storage, clock = make_store()
    store.set("/api/categories", [{"id": 1, "name": "Seals"}], 300_000)

    clock.advance(301_000)
    assert store.get("/api/categories") is None
    assert storage.get_item(CACHE_PREFIX + "/api/categories") is None

    stats = store.stats()
    assert stats.total_entries == 0
    assert stats.expired_entries == 0


def test_default_ttl_is_five_minutes():
    store, _, clock = make_store()
    store.set("/api/products", {"items": []})

    entry = store.get_entry("/api/products")
    assert entry is not None
    assert entry.ttl_ms == 5 * 60 * 1000
    assert entry.stored_at == clock.now
    assert entry.expires_at == clock.now + entry.ttl_ms


def test_stored_value_uses_data_timestamp_ttl_envelope():
    store, storage, clock = make_store()
    store.set("/api/products", [1, 2], 1000, params={"page": 2, "limit": 10})

    key = CACHE_PREFIX + "/api/products?limit=10&page=2"
    raw = storage.get_item(key)
    assert raw is not None
    assert json.loads(raw) == {"data": [1, 2], "timestamp": clock.now, "ttl": 1000}


def test_envelope_written_by_another_client_is_readable():
    store, storage, clock = make_store()
    storage.set_item(
        CACHE_PREFIX + "/api/categories",
        json.dumps({"data": ["a"], "timestamp": clock.now - 10, "ttl": 60_000}),
    )
    assert store.get("/api/categories") == ["a"]


def test_get_with_params_matches_regardless_of_insertion_order():
    store, _, _ = make_store()
    store.set("/api/products", ["p"], params={"page": 1, "search": "pump"})
    assert store.get("/api/products", {"search": "pump", "page": 1}) == ["p"]
    assert store.get("/api/products", {"search": "pump", "page": 2}) is None


def test_prefixed_key_is_used_as_is():
    store, _, _ = make_store()
    full_key = build_cache_key("/api/products", {"page": 3})
    store.set(full_key, ["x"])
    assert store.get("/api/products", {"page": 3}) == ["x"]
    assert store.key_for(full_key) == full_key


def test_get_entry_distinguishes_cached_empty_payload_from_miss():
    store, _, _ = make_store()
    store.set("/api/featured", [])
    entry = store.get_entry("/api/featured")
    assert isinstance(entry, CacheEntry)
    assert entry.payload == []
    assert store.get_entry("/api/missing") is None


def test_corrupt_entry_is_removed_and_treated_as_miss(caplog):
    store, storage, _ = make_store()
    key = CACHE_PREFIX + "/api/categories"
    storage.set_item(key, "not json {")

    with caplog.at_level(logging.WARNING, logger="storecache.store"):
        assert store.get("/api/categories") is None

    assert key not in storage.keys()
    assert "corrupt" in caplog.text


@pytest.mark.parametrize(
    "raw",
    [
        json.dumps({"data": [1]}),
        json.dumps({"data": [1], "timestamp": "yesterday", "ttl": 10}),
        json.dumps({"data": [1], "timestamp": 1.5, "ttl": 10}),
        json.dumps(["data", 1, 2]),
    ],
)
def test_foreign_json_shapes_are_treated_as_corrupt(raw):
    store, storage, _ = make_store()
    key = CACHE_PREFIX + "/api/x"
    storage.set_item(key, raw)
    assert store.get("/api/x") is None
    assert storage.get_item(key) is None


class ProductCodec:
    def encode(self, payload: dict) -> dict:
        return {"id": payload["id"]}

    def decode(self, data) -> dict:
        return {"id": data.get("id")}


def test_codec_failure_is_isolated_to_one_entry():
    storage = InMemoryStorage()
    clock = FakeClock()
    store = CacheStore(storage, codec=ProductCodec(), clock=clock)
    storage.set_item(
        CACHE_PREFIX + "/api/a",
        json.dumps({"data": [1], "timestamp": clock.now, "ttl": 60_000}),
    )
    store.set("/api/b", {"id": 2}, 1_000)
    store.set("/api/c", {"id": 3}, 60_000)
    clock.advance(2_000)

    assert store.sweep_expired() == 2
    assert storage.keys() == [CACHE_PREFIX + "/api/c"]
    assert store.get("/api/c") == {"id": 3}


def test_codec_failure_on_read_removes_entry():
    storage = InMemoryStorage()
    clock = FakeClock()
    store = CacheStore(storage, codec=ProductCodec(), clock=clock)
    key = CACHE_PREFIX + "/api/a"
    storage.set_item(key, json.dumps({"data": [1], "timestamp": clock.now, "ttl": 60_000}))

    assert store.get("/api/a") is None
    assert storage.get_item(key) is None


def test_remove_deletes_single_key_and_ignores_missing():
    store, _, _ = make_store()
    store.set("/api/categories", ["c"])
    store.set("/api/products", ["p"])

    store.remove("/api/categories")
    store.remove("/api/never-cached")

    assert store.get("/api/categories") is None
    assert store.get("/api/products") == ["p"]


def test_clear_all_leaves_unrelated_storage_keys():
    store, storage, _ = make_store()
    storage.set_item("auth_token", "abc")
    store.set("/api/categories", ["c"])
    store.set("/api/products", ["p"], params={"page": 1})

    assert store.clear_all() == 2
    assert storage.keys() == ["auth_token"]
    assert len(storage) == 1


def test_clear_by_pattern_purges_every_product_variant_only():
    store, _, _ = make_store()
    store.set("/api/products?page=1", "x")
    store.set("/api/products?page=2", "y")
    store.set("/api/categories", "z")

    assert store.clear_by_pattern("/api/products") == 2

    assert store.get("/api/products?page=1") is None
    assert store.get("/api/products?page=2") is None
    assert store.get("/api/categories") == "z"


def test_clear_by_pattern_ignores_keys_outside_namespace():
    store, storage, _ = make_store()
    storage.set_item("other_/api/products", "keep")
    store.set("/api/products", ["p"])

    assert store.clear_by_pattern("/api/products") == 1
    assert storage.get_item("other_/api/products") == "keep"


def test_stats_counts_active_expired_and_corrupt_entries():
    store, storage, clock = make_store()
    store.set("/api/categories", ["c"], 1_000)
    store.set("/api/products", ["p"], 10_000)
    storage.set_item(CACHE_PREFIX + "/api/broken", "{{")
    storage.set_item("unrelated", "ignored")

    clock.advance(5_000)
    stats = store.stats()

    assert stats.total_entries == 3
    assert stats.expired_entries == 2
    assert stats.active_entries == 1
    assert stats.active_entries + stats.expired_entries == stats.total_entries
    assert stats.total_bytes > 0

    store.sweep_expired()
    after = store.stats()
    assert after.expired_entries == 0
    assert after.total_entries == after.active_entries == 1


def test_stats_total_bytes_counts_utf16_code_units():
    store, storage, _ = make_store()
    store.set("/api/categories", ["Dichtung \U0001f527"])
    raw = storage.get_item(CACHE_PREFIX + "/api/categories")
    assert raw is not None

    stats = store.stats()
    # The emoji is a surrogate pair: two code units for one code point.
    assert stats.total_bytes == len(raw) + 1
    assert stats.total_kb == round(stats.total_bytes / 1024, 2)


def test_sweep_removes_only_dead_entries_and_is_idempotent():
    store, storage, clock = make_store()
    store.set("/api/a", 1, 1_000)
    store.set("/api/b", 2, 60_000)
    storage.set_item(CACHE_PREFIX + "/api/c", "garbage")

    clock.advance(2_000)
    assert store.sweep_expired() == 2
    assert store.sweep_expired() == 0
    assert store.get("/api/b") == 2


def test_quota_exceeded_sweeps_expired_entries_and_retries_once():
    storage = InMemoryStorage(quota_chars=200)
    store, _, clock = make_store(storage=storage)
    store.set("/api/old", "x" * 60, 1_000)
    clock.advance(5_000)

    store.set("/api/categories", "y" * 80, 60_000)

    assert store.get("/api/categories") == "y" * 80
    assert storage.get_item(CACHE_PREFIX + "/api/old") is None


def test_write_that_always_fails_is_swallowed():
    storage = AlwaysFullStorage()
    store, _, _ = make_store(storage=storage)

    store.set("/api/categories", ["c"])

    assert storage.write_attempts == 2
    assert store.get("/api/categories") is None


def test_dropped_write_does_not_leave_previous_value_readable():
    storage = InMemoryStorage(quota_chars=150)
    store, _, _ = make_store(storage=storage)
    store.set("/api/categories", ["old"], 60_000)
    assert store.get("/api/categories") == ["old"]

    store.set("/api/categories", ["n" * 200], 60_000)

    assert store.get("/api/categories") is None


def test_unserializable_payload_is_dropped_without_raising(caplog):
    store, storage, _ = make_store()
    with caplog.at_level(logging.ERROR, logger="storecache.store"):
        store.set("/api/products", {"when": object()})
    assert len(storage) == 0
    assert "Cache set failed" in caplog.text


def test_unavailable_storage_degrades_to_no_op_cache():
    store = CacheStore(UnavailableStorage())

    store.set("/api/categories", ["c"])
    assert store.get("/api/categories") is None
    store.remove("/api/categories")
    assert store.clear_all() == 0
    assert store.clear_by_pattern("/api/products") == 0
    assert store.sweep_expired() == 0
    assert store.stats() == CacheStats()


def test_invalid_keys_fail_open():
    store, storage, _ = make_store()
    store.set("", ["c"])
    store.set(123, ["c"])  # type: ignore[arg-type]
    assert len(storage) == 0
    assert store.get(123) is None  # type: ignore[arg-type]


def test_negative_ttl_is_rejected_without_raising():
    store, storage, _ = make_store()
    store.set("/api/categories", ["c"], -5)
    assert len(storage) == 0


def test_constructor_validates_configuration():
    with pytest.raises(ValueError, match="prefix"):
        CacheStore(InMemoryStorage(), prefix="")
    with pytest.raises(ValueError, match="default_ttl_ms"):
        CacheStore(InMemoryStorage(), default_ttl_ms=-1)


def test_custom_prefix_isolates_two_stores_on_one_medium():
    storage = InMemoryStorage()
    clock = FakeClock()
    public = CacheStore(storage, prefix="shop_", clock=clock)
    admin = CacheStore(storage, prefix="admin_", clock=clock)

    public.set("/api/products", ["public"])
    admin.set("/api/products", ["admin"])
    public.clear_all()

    assert public.get("/api/products") is None
    assert admin.get("/api/products") == ["admin"]
