"""Tests for assetwatch.cache — in-memory cache store."""

from assetwatch.cache import MemoryCacheStore
from assetwatch.model.resource import CacheKey


class TestMemoryCacheStore:
    """MemoryCacheStore — tombstone-based invalidation."""

    def test_put_and_get(self) -> None:
        store = MemoryCacheStore()
        store.put(CacheKey("core"), "bundle")
        assert store.get(CacheKey("core")) == "bundle"
        assert not store.is_stale(CacheKey("core"))

    def test_invalidate_stores_tombstone(self) -> None:
        store = MemoryCacheStore()
        store.put(CacheKey("core"), "bundle")
        store.invalidate(CacheKey("core"))

        assert CacheKey("core") in store
        assert store.get(CacheKey("core")) is None
        assert store.is_stale(CacheKey("core"))

    def test_missing_is_not_stale(self) -> None:
        store = MemoryCacheStore()
        assert store.get(CacheKey("core")) is None
        assert not store.is_stale(CacheKey("core"))

    def test_rebuild_clears_staleness(self) -> None:
        store = MemoryCacheStore()
        store.invalidate(CacheKey("core"))
        store.put(CacheKey("core"), "bundle-v2")
        assert not store.is_stale(CacheKey("core"))

    def test_keys_len_and_clear(self) -> None:
        store = MemoryCacheStore()
        store.put(CacheKey("a"), 1)
        store.invalidate(CacheKey("b"))
        assert set(store.keys()) == {CacheKey("a"), CacheKey("b")}
        assert len(store) == 2
        assert store.clear() == 2
        assert len(store) == 0
