"""Tests for the thread-safe LRU cache used for parsed skins."""

import threading

from macroskin.utils.lru_cache import LRUCache


class TestLRUCache:
    """Eviction, statistics and concurrency."""

    def test_get_and_set(self):
        cache = LRUCache(maxsize=2)
        cache.set("a", 1)
        assert cache.get("a") == 1
        assert cache.get("b") is None
        assert "a" in cache
        assert len(cache) == 1

    def test_evicts_least_recently_used(self):
        cache = LRUCache(maxsize=2)
        cache.set("a", 1)
        cache.set("b", 2)
        cache.get("a")
        cache.set("c", 3)
        assert "a" in cache
        assert "b" not in cache
        assert "c" in cache

    def test_zero_size_disables_caching(self):
        cache = LRUCache(maxsize=0)
        cache.set("a", 1)
        assert cache.get("a") is None
        assert len(cache) == 0

    def test_unbounded(self):
        cache = LRUCache(maxsize=None)
        for i in range(1000):
            cache.set(i, i)
        assert len(cache) == 1000

    def test_get_or_set(self):
        cache = LRUCache()
        calls = []

        def factory():
            calls.append(1)
            return "value"

        assert cache.get_or_set("k", factory) == "value"
        assert cache.get_or_set("k", factory) == "value"
        assert len(calls) == 1

    def test_info_and_clear(self):
        cache = LRUCache(maxsize=10)
        cache.set("a", 1)
        cache.get("a")
        cache.get("missing")
        assert cache.info() == {"hits": 1, "misses": 1, "size": 1, "maxsize": 10}
        cache.clear()
        assert cache.info() == {"hits": 0, "misses": 0, "size": 0, "maxsize": 10}

    def test_concurrent_access(self):
        """Many threads writing never exceed maxsize."""
        cache = LRUCache(maxsize=50)

        def worker(offset):
            for i in range(200):
                cache.set(offset * 1000 + i, i)
                cache.get(offset * 1000 + i // 2)

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert len(cache) == 50
