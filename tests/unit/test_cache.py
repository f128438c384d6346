"""Tests for the in-memory response cache.

- Round trip and miss behavior
- Lazy TTL expiry on a fake clock
- Insertion-order eviction at capacity
- Statistics
"""

import threading

import pytest

from utils.cache import ResponseCache, load_cache_from_config, make_key


class TestResponseCache:
    """Tests for ResponseCache."""

    def test_put_then_get(self, response_cache):
        payload = {"url": "https://example.com/v.mp4", "title": "A video"}
        response_cache.put("k", payload)

        assert response_cache.get("k") == payload
        assert response_cache.hits == 1
        assert response_cache.misses == 0

    def test_miss(self, response_cache):
        assert response_cache.get("nonexistent") is None
        assert response_cache.misses == 1

    def test_entry_expires_after_ttl(self, fake_clock):
        cache = ResponseCache(capacity=5, ttl_ms=300_000, clock=fake_clock)
        cache.put("k", {"v": 1})

        fake_clock.advance_ms(300_000)
        assert cache.get("k") == {"v": 1}  # exactly at TTL is still fresh

        fake_clock.advance_ms(1)
        assert cache.get("k") is None
        assert len(cache) == 0

    def test_expired_entry_is_overwritten(self, fake_clock):
        cache = ResponseCache(capacity=5, ttl_ms=1000, clock=fake_clock)
        cache.put("k", "old")
        fake_clock.advance_ms(1500)

        assert cache.get("k") is None
        cache.put("k", "new")
        assert cache.get("k") == "new"

    def test_capacity_evicts_oldest_inserted(self, fake_clock):
        capacity = 3
        cache = ResponseCache(capacity=capacity, ttl_ms=300_000, clock=fake_clock)
        for i in range(capacity + 1):
            cache.put(f"k{i}", i)

        assert len(cache) == capacity
        assert cache.get("k0") is None
        for i in range(1, capacity + 1):
            assert cache.get(f"k{i}") == i
        assert cache.evictions == 1

    def test_eviction_ignores_access_order(self, fake_clock):
        cache = ResponseCache(capacity=2, ttl_ms=300_000, clock=fake_clock)
        cache.put("a", 1)
        cache.put("b", 2)
        cache.get("a")  # reading does not refresh position
        cache.put("c", 3)

        assert "a" not in cache
        assert "b" in cache
        assert "c" in cache

    def test_overwrite_does_not_evict(self, fake_clock):
        cache = ResponseCache(capacity=2, ttl_ms=300_000, clock=fake_clock)
        cache.put("a", 1)
        cache.put("b", 2)
        cache.put("a", 10)

        assert len(cache) == 2
        assert cache.get("a") == 10
        assert cache.evictions == 0

    def test_disabled_cache_stores_nothing(self, fake_clock):
        cache = ResponseCache(clock=fake_clock, enabled=False)
        cache.put("k", "v")

        assert cache.get("k") is None
        assert cache.get_stats()["enabled"] is False

    def test_clear(self, response_cache):
        response_cache.put("a", 1)
        response_cache.put("b", 2)

        assert response_cache.clear() == 2
        assert len(response_cache) == 0
        assert response_cache.get("a") is None

    def test_stats(self, response_cache):
        response_cache.put("a", 1)
        response_cache.get("a")
        response_cache.get("b")

        stats = response_cache.get_stats()
        assert stats["hits"] == 1
        assert stats["misses"] == 1
        assert stats["hit_rate"] == 0.5
        assert stats["entry_count"] == 1
        assert stats["capacity"] == 50
        assert stats["ttl_ms"] == 300_000

    def test_hit_rate_without_requests(self, response_cache):
        assert response_cache.hit_rate == 0.0

    @pytest.mark.parametrize("capacity,ttl_ms", [(0, 1000), (5, 0)])
    def test_rejects_bad_configuration(self, capacity, ttl_ms):
        with pytest.raises(ValueError):
            ResponseCache(capacity=capacity, ttl_ms=ttl_ms)

    def test_concurrent_puts_respect_capacity(self):
        cache = ResponseCache(capacity=10, ttl_ms=300_000)

        def writer(offset: int) -> None:
            for i in range(200):
                cache.put(f"{offset}-{i}", i)

        threads = [threading.Thread(target=writer, args=(n,)) for n in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(cache) == 10
        assert cache.evictions == 8 * 200 - 10


class TestHelpers:
    def test_make_key(self):
        url = "https://www.youtube.com/watch?v=dQw4w9WgXcQ"
        assert make_key(url, "audio-only", None) == f"{url}-audio-only-default"
        assert make_key(url, "video+audio", "720p") == f"{url}-video+audio-720p"

    def test_load_cache_from_config(self, sample_config, fake_clock):
        sample_config["cache_capacity"] = 7
        sample_config["cache_ttl_ms"] = 1234
        cache = load_cache_from_config(sample_config, clock=fake_clock)

        assert cache.capacity == 7
        assert cache.ttl_ms == 1234
        assert cache.enabled is True
