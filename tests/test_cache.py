"""Tests for the TTL cache."""

import pytest

from pulsetext.cache import TTLCache, cached, text_cache_key


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


class TestTTLCache:
    """Tests for TTLCache."""

    def test_set_and_get(self, clock):
        cache = TTLCache(ttl_seconds=10, clock=clock)
        cache.set("a", 1)

        assert cache.get("a") == 1
        assert "a" in cache
        assert len(cache) == 1

    def test_missing_key_returns_default(self, clock):
        cache = TTLCache(ttl_seconds=10, clock=clock)

        assert cache.get("missing") is None
        assert cache.get("missing", "fallback") == "fallback"

    def test_entry_expires(self, clock):
        cache = TTLCache(ttl_seconds=10, clock=clock)
        cache.set("a", 1)

        clock.now = 9.9
        assert cache.get("a") == 1

        clock.now = 10.0
        assert cache.get("a") is None
        assert len(cache) == 0

    def test_oldest_evicted_when_full(self, clock):
        cache = TTLCache(ttl_seconds=10, max_entries=2, clock=clock)
        cache.set("a", 1)
        cache.set("b", 2)
        cache.set("c", 3)

        assert "a" not in cache
        assert cache.get("b") == 2
        assert cache.get("c") == 3

    def test_set_refreshes_entry(self, clock):
        cache = TTLCache(ttl_seconds=10, clock=clock)
        cache.set("a", 1)
        clock.now = 8
        cache.set("a", 2)
        clock.now = 15

        assert cache.get("a") == 2

    def test_clear(self, clock):
        cache = TTLCache(ttl_seconds=10, clock=clock)
        cache.set("a", 1)
        cache.clear()

        assert len(cache) == 0

    def test_stats(self, clock):
        cache = TTLCache(ttl_seconds=10, clock=clock)
        cache.set("a", 1)
        cache.get("a")
        cache.get("b")

        stats = cache.get_stats()
        assert stats["hits"] == 1
        assert stats["misses"] == 1
        assert stats["entries"] == 1


class TestCachedDecorator:
    """Tests for the cached decorator."""

    def test_memoizes(self, clock):
        calls = []

        @cached(TTLCache(ttl_seconds=10, clock=clock))
        def double(x):
            calls.append(x)
            return x * 2

        assert double(2) == 4
        assert double(2) == 4
        assert double(3) == 6
        assert calls == [2, 3]

    def test_recomputes_after_expiry(self, clock):
        calls = []

        @cached(TTLCache(ttl_seconds=10, clock=clock))
        def double(x):
            calls.append(x)
            return x * 2

        double(2)
        clock.now = 11
        double(2)

        assert calls == [2, 2]

    def test_custom_key(self, clock):
        calls = []

        @cached(TTLCache(ttl_seconds=10, clock=clock), key=lambda text: text_cache_key(text))
        def length(text):
            calls.append(text)
            return len(text)

        length("abc")
        length("abc")

        assert calls == ["abc"]
        assert len(length.cache) == 1

    def test_none_result_is_cached(self, clock):
        calls = []

        @cached(TTLCache(ttl_seconds=10, clock=clock))
        def nothing():
            calls.append(1)
            return None

        nothing()
        nothing()

        assert calls == [1]


class TestTextCacheKey:
    """Tests for text cache keys."""

    def test_stable(self):
        assert text_cache_key("hello", 7) == text_cache_key("hello", 7)

    def test_lookback_changes_key(self):
        assert text_cache_key("hello", 7) != text_cache_key("hello", 30)

    def test_none_is_empty_text(self):
        assert text_cache_key(None) == text_cache_key("")
