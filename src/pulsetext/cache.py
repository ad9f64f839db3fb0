"""
Time-boxed in-memory caching.

Analysis results and upstream responses are derived data; callers that
recompute them often wrap the computation with ``cached`` instead of the
analyzer holding any state.
"""

from __future__ import annotations

import functools
import hashlib
import logging
import threading
import time
from collections import OrderedDict
from typing import Any, Callable, Hashable

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 15 * 60


class TTLCache:
    """Thread-safe mapping whose entries expire after a fixed time."""

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        max_entries: int = 1024,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize cache.

        Args:
            ttl_seconds: Lifetime of an entry.
            max_entries: Oldest entries are evicted beyond this size.
            clock: Monotonic time source, injectable for tests.
        """
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._data: OrderedDict[Hashable, tuple[float, Any]] = OrderedDict()
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def get(self, key: Hashable, default: Any = None) -> Any:
        """Return a live entry, evicting it if expired."""
        with self._lock:
            item = self._data.get(key)
            if item is None:
                self.misses += 1
                return default

            stored_at, value = item
            if self._clock() - stored_at >= self.ttl_seconds:
                del self._data[key]
                self.misses += 1
                return default

            self.hits += 1
            return value

    def set(self, key: Hashable, value: Any) -> None:
        """Store an entry, evicting the oldest when full."""
        with self._lock:
            self._data.pop(key, None)
            self._data[key] = (self._clock(), value)
            while len(self._data) > self.max_entries:
                evicted, _ = self._data.popitem(last=False)
                logger.debug(f"Evicted cache entry {evicted!r}")

    def __contains__(self, key: Hashable) -> bool:
        sentinel = object()
        return self.get(key, sentinel) is not sentinel

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)

    def clear(self) -> None:
        with self._lock:
            self._data.clear()
        logger.info("Cache cleared")

    def get_stats(self) -> dict[str, Any]:
        return {
            "entries": len(self),
            "ttl_seconds": self.ttl_seconds,
            "max_entries": self.max_entries,
            "hits": self.hits,
            "misses": self.misses,
        }


def text_cache_key(text: str | None, lookback_days: int | None = None) -> str:
    """Stable cache key for a text and lookback window."""
    digest = hashlib.sha256((text or "").encode("utf-8")).hexdigest()
    return f"{digest}:{lookback_days}"


def cached(
    cache: TTLCache,
    key: Callable[..., Hashable] | None = None,
) -> Callable:
    """Decorator that memoizes a function in a TTLCache.

    Args:
        cache: Cache instance to store results in.
        key: Builds the cache key from the call arguments. Defaults to the
            positional and keyword arguments themselves.

    Returns:
        Decorated function.
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            cache_key = key(*args, **kwargs) if key else (args, tuple(sorted(kwargs.items())))
            sentinel = object()
            value = cache.get(cache_key, sentinel)
            if value is not sentinel:
                logger.debug(f"Cache hit: {func.__name__}")
                return value

            value = func(*args, **kwargs)
            cache.set(cache_key, value)
            return value

        wrapper.cache = cache
        return wrapper

    return decorator
