"""In-memory response caching for the info and download handlers.

Keeps recently computed response payloads so repeated requests for the same
video do not hit the platform again.
- Keyed by canonical URL + requested kind + quality
- TTL-based invalidation, checked lazily on lookup
- Bounded size with insertion-order (oldest first) eviction
"""

import logging
import threading
import time
from collections import OrderedDict
from typing import Any, Callable, Optional

from models.video import CacheEntry

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 50
DEFAULT_TTL_MS = 300_000


class ResponseCache:
    """Bounded, time-expiring store for response payloads.

    Entries are evicted oldest-inserted first when the store is full, and an
    entry older than the TTL is treated as absent the next time it is read.
    Re-storing an existing key counts as a fresh insertion.

    Example usage:
        cache = ResponseCache(capacity=50, ttl_ms=300_000)

        key = make_key(ref.canonical_url, "mp3", None)
        cached = cache.get(key)
        if cached is not None:
            return cached

        payload = build_payload(...)
        cache.put(key, payload)
    """

    def __init__(
        self,
        capacity: int = DEFAULT_CAPACITY,
        ttl_ms: int = DEFAULT_TTL_MS,
        clock: Optional[Callable[[], float]] = None,
        enabled: bool = True,
    ):
        """Initialize response cache.

        Args:
            capacity: Maximum number of entries kept (default: 50)
            ttl_ms: Time-to-live for entries in milliseconds (default: 300000)
            clock: Callable returning the current time in seconds
                (default: time.monotonic). Tests pass a fake clock.
            enabled: Whether caching is enabled (default: True)
        """
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        if ttl_ms <= 0:
            raise ValueError("ttl_ms must be positive")

        self.capacity = capacity
        self.ttl_ms = ttl_ms
        self.enabled = enabled
        self._clock = clock or time.monotonic
        self._entries: "OrderedDict[str, CacheEntry]" = OrderedDict()
        self._lock = threading.Lock()

        # Statistics tracking
        self.hits = 0
        self.misses = 0
        self.evictions = 0

        if not enabled:
            logger.info("Response caching is DISABLED")

    def get(self, key: str) -> Optional[Any]:
        """Return the cached payload for ``key``, or None if absent or expired."""
        if not self.enabled:
            return None

        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self.misses += 1
                logger.debug(f"Cache MISS for {key}")
                return None

            if self._is_expired(entry):
                del self._entries[key]
                self.misses += 1
                logger.debug(f"Cache EXPIRED for {key}")
                return None

            self.hits += 1
            logger.debug(f"Cache HIT for {key} (hit rate: {self._hit_rate():.1%})")
            return entry.payload

    def put(self, key: str, payload: Any) -> None:
        """Store ``payload`` under ``key``, evicting the oldest entry if full."""
        if not self.enabled:
            return

        with self._lock:
            if key in self._entries:
                del self._entries[key]
            elif len(self._entries) >= self.capacity:
                oldest_key, _ = self._entries.popitem(last=False)
                self.evictions += 1
                logger.debug(f"Cache full, evicted {oldest_key}")

            self._entries[key] = CacheEntry(
                key=key, payload=payload, created_at=self._clock()
            )

    def clear(self) -> int:
        """Clear all cached entries.

        Returns:
            Number of entries that were cleared
        """
        with self._lock:
            entry_count = len(self._entries)
            self._entries.clear()
            self.hits = 0
            self.misses = 0
            self.evictions = 0
        logger.info(f"Cache cleared ({entry_count} entries removed)")
        return entry_count

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            entry = self._entries.get(key)
            return entry is not None and not self._is_expired(entry)

    def get_stats(self) -> dict:
        """Get cache statistics."""
        with self._lock:
            return {
                "enabled": self.enabled,
                "total_requests": self.hits + self.misses,
                "hits": self.hits,
                "misses": self.misses,
                "evictions": self.evictions,
                "hit_rate": self._hit_rate(),
                "entry_count": len(self._entries),
                "capacity": self.capacity,
                "ttl_ms": self.ttl_ms,
            }

    @property
    def hit_rate(self) -> float:
        """Hit rate as a float between 0.0 and 1.0."""
        with self._lock:
            return self._hit_rate()

    def _hit_rate(self) -> float:
        total = self.hits + self.misses
        return self.hits / total if total > 0 else 0.0

    def _is_expired(self, entry: CacheEntry) -> bool:
        age_ms = (self._clock() - entry.created_at) * 1000
        return age_ms > self.ttl_ms


def make_key(canonical_url: str, kind: str, quality: Optional[str] = None) -> str:
    """Build the composite cache key for a request."""
    return f"{canonical_url}-{kind}-{quality or 'default'}"


def load_cache_from_config(config: dict, clock: Optional[Callable[[], float]] = None) -> ResponseCache:
    """Load cache from configuration.

    Args:
        config: Configuration dictionary
        clock: Optional clock override

    Returns:
        ResponseCache instance (may be disabled based on config)
    """
    return ResponseCache(
        capacity=config.get("cache_capacity", DEFAULT_CAPACITY),
        ttl_ms=config.get("cache_ttl_ms", DEFAULT_TTL_MS),
        clock=clock,
        enabled=config.get("cache_enabled", True),
    )
