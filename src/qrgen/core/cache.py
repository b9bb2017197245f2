"""Generic LRU cache with per-entry TTL and statistics.

Type-safe in-memory store with automatic eviction and TTL expiration.
Not synchronized: owners that share an instance across threads serialize
access themselves.
"""

import time
from typing import Callable, Generic, TypeVar, Any
from collections import OrderedDict
from dataclasses import dataclass

T = TypeVar("T")


@dataclass
class Stats:
    """Cache statistics."""

    size: int = 0
    max_size: int = 0
    hits: int = 0
    misses: int = 0
    evictions: int = 0
    expirations: int = 0

    @property
    def hit_rate(self) -> float:
        """Calculate hit rate (0.0 to 1.0)."""
        total = self.hits + self.misses
        return self.hits / total if total > 0 else 0.0

    def to_dict(self) -> dict[str, Any]:
        """Export as dictionary."""
        return {
            "size": self.size,
            "max_size": self.max_size,
            "hits": self.hits,
            "misses": self.misses,
            "evictions": self.evictions,
            "expirations": self.expirations,
            "hit_rate": self.hit_rate,
        }


class LRUCache(Generic[T]):
    """
    LRU cache with per-entry TTL support and statistics tracking.

    Features:
    - Type-safe generic implementation
    - Default TTL with per-entry override
    - Least-recently-used eviction on size limit
    - Hit/miss/eviction/expiration statistics
    - Fast O(1) operations

    Examples:
        >>> cache = LRUCache[str](max_size=100, ttl_seconds=3600)
        >>> cache.set("key", "value", ttl_seconds=60)
        >>> cache.get("key")
        'value'
        >>> cache.stats.hit_rate
        1.0
    """

    def __init__(
        self,
        max_size: int = 100,
        ttl_seconds: float | None = None,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize LRU cache.

        Args:
            max_size: Maximum number of entries
            ttl_seconds: Default time-to-live in seconds (None = no expiration)
            clock: Time source used for expiration
        """
        if max_size <= 0:
            raise ValueError("max_size must be positive")

        self.max_size = max_size
        self.ttl_seconds = ttl_seconds
        self._clock = clock

        # key -> (value, expires_at or None)
        self._cache: OrderedDict[str, tuple[T, float | None]] = OrderedDict()
        self._stats = Stats(max_size=max_size)

    def _is_expired(self, expires_at: float | None) -> bool:
        """Check if an expiry deadline has passed."""
        if expires_at is None:
            return False
        return self._clock() >= expires_at

    def _expire(self, key: str) -> None:
        del self._cache[key]
        self._stats.expirations += 1
        self._stats.size = len(self._cache)

    def get(self, key: str) -> T | None:
        """
        Get cached value if available and not expired.

        Args:
            key: Cache key

        Returns:
            Cached value or None if not found/expired
        """
        if key in self._cache:
            value, expires_at = self._cache[key]

            if self._is_expired(expires_at):
                # Expired - remove it
                self._expire(key)
                self._stats.misses += 1
                return None

            # Valid hit - move to end (most recently used)
            self._cache.move_to_end(key)
            self._stats.hits += 1
            return value

        self._stats.misses += 1
        return None

    def set(self, key: str, value: T, ttl_seconds: float | None = None) -> float | None:
        """
        Cache value with an expiry deadline.

        Args:
            key: Cache key
            value: Value to cache
            ttl_seconds: Entry TTL, falls back to the cache default

        Returns:
            Absolute expiry timestamp, or None when the entry never expires
        """
        ttl = ttl_seconds if ttl_seconds is not None else self.ttl_seconds
        expires_at = self._clock() + ttl if ttl is not None else None

        # Update existing entry
        if key in self._cache:
            del self._cache[key]

        # Add new entry
        self._cache[key] = (value, expires_at)

        # Enforce size limit (least recently used goes first)
        while len(self._cache) > self.max_size:
            self._cache.popitem(last=False)
            self._stats.evictions += 1

        self._stats.size = len(self._cache)
        return expires_at

    def delete(self, key: str) -> bool:
        """
        Delete entry from cache.

        Args:
            key: Cache key

        Returns:
            True if deleted, False if not found
        """
        if key in self._cache:
            del self._cache[key]
            self._stats.size = len(self._cache)
            return True
        return False

    def clear(self) -> None:
        """Clear entire cache."""
        self._cache.clear()
        self._stats.size = 0

    def purge_expired(self) -> int:
        """Drop every expired entry, returning how many were removed."""
        expired = [key for key, (_, expires_at) in self._cache.items() if self._is_expired(expires_at)]
        for key in expired:
            self._expire(key)
        return len(expired)

    def items(self) -> list[tuple[str, T]]:
        """Snapshot of live entries (doesn't update LRU order)."""
        self.purge_expired()
        return [(key, value) for key, (value, _) in self._cache.items()]

    def keys(self) -> list[str]:
        """Snapshot of live keys."""
        return [key for key, _ in self.items()]

    @property
    def stats(self) -> Stats:
        """Get cache statistics."""
        return self._stats

    def __len__(self) -> int:
        """Return number of cached entries."""
        return len(self._cache)

    def __contains__(self, key: str) -> bool:
        """Check if a live key exists (doesn't update LRU order)."""
        entry = self._cache.get(key)
        return entry is not None and not self._is_expired(entry[1])


__all__ = ["LRUCache", "Stats"]
