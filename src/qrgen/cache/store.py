"""QR response cache.

Bounded, thread-safe, in-memory store of encoded QR images keyed by request
fingerprint. Every operation fails open: internal faults are logged and
counted, and callers observe a miss or a no-op instead of an exception. Only the
constructor raises, on a non-positive ``max_keys``.

Eviction policy: least recently used once ``max_keys`` is exceeded, on top of
per-entry TTL expiry and the maintenance sweep (see ``sweep``).
"""

import threading
import time
from dataclasses import dataclass, field, replace
from typing import Any, Callable

from ..core.cache import LRUCache
from ..core.logging_config import get_logger
from .ttl import colors_customized, compute_ttl

logger = get_logger(__name__)

DEFAULT_MAX_KEYS = 1000
DEFAULT_MAX_AGE = 3600.0
DEFAULT_IDLE_TIMEOUT = 1800.0
DEFAULT_MIN_ACCESS = 2


@dataclass(frozen=True)
class RequestMetadata:
    """Request attributes that drive the TTL policy."""

    size: str | None = None
    error_correction_level: str | None = None
    dark_color: str | None = None
    light_color: str | None = None


@dataclass
class EntryMetadata:
    """Bookkeeping for one cached image."""

    created_at: float
    last_accessed_at: float
    access_count: int
    size_bytes: int
    request_size: str | None
    error_correction_level: str | None
    colors_customized: bool


@dataclass
class CacheEntry:
    """Cached image with metadata and a fixed expiry."""

    image: bytes
    metadata: EntryMetadata
    expires_at: float

    def snapshot(self) -> "CacheEntry":
        """Independent copy safe to hand outside the store."""
        return replace(self, metadata=replace(self.metadata))


@dataclass
class CacheStats:
    """Point-in-time cache statistics."""

    hits: int = 0
    misses: int = 0
    sets: int = 0
    deletes: int = 0
    errors: int = 0
    key_count: int = 0
    total_value_size_bytes: int = 0
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
            "hits": self.hits,
            "misses": self.misses,
            "sets": self.sets,
            "deletes": self.deletes,
            "errors": self.errors,
            "hit_rate": self.hit_rate,
            "key_count": self.key_count,
            "total_value_size_bytes": self.total_value_size_bytes,
            "evictions": self.evictions,
            "expirations": self.expirations,
        }


@dataclass
class _Counters:
    hits: int = 0
    misses: int = 0
    sets: int = 0
    deletes: int = 0
    errors: int = 0


class QRCacheStore:
    """
    In-memory cache of encoded QR codes.

    Examples:
        >>> store = QRCacheStore(max_keys=10)
        >>> store.set("qr:abc", b"png", RequestMetadata(size="300x300"))
        True
        >>> store.get("qr:abc").metadata.access_count
        1
    """

    def __init__(
        self,
        max_keys: int = DEFAULT_MAX_KEYS,
        max_age: float = DEFAULT_MAX_AGE,
        idle_timeout: float = DEFAULT_IDLE_TIMEOUT,
        min_access: int = DEFAULT_MIN_ACCESS,
        clock: Callable[[], float] = time.time,
        ttl_policy: Callable[..., int] = compute_ttl,
    ) -> None:
        """
        Initialize the store.

        Args:
            max_keys: Soft capacity; least recently used entries are evicted beyond it
            max_age: Sweep evicts entries older than this regardless of TTL
            idle_timeout: Sweep evicts entries idle longer than this...
            min_access: ...unless they were read at least this many times
            clock: Time source for all timestamps
            ttl_policy: Maps request metadata to a TTL in seconds

        Raises:
            ValueError: If max_keys is not positive
        """
        if max_keys <= 0:
            raise ValueError("max_keys must be positive")

        self.max_keys = max_keys
        self.max_age = max_age
        self.idle_timeout = idle_timeout
        self.min_access = min_access
        self._clock = clock
        self._ttl_policy = ttl_policy

        self._cache: LRUCache[CacheEntry] = LRUCache(max_size=max_keys, clock=clock)
        self._counters = _Counters()
        self._lock = threading.RLock()

    def get(self, key: str) -> CacheEntry | None:
        """
        Look up a cached QR code, recording the access on a hit.

        Returns:
            Snapshot of the entry, or None on a miss or internal fault
        """
        with self._lock:
            try:
                entry = self._cache.get(key)
                if entry is None:
                    self._counters.misses += 1
                    return None

                entry.metadata.last_accessed_at = self._clock()
                entry.metadata.access_count += 1
                self._counters.hits += 1
                return entry.snapshot()
            except Exception as e:
                self._counters.errors += 1
                logger.warning("cache_get_failed", key=key, error=str(e))
                return None

    def set(self, key: str, image: bytes, metadata: RequestMetadata | None = None) -> bool:
        """
        Cache an encoded image under its fingerprint.

        Returns:
            True if stored, False on internal fault
        """
        metadata = metadata or RequestMetadata()
        with self._lock:
            try:
                ttl = self._ttl_policy(
                    size=metadata.size,
                    error_correction_level=metadata.error_correction_level,
                    dark_color=metadata.dark_color,
                    light_color=metadata.light_color,
                )
                now = self._clock()
                entry = CacheEntry(
                    image=bytes(image),
                    metadata=EntryMetadata(
                        created_at=now,
                        last_accessed_at=now,
                        access_count=0,
                        size_bytes=len(image),
                        request_size=metadata.size,
                        error_correction_level=metadata.error_correction_level,
                        colors_customized=colors_customized(
                            metadata.dark_color, metadata.light_color
                        ),
                    ),
                    expires_at=now + ttl,
                )
                self._cache.set(key, entry, ttl_seconds=ttl)
                self._counters.sets += 1
                logger.debug("cache_set", key=key, ttl=ttl, size_bytes=len(image))
                return True
            except Exception as e:
                self._counters.errors += 1
                logger.warning("cache_set_failed", key=key, error=str(e))
                return False

    def delete(self, key: str) -> bool:
        """Remove one entry; True if it was present."""
        with self._lock:
            try:
                removed = self._cache.delete(key)
                if removed:
                    self._counters.deletes += 1
                return removed
            except Exception as e:
                self._counters.errors += 1
                logger.warning("cache_delete_failed", key=key, error=str(e))
                return False

    def clear(self) -> bool:
        """Remove every entry. Statistics are kept."""
        with self._lock:
            try:
                self._cache.clear()
                logger.info("cache_cleared")
                return True
            except Exception as e:
                self._counters.errors += 1
                logger.warning("cache_clear_failed", error=str(e))
                return False

    def sweep(self, now: float | None = None) -> int:
        """
        Evict stale and cold entries that have not expired yet.

        An entry goes when it is older than ``max_age``, or when it has been
        idle longer than ``idle_timeout`` with fewer than ``min_access`` reads.

        Args:
            now: Reference time (defaults to the store clock)

        Returns:
            Number of entries evicted
        """
        with self._lock:
            try:
                now = self._clock() if now is None else now
                stale = []
                for key, entry in self._cache.items():
                    age = now - entry.metadata.created_at
                    idle = now - entry.metadata.last_accessed_at
                    if age > self.max_age or (
                        idle > self.idle_timeout and entry.metadata.access_count < self.min_access
                    ):
                        stale.append(key)

                for key in stale:
                    if self._cache.delete(key):
                        self._counters.deletes += 1

                if stale:
                    logger.info("cache_swept", evicted=len(stale), remaining=len(self._cache))
                return len(stale)
            except Exception as e:
                self._counters.errors += 1
                logger.warning("cache_sweep_failed", error=str(e))
                return 0

    def stats(self) -> CacheStats:
        """Snapshot of counters plus derived size figures."""
        with self._lock:
            try:
                entries = self._cache.items()
                key_count = len(entries)
                total_size = sum(entry.metadata.size_bytes for _, entry in entries)
            except Exception as e:
                self._counters.errors += 1
                logger.warning("cache_stats_failed", error=str(e))
                key_count = total_size = 0

            return CacheStats(
                hits=self._counters.hits,
                misses=self._counters.misses,
                sets=self._counters.sets,
                deletes=self._counters.deletes,
                errors=self._counters.errors,
                key_count=key_count,
                total_value_size_bytes=total_size,
                evictions=self._cache.stats.evictions,
                expirations=self._cache.stats.expirations,
            )

    def reset_stats(self) -> None:
        """Zero the operation counters."""
        with self._lock:
            self._counters = _Counters()

    def keys(self) -> list[str]:
        """Live keys, least recently used first."""
        with self._lock:
            return self._cache.keys()

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._cache

    # Route-layer surface
    lookup_or_miss = get
    store = set
    current_stats = stats
    clear_all = clear


__all__ = [
    "QRCacheStore",
    "CacheEntry",
    "CacheStats",
    "EntryMetadata",
    "RequestMetadata",
]
