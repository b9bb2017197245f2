"""Read-only projections of cache statistics for operators."""

import math
from typing import Any, Callable

from ..monitoring.memory import MemoryUsage, process_memory, to_megabytes
from .store import CacheStats, QRCacheStore


def whole_percent(rate: float) -> int:
    """Rate as a whole percentage, halves rounded up."""
    return math.floor(rate * 100 + 0.5)


def percent(rate: float) -> str:
    """0.125 -> '13%'."""
    return f"{whole_percent(rate)}%"


def format_stats(stats: CacheStats) -> dict[str, Any]:
    """Render statistics as the ``/api/cache/stats`` document."""
    return {
        "cache_performance": {
            "hit_rate": percent(stats.hit_rate),
            "total_hits": stats.hits,
            "total_misses": stats.misses,
            "total_keys": stats.key_count,
        },
        "memory_usage": {
            "cache_size_mb": to_megabytes(stats.total_value_size_bytes),
            "key_count": stats.key_count,
            "average_entry_size": (
                round(stats.total_value_size_bytes / stats.key_count) if stats.key_count else 0
            ),
        },
        "operations": {
            "sets": stats.sets,
            "deletes": stats.deletes,
            "errors": stats.errors,
            "evictions": stats.evictions,
            "expirations": stats.expirations,
        },
    }


def build_health(stats: CacheStats, memory: MemoryUsage) -> dict[str, Any]:
    """
    Compose the cache health document.

    The store degrades to a zero hit rate rather than failing, so the
    status is always healthy when this can be computed.
    """
    return {
        "status": "healthy",
        "hit_rate_percent": whole_percent(stats.hit_rate),
        "key_count": stats.key_count,
        "memory_estimate_mb": to_megabytes(stats.total_value_size_bytes),
        "cache": {
            "hit_rate": percent(stats.hit_rate),
            "total_keys": stats.key_count,
            "memory_usage": f"{to_megabytes(stats.total_value_size_bytes)} MB",
        },
        "system": {
            "rss": f"{to_megabytes(memory.rss_bytes)} MB",
            "peak_rss": f"{to_megabytes(memory.peak_rss_bytes)} MB",
        },
    }


class CacheReporter:
    """Binds a store to a memory source for the route layer."""

    def __init__(
        self,
        store: QRCacheStore,
        memory_source: Callable[[], MemoryUsage] = process_memory,
    ) -> None:
        self.store = store
        self.memory_source = memory_source

    def stats(self) -> dict[str, Any]:
        return format_stats(self.store.stats())

    def health(self) -> dict[str, Any]:
        return build_health(self.store.stats(), self.memory_source())
