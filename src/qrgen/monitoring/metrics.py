"""
Metrics Collection
Prometheus metrics for QR generation and cache performance
"""

import time
from contextlib import contextmanager
from typing import TYPE_CHECKING, Callable, Iterator

from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram, generate_latest

if TYPE_CHECKING:
    from ..cache.store import CacheStats


class MetricsCollector:
    """
    Collects and exposes Prometheus metrics for the QR service.

    Each collector owns its registry so several apps can coexist in one
    process (tests, embedded use).
    """

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        self.registry = registry or CollectorRegistry()

        # Generation metrics
        self.qr_requests_total = Counter(
            "qr_requests_total",
            "Total number of QR generation requests",
            ["endpoint", "status"],
            registry=self.registry,
        )
        self.qr_duration = Histogram(
            "qr_generation_duration_seconds",
            "QR encoding duration in seconds (cache misses only)",
            buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5],
            registry=self.registry,
        )

        # Cache metrics
        self.cache_hits = Counter(
            "qr_cache_hits_total",
            "Total number of cache hits",
            registry=self.registry,
        )
        self.cache_misses = Counter(
            "qr_cache_misses_total",
            "Total number of cache misses",
            registry=self.registry,
        )
        self.cache_hit_rate = Gauge(
            "qr_cache_hit_rate",
            "Cache hit rate (0.0 to 1.0)",
            registry=self.registry,
        )
        self.cache_keys = Gauge(
            "qr_cache_keys_total",
            "Total number of cached keys",
            registry=self.registry,
        )
        self.cache_size = Gauge(
            "qr_cache_size_bytes",
            "Current cache size in bytes",
            registry=self.registry,
        )

        # Error metrics
        self.errors_total = Counter(
            "qr_errors_total",
            "Total number of errors",
            ["error_type", "component"],
            registry=self.registry,
        )

        # System metrics
        self.memory_rss = Gauge(
            "qr_memory_rss_bytes",
            "Resident memory in bytes",
            registry=self.registry,
        )
        self.uptime = Gauge(
            "qr_uptime_seconds",
            "Service uptime in seconds",
            registry=self.registry,
        )
        self.start_time = time.time()

    def record_request(self, endpoint: str, status: str) -> None:
        """Record a QR generation request."""
        self.qr_requests_total.labels(endpoint=endpoint, status=status).inc()

    def record_generation(self, duration: float) -> None:
        """Record time spent encoding a QR code."""
        self.qr_duration.observe(duration)

    def record_cache_hit(self) -> None:
        """Record a cache hit."""
        self.cache_hits.inc()

    def record_cache_miss(self) -> None:
        """Record a cache miss."""
        self.cache_misses.inc()

    def update_cache(self, stats: "CacheStats") -> None:
        """Refresh cache gauges from a stats snapshot."""
        self.cache_hit_rate.set(stats.hit_rate)
        self.cache_keys.set(stats.key_count)
        self.cache_size.set(stats.total_value_size_bytes)

    def set_memory(self, rss_bytes: int) -> None:
        self.memory_rss.set(rss_bytes)

    def record_error(self, error_type: str, component: str) -> None:
        """Record an error."""
        self.errors_total.labels(error_type=error_type, component=component).inc()

    def uptime_seconds(self) -> float:
        return time.time() - self.start_time

    def update_uptime(self) -> None:
        """Update the uptime metric."""
        self.uptime.set(self.uptime_seconds())

    @contextmanager
    def measure_duration(self, callback: Callable[[float], None]) -> Iterator[None]:
        """Context manager to measure operation duration."""
        start = time.perf_counter()
        try:
            yield
        finally:
            callback(time.perf_counter() - start)

    def get_metrics(self) -> bytes:
        """Get metrics in Prometheus format."""
        self.update_uptime()
        return generate_latest(self.registry)
