"""Dependency Injection Container."""

from injector import Injector, Module, provider, singleton

from ..cache.health import CacheReporter
from ..cache.store import QRCacheStore
from ..cache.sweeper import CacheSweeper
from ..encoding.qr import QREncoder
from ..handlers.qr import QRHandler
from ..monitoring.metrics import MetricsCollector
from .config import Settings, get_settings


class CoreModule(Module):
    """Core dependencies. One container owns one cache store."""

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()

    @singleton
    @provider
    def provide_settings(self) -> Settings:
        return self.settings

    @singleton
    @provider
    def provide_cache_store(self, settings: Settings) -> QRCacheStore:
        """Provide the process cache store."""
        return QRCacheStore(
            max_keys=settings.cache_max_keys,
            max_age=settings.cache_max_age,
            idle_timeout=settings.cache_idle_timeout,
            min_access=settings.cache_min_access,
        )

    @singleton
    @provider
    def provide_sweeper(self, store: QRCacheStore, settings: Settings) -> CacheSweeper:
        return CacheSweeper(store, interval=settings.cache_sweep_interval)

    @singleton
    @provider
    def provide_reporter(self, store: QRCacheStore) -> CacheReporter:
        return CacheReporter(store)

    @singleton
    @provider
    def provide_encoder(self) -> QREncoder:
        return QREncoder()

    @singleton
    @provider
    def provide_metrics(self) -> MetricsCollector:
        return MetricsCollector()

    @singleton
    @provider
    def provide_qr_handler(
        self,
        store: QRCacheStore,
        encoder: QREncoder,
        metrics: MetricsCollector,
        settings: Settings,
    ) -> QRHandler:
        """Provide QR handler with all dependencies."""
        return QRHandler(store, encoder, metrics, cache_enabled=settings.cache_enabled)


def create_container(settings: Settings | None = None) -> Injector:
    """Create configured injector."""
    return Injector([CoreModule(settings)])
