"""QR response cache: key derivation, TTL policy, store, sweeper and reporting."""

from .fingerprint import fingerprint, KEY_PREFIX
from .ttl import compute_ttl, colors_customized, BASE_TTL
from .store import QRCacheStore, CacheEntry, CacheStats, EntryMetadata, RequestMetadata
from .sweeper import CacheSweeper
from .health import CacheReporter, build_health, format_stats

__all__ = [
    "fingerprint",
    "KEY_PREFIX",
    "compute_ttl",
    "colors_customized",
    "BASE_TTL",
    "QRCacheStore",
    "CacheEntry",
    "CacheStats",
    "EntryMetadata",
    "RequestMetadata",
    "CacheSweeper",
    "CacheReporter",
    "build_health",
    "format_stats",
]
