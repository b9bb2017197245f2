"""Core utilities and infrastructure."""

from .config import Settings, get_settings
from .validate import (
    ValidationError,
    ValidationResult,
    QRRequest,
    build_request,
    validate_batch_item,
    validate_size,
    parse_size,
    normalize_color,
    strip_markup,
)
from .logging_config import configure_logging, get_logger, LogContext
from .hash import Algorithm, hash_bytes
from .cache import LRUCache, Stats


def create_container(settings: Settings | None = None):
    """Create dependency injection container (lazy import to avoid circular deps)."""
    from .container import create_container as _create_container

    return _create_container(settings)


__all__ = [
    # Config
    "Settings",
    "get_settings",
    # Validation
    "ValidationError",
    "ValidationResult",
    "QRRequest",
    "build_request",
    "validate_batch_item",
    "validate_size",
    "parse_size",
    "normalize_color",
    "strip_markup",
    # Logging
    "configure_logging",
    "get_logger",
    "LogContext",
    # DI
    "create_container",
    # Hashing
    "Algorithm",
    "hash_bytes",
    # Caching
    "LRUCache",
    "Stats",
]
