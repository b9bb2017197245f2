"""Deterministic cache keys for QR generation requests."""

import orjson

from ..core.hash import Algorithm, hash_bytes
from ..core.validate import (
    DEFAULT_DARK_COLOR,
    DEFAULT_ERROR_LEVEL,
    DEFAULT_LIGHT_COLOR,
    DEFAULT_MARGIN,
    DEFAULT_SIZE,
)

KEY_PREFIX = "qr:"
KEY_DIGEST_LENGTH = 16


def fingerprint(
    text: str,
    dimensions: str | None = None,
    *,
    margin: int | None = None,
    error_correction_level: str | None = None,
    dark_color: str | None = None,
    light_color: str | None = None,
) -> str:
    """
    Derive the cache key for a generation request.

    Defaults are substituted before hashing, so an omitted option and its
    explicit default map to the same key.

    Args:
        text: Payload to encode
        dimensions: WIDTHxHEIGHT descriptor (default "300x300")
        margin: Quiet-zone width in modules (default 1)
        error_correction_level: L/M/Q/H (default M)
        dark_color: Module color (default #000000)
        light_color: Background color (default #FFFFFF)

    Returns:
        Key of the form ``qr:<16 hex chars>``

    Examples:
        >>> fingerprint("Hello World") == fingerprint("Hello World", "300x300", margin=1)
        True
    """
    # Field order is part of the key format
    record = {
        "data": text,
        "size": dimensions or DEFAULT_SIZE,
        "margin": margin if margin is not None else DEFAULT_MARGIN,
        "errorCorrectionLevel": error_correction_level or DEFAULT_ERROR_LEVEL,
        "color": dark_color or DEFAULT_DARK_COLOR,
        "bgcolor": light_color or DEFAULT_LIGHT_COLOR,
    }
    digest = hash_bytes(orjson.dumps(record), Algorithm.SHA256, truncate=KEY_DIGEST_LENGTH)
    return f"{KEY_PREFIX}{digest}"


__all__ = ["fingerprint", "KEY_PREFIX"]
