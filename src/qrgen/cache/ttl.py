"""TTL policy: costlier QR codes are retained longer."""

import math

from ..core.validate import DEFAULT_DARK_COLOR, DEFAULT_LIGHT_COLOR, parse_size

BASE_TTL = 300

# (minimum exclusive pixel area, ttl seconds), largest first
AREA_TIERS: tuple[tuple[int, int], ...] = (
    (400_000, 1800),
    (160_000, 900),
)

HIGH_ERROR_CORRECTION_FACTOR = 1.5
CUSTOM_COLOR_FACTOR = 1.2


def colors_customized(dark_color: str | None = None, light_color: str | None = None) -> bool:
    """True when either color differs from the defaults (missing counts as default)."""
    dark = (dark_color or DEFAULT_DARK_COLOR).upper()
    light = (light_color or DEFAULT_LIGHT_COLOR).upper()
    return dark != DEFAULT_DARK_COLOR or light != DEFAULT_LIGHT_COLOR


def compute_ttl(
    size: str | None = None,
    error_correction_level: str | None = None,
    dark_color: str | None = None,
    light_color: str | None = None,
) -> int:
    """
    Compute the TTL in whole seconds for a cached QR code.

    Args:
        size: WIDTHxHEIGHT descriptor; malformed values get no escalation
        error_correction_level: "H" adds a 1.5x surcharge
        dark_color: Custom colors add a 1.2x surcharge
        light_color: Custom colors add a 1.2x surcharge

    Returns:
        TTL in seconds

    Examples:
        >>> compute_ttl("300x300")
        300
        >>> compute_ttl("500x500", "H")
        1350
    """
    ttl: float = BASE_TTL

    dimensions = parse_size(size)
    if dimensions is not None:
        area = dimensions[0] * dimensions[1]
        for threshold, tier_ttl in AREA_TIERS:
            if area > threshold:
                ttl = tier_ttl
                break

    if error_correction_level == "H":
        ttl *= HIGH_ERROR_CORRECTION_FACTOR

    if colors_customized(dark_color, light_color):
        ttl *= CUSTOM_COLOR_FACTOR

    return math.floor(ttl)


__all__ = ["compute_ttl", "colors_customized", "BASE_TTL"]
