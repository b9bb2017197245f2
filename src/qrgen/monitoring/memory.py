"""Process memory figures for health reporting."""

import os
import resource
import sys
from dataclasses import dataclass


@dataclass(frozen=True)
class MemoryUsage:
    """Resident memory of the current process."""

    rss_bytes: int
    peak_rss_bytes: int


def _peak_rss_bytes() -> int:
    peak = resource.getrusage(resource.RUSAGE_SELF).ru_maxrss
    # ru_maxrss is bytes on macOS, kilobytes elsewhere
    return peak if sys.platform == "darwin" else peak * 1024


def _current_rss_bytes() -> int | None:
    try:
        with open("/proc/self/statm", encoding="ascii") as f:
            resident_pages = int(f.read().split()[1])
    except (OSError, ValueError, IndexError):
        return None
    return resident_pages * os.sysconf("SC_PAGE_SIZE")


def process_memory() -> MemoryUsage:
    """Current and peak RSS; current falls back to peak where /proc is missing."""
    peak = _peak_rss_bytes()
    current = _current_rss_bytes()
    return MemoryUsage(rss_bytes=current if current is not None else peak, peak_rss_bytes=peak)


def to_megabytes(size_bytes: int | float) -> float:
    """Bytes to MB rounded to two decimals."""
    return round(size_bytes / 1024 / 1024, 2)
