"""
Performance Monitoring
Prometheus metrics and process memory figures for the QR service
"""

from .memory import MemoryUsage, process_memory, to_megabytes
from .metrics import MetricsCollector

__all__ = [
    "MetricsCollector",
    "MemoryUsage",
    "process_memory",
    "to_megabytes",
]
