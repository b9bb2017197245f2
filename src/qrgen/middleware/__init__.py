"""HTTP middleware."""

from .rate_limit import InMemoryRateLimiter, RateLimitMiddleware, RateLimitRule
from .security import ApiKeyMiddleware, RequestLoggingMiddleware, SecurityHeadersMiddleware

__all__ = [
    "InMemoryRateLimiter",
    "RateLimitMiddleware",
    "RateLimitRule",
    "ApiKeyMiddleware",
    "RequestLoggingMiddleware",
    "SecurityHeadersMiddleware",
]
