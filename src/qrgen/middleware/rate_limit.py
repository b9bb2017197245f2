"""
Rate Limiting Middleware
Sliding-window, per-client limits kept in process memory.
"""

import time
from collections import defaultdict
from dataclasses import dataclass
from typing import Callable

from fastapi import Request
from fastapi.responses import ORJSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response
from starlette.types import ASGIApp

from ..core.logging_config import get_logger

logger = get_logger(__name__)

CLEANUP_INTERVAL = 60.0


@dataclass(frozen=True)
class RateLimitRule:
    """Limit applied to every path under ``prefix``."""

    prefix: str
    max_requests: int
    window_seconds: int


class InMemoryRateLimiter:
    """Sliding-window counter keyed by client and rule."""

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._requests: dict[str, list[float]] = defaultdict(list)
        self._clock = clock
        self._last_cleanup = clock()

    def hit(self, key: str, max_requests: int, window_seconds: int) -> tuple[bool, int, int]:
        """
        Record a request against ``key``.

        Returns:
            (is_limited, remaining_requests, retry_after_seconds)
        """
        now = self._clock()
        window_start = now - window_seconds

        # Clean old requests outside window
        timestamps = [ts for ts in self._requests[key] if ts > window_start]
        self._requests[key] = timestamps

        if len(timestamps) >= max_requests:
            retry_after = int(min(timestamps) + window_seconds - now) + 1
            return True, 0, max(1, retry_after)

        timestamps.append(now)

        if now - self._last_cleanup > CLEANUP_INTERVAL:
            self._cleanup(now)

        return False, max(0, max_requests - len(timestamps)), 0

    def _cleanup(self, now: float) -> None:
        """Drop clients with no requests in the last hour."""
        self._last_cleanup = now
        idle = [key for key, timestamps in self._requests.items() if not timestamps or now - timestamps[-1] > 3600]
        for key in idle:
            del self._requests[key]

    def reset(self) -> None:
        self._requests.clear()


def client_ip(request: Request) -> str:
    """Client address, honouring proxy headers."""
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip
    return request.client.host if request.client else "unknown"


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Applies every matching rule; the first exhausted one rejects the request."""

    def __init__(
        self,
        app: ASGIApp,
        rules: list[RateLimitRule],
        limiter: InMemoryRateLimiter | None = None,
        enabled: bool = True,
    ) -> None:
        super().__init__(app)
        self.rules = rules
        self.limiter = limiter or InMemoryRateLimiter()
        self.enabled = enabled

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if not self.enabled:
            return await call_next(request)

        path = request.url.path
        client = client_ip(request)
        remaining_headers: dict[str, str] = {}

        for rule in self.rules:
            if not path.startswith(rule.prefix):
                continue

            limited, remaining, retry_after = self.limiter.hit(
                f"{rule.prefix}:{client}", rule.max_requests, rule.window_seconds
            )
            if limited:
                logger.warning("rate_limited", client=client, path=path, rule=rule.prefix)
                return ORJSONResponse(
                    status_code=429,
                    content={
                        "error": "Too many requests",
                        "message": f"Rate limit exceeded. Try again in {retry_after} seconds.",
                        "retry_after": retry_after,
                    },
                    headers={"Retry-After": str(retry_after)},
                )
            remaining_headers = {
                "X-RateLimit-Limit": str(rule.max_requests),
                "X-RateLimit-Remaining": str(remaining),
            }

        response = await call_next(request)
        response.headers.update(remaining_headers)
        return response
