"""Per-IP fixed-window rate limiting.

State lives in process memory, so limits apply per worker process.
"""

import logging
import math
import time
from dataclasses import dataclass
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from finquest.api.middleware.error_handler import error_response
from finquest.core.errors import get_error

logger = logging.getLogger(__name__)

EXEMPT_PATHS = ("/health",)


@dataclass
class RateLimitDecision:
    allowed: bool
    limit: int
    remaining: int
    reset_seconds: int


class FixedWindowRateLimiter:
    """Counts hits per key in fixed windows of ``window_seconds``."""

    def __init__(
        self,
        max_requests: int,
        window_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._windows: dict[str, tuple[float, int]] = {}

    def hit(self, key: str) -> RateLimitDecision:
        now = self._clock()
        window_start, count = self._windows.get(key, (now, 0))
        if now - window_start >= self.window_seconds:
            window_start, count = now, 0

        count += 1
        self._windows[key] = (window_start, count)
        self._evict_expired(now)

        reset = max(0, math.ceil(window_start + self.window_seconds - now))
        return RateLimitDecision(
            allowed=count <= self.max_requests,
            limit=self.max_requests,
            remaining=max(0, self.max_requests - count),
            reset_seconds=reset,
        )

    def _evict_expired(self, now: float) -> None:
        if len(self._windows) < 10_000:
            return
        self._windows = {
            key: value
            for key, value in self._windows.items()
            if now - value[0] < self.window_seconds
        }


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Reject clients that exceed the configured request budget with 429."""

    def __init__(self, app, max_requests: int, window_ms: int):
        super().__init__(app)
        self.limiter = FixedWindowRateLimiter(max_requests, window_ms / 1000)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path.startswith(EXEMPT_PATHS):
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        decision = self.limiter.hit(client_ip)
        headers = {
            "RateLimit-Limit": str(decision.limit),
            "RateLimit-Remaining": str(decision.remaining),
            "RateLimit-Reset": str(decision.reset_seconds),
        }

        if not decision.allowed:
            logger.warning(
                "Rate limit exceeded",
                extra={"client_ip": client_ip, "path": request.url.path},
            )
            definition = get_error("RATE_001")
            return error_response(
                definition.http_status,
                definition.message,
                headers={**headers, "Retry-After": str(decision.reset_seconds)},
            )

        response = await call_next(request)
        response.headers.update(headers)
        return response
