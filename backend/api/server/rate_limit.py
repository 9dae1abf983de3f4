"""Per-client request rate limiting built on a token bucket."""

from __future__ import annotations

import time
from typing import TYPE_CHECKING

import structlog
from starlette.responses import JSONResponse

if TYPE_CHECKING:
    from starlette.types import ASGIApp, Receive, Scope, Send

logger = structlog.get_logger()

# Buckets for idle clients are dropped once the table grows past this size.
MAX_TRACKED_CLIENTS = 10_000


class TokenBucket:
    """Rate limiter using the token bucket algorithm.

    Tokens are added at a constant rate up to a maximum burst capacity.
    Each consume() call removes one token; returns False when the bucket
    is empty (caller should throttle).
    """

    def __init__(self, rate: float, burst: int) -> None:
        self._rate = rate
        self._burst = burst
        self._tokens = float(burst)
        self._last_refill = time.monotonic()

    def consume(self) -> bool:
        """Try to consume one token. Returns True if allowed, False if rate-limited."""
        self._refill()
        if self._tokens >= 1.0:
            self._tokens -= 1.0
            return True
        return False

    def is_full(self) -> bool:
        self._refill()
        return self._tokens >= self._burst

    def _refill(self) -> None:
        now = time.monotonic()
        elapsed = now - self._last_refill
        self._tokens = min(self._burst, self._tokens + elapsed * self._rate)
        self._last_refill = now


class RateLimitMiddleware:
    """Reject HTTP requests beyond ``max_requests`` per ``window_seconds`` per client IP.

    Exempt paths (health checks) are never counted.
    """

    def __init__(
        self,
        app: ASGIApp,
        *,
        max_requests: int,
        window_seconds: float,
        exempt_paths: frozenset[str] = frozenset(),
    ) -> None:
        self.app = app
        self._rate = max_requests / window_seconds
        self._burst = max_requests
        self._exempt_paths = exempt_paths
        self._buckets: dict[str, TokenBucket] = {}

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or scope["path"] in self._exempt_paths:
            await self.app(scope, receive, send)
            return

        client = scope.get("client")
        client_key = client[0] if client else "unknown"
        if not self._bucket_for(client_key).consume():
            logger.warning("rate limit exceeded", client=client_key, path=scope["path"])
            response = JSONResponse(
                {"success": False, "message": "Too many requests, please try again later"},
                status_code=429,
            )
            await response(scope, receive, send)
            return

        await self.app(scope, receive, send)

    def _bucket_for(self, client_key: str) -> TokenBucket:
        bucket = self._buckets.get(client_key)
        if bucket is None:
            if len(self._buckets) >= MAX_TRACKED_CLIENTS:
                self._prune()
            bucket = TokenBucket(rate=self._rate, burst=self._burst)
            self._buckets[client_key] = bucket
        return bucket

    def _prune(self) -> None:
        """Drop buckets that have fully refilled; those clients are idle."""
        for key in [k for k, b in self._buckets.items() if b.is_full()]:
            del self._buckets[key]
