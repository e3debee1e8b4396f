"""HTTP middleware: per-client rate limiting on /api and security headers."""
import logging
import time
from dataclasses import dataclass

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

RATE_LIMIT_MESSAGE = "Too many requests from this IP, please try again later."
# stale buckets are swept once this many clients are tracked
MAX_TRACKED_CLIENTS = 10_000


@dataclass
class _Bucket:
    count: int
    window_start: float


class FixedWindowRateLimiter:
    """In-process request counters, one fixed window per client key."""

    def __init__(self, limit: int, window_seconds: int, clock=time.monotonic):
        self.limit = limit
        self.window_seconds = window_seconds
        self.clock = clock
        self.buckets: dict[str, _Bucket] = {}

    def hit(self, key: str) -> tuple[bool, int, int]:
        """Count one request for `key`.

        Returns (allowed, remaining, retry_after_seconds).
        """
        now = self.clock()
        bucket = self.buckets.get(key)
        if bucket is None or now - bucket.window_start >= self.window_seconds:
            if len(self.buckets) >= MAX_TRACKED_CLIENTS:
                self.prune(now)
            bucket = self.buckets[key] = _Bucket(count=0, window_start=now)

        bucket.count += 1
        if bucket.count > self.limit:
            retry_after = max(1, int(bucket.window_start + self.window_seconds - now))
            return False, 0, retry_after
        return True, self.limit - bucket.count, 0

    def prune(self, now: float) -> None:
        self.buckets = {
            key: bucket for key, bucket in self.buckets.items() if now - bucket.window_start < self.window_seconds
        }

    def reset(self) -> None:
        self.buckets.clear()


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Reject requests under `prefix` with 429 once a client exceeds its window."""

    def __init__(self, app, limiter: FixedWindowRateLimiter, prefix: str = "/api/", enabled: bool = True):
        super().__init__(app)
        self.limiter = limiter
        self.prefix = prefix
        self.enabled = enabled

    async def dispatch(self, request: Request, call_next):
        if not self.enabled or not request.url.path.startswith(self.prefix):
            return await call_next(request)

        client = request.client.host if request.client else "unknown"
        allowed, remaining, retry_after = self.limiter.hit(client)
        if not allowed:
            logger.warning("Rate limit exceeded for %s on %s", client, request.url.path)
            return JSONResponse(
                status_code=429,
                content={"success": False, "message": RATE_LIMIT_MESSAGE},
                headers={"Retry-After": str(retry_after)},
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(self.limiter.limit)
        response.headers["X-RateLimit-Remaining"] = str(remaining)
        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to every response."""

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        return response
