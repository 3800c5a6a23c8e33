"""
Name: Fixed Window Rate Limiter

Responsibilities:
  - Limit requests per client address (100 per 15 minutes by default)
  - Return 429 with Retry-After header when the window is exhausted
  - Report X-RateLimit-Limit / X-RateLimit-Remaining on every response

Collaborators:
  - config.py: RATE_LIMIT_MAX_REQUESTS, RATE_LIMIT_WINDOW_SECONDS,
    RATE_LIMIT_TRUST_PROXY
  - container.py: builds the limiter, main.py installs the middleware

Constraints:
  - In-memory storage (resets on restart, not shared between processes)
  - Thread-safe (using locks)

Notes:
  - A window starts with a client's first request and lasts window_seconds
  - X-Forwarded-For is honored only when the proxy is trusted
"""

import math
import threading
import time
from dataclasses import dataclass

from starlette.requests import Request

from .error_responses import app_exception_handler, rate_limited
from .logger import logger


@dataclass
class Window:
    """R: Request count for one client within the current window."""

    started_at: float
    count: int = 0


class FixedWindowRateLimiter:
    """
    R: Fixed window counter per client key.

    Attributes:
        max_requests: Requests allowed per window
        window_seconds: Window length
    """

    def __init__(self, max_requests: int, window_seconds: float):
        if max_requests <= 0:
            raise ValueError("max_requests must be positive")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")

        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._windows: dict[str, Window] = {}
        self._lock = threading.Lock()

    def consume(self, key: str) -> tuple[bool, int, int]:
        """
        R: Count one request against key's window.

        Returns:
            (allowed, retry_after_seconds, remaining)
        """
        with self._lock:
            now = time.monotonic()
            window = self._windows.get(key)
            if window is None or now - window.started_at >= self.window_seconds:
                window = Window(started_at=now)
                self._windows[key] = window
                self._evict_expired(now)

            if window.count >= self.max_requests:
                retry_after = self.window_seconds - (now - window.started_at)
                return (False, max(1, math.ceil(retry_after)), 0)

            window.count += 1
            return (True, 0, self.max_requests - window.count)

    def _evict_expired(self, now: float) -> None:
        expired = [
            key
            for key, window in self._windows.items()
            if now - window.started_at >= self.window_seconds
        ]
        for key in expired:
            del self._windows[key]

    def clear(self) -> None:
        """R: Clear all windows (for testing)."""
        with self._lock:
            self._windows.clear()


def get_client_identifier(request: Request, trust_proxy: bool = False) -> str:
    """
    R: Get identifier for rate limiting.

    Priority:
      1. X-Forwarded-For first hop (only behind a trusted proxy)
      2. Client IP address
    """
    if trust_proxy:
        forwarded_for = request.headers.get("X-Forwarded-For")
        if forwarded_for:
            return f"ip:{forwarded_for.split(',')[0].strip()}"

    client = request.client
    if client:
        return f"ip:{client.host}"

    return "ip:unknown"


class RateLimitMiddleware:
    """
    R: ASGI middleware applying the fixed window limiter per client.

    Skips rate limiting for the health and docs endpoints.
    """

    # R: Paths excluded from rate limiting
    EXCLUDED_PATHS = {"/healthz", "/openapi.json", "/docs", "/redoc"}

    def __init__(self, app, limiter: FixedWindowRateLimiter, trust_proxy: bool = False):
        self.app = app
        self.limiter = limiter
        self.trust_proxy = trust_proxy

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        path = scope.get("path", "")
        if path in self.EXCLUDED_PATHS:
            await self.app(scope, receive, send)
            return

        request = Request(scope, receive, send)
        client_id = get_client_identifier(request, self.trust_proxy)
        allowed, retry_after, remaining = self.limiter.consume(client_id)
        limit = str(self.limiter.max_requests)

        if not allowed:
            logger.warning(
                "Rate limit exceeded",
                extra={"client_id": client_id, "retry_after": retry_after},
            )
            exc = rate_limited(retry_after)
            exc.headers = {
                **(exc.headers or {}),
                "X-RateLimit-Limit": limit,
                "X-RateLimit-Remaining": "0",
            }
            response = await app_exception_handler(request, exc)
            await response(scope, receive, send)
            return

        async def send_with_headers(message):
            if message["type"] == "http.response.start":
                headers = list(message.get("headers", []))
                headers.append((b"x-ratelimit-limit", limit.encode()))
                headers.append((b"x-ratelimit-remaining", str(remaining).encode()))
                message = {**message, "headers": headers}
            await send(message)

        await self.app(scope, receive, send_with_headers)
