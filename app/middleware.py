"""
Name: HTTP Middleware

Responsibilities:
  - Generate and propagate request_id (UUID)
  - Set request context for logging
  - Add X-Request-Id response header
  - Log one line per request with status and latency

Collaborators:
  - context.py: ContextVars for request-scoped data
  - logger.py: Structured logging

Constraints:
  - Must clear context after response

Notes:
  - Uses Starlette middleware pattern (BaseHTTPMiddleware)
  - An incoming X-Request-Id is reused so callers can correlate logs
"""

import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from .context import bind_request, clear_context
from .logger import logger

_MAX_REQUEST_ID_LENGTH = 128


def _incoming_request_id(request: Request) -> str | None:
    value = request.headers.get("X-Request-Id", "").strip()
    if value and len(value) <= _MAX_REQUEST_ID_LENGTH and value.isprintable():
        return value
    return None


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    R: Middleware that establishes request context and logs completion.
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = _incoming_request_id(request) or str(uuid.uuid4())

        bind_request(request_id, request.method, request.url.path)
        request.state.request_id = request_id

        start_time = time.perf_counter()

        try:
            response = await call_next(request)

            latency_seconds = time.perf_counter() - start_time
            response.headers["X-Request-Id"] = request_id

            logger.info(
                "request completed",
                extra={
                    "status_code": response.status_code,
                    "latency_ms": round(latency_seconds * 1000, 2),
                },
            )
            return response

        except Exception as exc:
            latency_seconds = time.perf_counter() - start_time
            logger.exception(
                "request failed",
                extra={
                    "latency_ms": round(latency_seconds * 1000, 2),
                    "error": str(exc),
                },
            )
            raise

        finally:
            # R: Clear context to prevent leaks
            clear_context()
