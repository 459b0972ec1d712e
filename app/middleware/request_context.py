"""
RequestContext Middleware - Adds request tracking to all requests.

Every request gets a request_id (taken from an incoming X-Request-ID header
when present) which is:
- stored on request.state.request_id
- bound into structlog contextvars, so every log line emitted while handling
  the request carries it
- echoed back in the X-Request-ID response header

The middleware also logs one line per request with its status and timing.
"""

import time
import uuid

import structlog
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from app.infrastructure.observability.logging import log_request

REQUEST_ID_HEADER = "X-Request-ID"
MAX_REQUEST_ID_LENGTH = 128


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Bind a request id to the logging context for the lifetime of a request."""

    async def dispatch(self, request: Request, call_next):
        request_id = self._incoming_request_id(request) or str(uuid.uuid4())
        request.state.request_id = request_id

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        start_time = time.time()
        response = await call_next(request)
        duration_ms = round((time.time() - start_time) * 1000, 2)

        log_request(request.method, request.url.path, response.status_code, duration_ms)
        response.headers[REQUEST_ID_HEADER] = request_id
        structlog.contextvars.clear_contextvars()
        return response

    @staticmethod
    def _incoming_request_id(request: Request) -> str | None:
        value = request.headers.get(REQUEST_ID_HEADER)
        if value and len(value) <= MAX_REQUEST_ID_LENGTH:
            return value
        return None
