"""
ghfolio.observability.middleware

HTTP middleware for request-scoped logging context.

Responsibilities:
- Generate/propagate request IDs and expose them on `request.state`.
- Bind request metadata into structlog contextvars.
- Log every inbound API request with caller IP and user agent.
- Warn when the process peak RSS passes the configured threshold.
"""

from __future__ import annotations

import resource
import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from ghfolio.observability.logging import get_logger

log = get_logger(__name__)


def peak_rss_mb() -> float:
    # ru_maxrss is reported in KiB on Linux.
    return round(resource.getrusage(resource.RUSAGE_SELF).ru_maxrss / 1024, 1)


class RequestContextMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp, *, memory_warning_mb: int | None = None) -> None:
        super().__init__(app)
        self._memory_warning_mb = memory_warning_mb

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        request.state.request_id = request_id
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            path=request.url.path,
            method=request.method,
        )
        log.info(
            "api_request",
            ip=request.client.host if request.client else None,
            user_agent=request.headers.get("user-agent"),
        )
        if self._memory_warning_mb is not None:
            rss = peak_rss_mb()
            if rss > self._memory_warning_mb:
                log.warning("high_memory_usage", peak_rss_mb=rss)
        try:
            response: Response = await call_next(request)
        finally:
            # Avoid leaking context across requests under async concurrency.
            structlog.contextvars.clear_contextvars()

        response.headers["x-request-id"] = request_id
        return response


def request_id_of(request: Request) -> str:
    # Routers reuse the middleware id so envelope metadata and logs agree.
    return getattr(request.state, "request_id", None) or str(uuid.uuid4())


# --- Module Notes -----------------------------------------------------------
# This middleware complements `observability.logging.configure_logging` by ensuring
# request metadata is present on every log line without explicit parameter threading.
