"""
ghfolio.api.errors

Exception → envelope mapping for the HTTP layer.

Responsibilities:
- Define API-layer exceptions (explicit failures, rate limiting).
- Register handlers that render domain exceptions as response envelopes.
"""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_401_UNAUTHORIZED,
    HTTP_404_NOT_FOUND,
    HTTP_429_TOO_MANY_REQUESTS,
    HTTP_500_INTERNAL_SERVER_ERROR,
)

from ghfolio.api.responses import failure
from ghfolio.errors import (
    GitHubApiError,
    GitHubNotFoundError,
    InvalidActivityTypeError,
    ProjectNotFoundError,
    WebhookSignatureError,
)
from ghfolio.observability.logging import get_logger

log = get_logger(__name__)


class ApiError(Exception):
    def __init__(self, status_code: int, message: str, *, api_error: str | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.api_error = api_error


class RateLimitExceeded(Exception):
    def __init__(self, retry_after: int) -> None:
        super().__init__("Too many requests")
        self.retry_after = retry_after


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ApiError)
    async def _api_error(request: Request, exc: ApiError):
        return failure(
            request, http_status=exc.status_code, message=exc.message, api_error=exc.api_error
        )

    @app.exception_handler(RateLimitExceeded)
    async def _rate_limited(request: Request, exc: RateLimitExceeded):
        log.warning("rate_limited", retry_after=exc.retry_after)
        return failure(
            request,
            http_status=HTTP_429_TOO_MANY_REQUESTS,
            message="Too many requests, please try again later.",
            headers={"Retry-After": str(exc.retry_after)},
        )

    @app.exception_handler(GitHubNotFoundError)
    async def _github_not_found(request: Request, exc: GitHubNotFoundError):
        return failure(
            request,
            http_status=HTTP_404_NOT_FOUND,
            message="Resource not found",
            api_error=exc.message,
        )

    @app.exception_handler(GitHubApiError)
    async def _github_error(request: Request, exc: GitHubApiError):
        return failure(
            request,
            http_status=HTTP_500_INTERNAL_SERVER_ERROR,
            message="GitHub API error",
            api_error=exc.message,
        )

    @app.exception_handler(ProjectNotFoundError)
    async def _project_not_found(request: Request, exc: ProjectNotFoundError):
        return failure(request, http_status=HTTP_404_NOT_FOUND, message=str(exc))

    @app.exception_handler(InvalidActivityTypeError)
    async def _invalid_activity(request: Request, exc: InvalidActivityTypeError):
        return failure(request, http_status=HTTP_400_BAD_REQUEST, message=str(exc))

    @app.exception_handler(WebhookSignatureError)
    async def _bad_signature(request: Request, exc: WebhookSignatureError):
        log.warning("webhook_rejected", reason=str(exc))
        return failure(request, http_status=HTTP_401_UNAUTHORIZED, message=str(exc))

    @app.exception_handler(RequestValidationError)
    async def _validation(request: Request, exc: RequestValidationError):
        problems = "; ".join(
            f"{'.'.join(str(p) for p in e.get('loc', ()))}: {e.get('msg')}" for e in exc.errors()
        )
        return failure(
            request, http_status=HTTP_400_BAD_REQUEST, message=f"Bad Request: {problems}"
        )

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException):
        message = "Resource not found" if exc.status_code == HTTP_404_NOT_FOUND else str(exc.detail)
        return failure(request, http_status=exc.status_code, message=message)

    @app.exception_handler(Exception)
    async def _unhandled(request: Request, exc: Exception):
        log.exception("unhandled_error", error=str(exc))
        return failure(
            request, http_status=HTTP_500_INTERNAL_SERVER_ERROR, message="Internal server error"
        )


# --- Module Notes -----------------------------------------------------------
# Handlers resolve by exception MRO, so `GitHubNotFoundError` is rendered as 404 even
# though it subclasses `GitHubApiError`.
