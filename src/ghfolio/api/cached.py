"""
ghfolio.api.cached

Cache-aside endpoint helper shared by every read route.

Responsibilities:
- Serve from Redis when possible, otherwise load from GitHub and populate the cache.
- Log start/completion/failure with cache state and duration.
- Turn GitHub failures into the endpoint's own failure envelope.
"""

from __future__ import annotations

import time
from collections.abc import Awaitable, Callable
from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.status import HTTP_404_NOT_FOUND, HTTP_500_INTERNAL_SERVER_ERROR

from ghfolio.api.errors import ApiError
from ghfolio.api.responses import elapsed_ms, success
from ghfolio.cache.service import CacheService
from ghfolio.errors import GitHubApiError, GitHubNotFoundError
from ghfolio.github.client import GitHubClient
from ghfolio.observability.logging import get_logger

log = get_logger(__name__)


async def serve_cached(
    request: Request,
    *,
    cache: CacheService,
    key: str,
    ttl: int,
    loader: Callable[[], Awaitable[Any]],
    resource: str,
    github: GitHubClient | None = None,
    present: Callable[[Any], Any] | None = None,
) -> JSONResponse:
    """
    `resource` names the payload in messages ("github profile" →
    "Github profile fetched successfully" / "Failed to fetch github profile").
    Passing `github` attaches the remaining GitHub quota to fresh responses.
    `present` wraps the cached value for the response; the cache keeps the raw value.
    """

    started = time.perf_counter()
    log.info("request_started", resource=resource, cache_key=key)
    try:
        data, cached = await cache.get_or_load(key, ttl, loader)
    except GitHubApiError as e:
        log.error(
            "request_failed",
            resource=resource,
            error=e.message,
            duration_ms=elapsed_ms(started),
        )
        status = (
            HTTP_404_NOT_FOUND
            if isinstance(e, GitHubNotFoundError)
            else HTTP_500_INTERNAL_SERVER_ERROR
        )
        raise ApiError(status, f"Failed to fetch {resource}", api_error=e.message) from e

    rate_limit = await github.get_rate_limit() if github is not None and not cached else None
    log.info(
        "request_completed",
        resource=resource,
        cached=cached,
        duration_ms=elapsed_ms(started),
    )
    return success(
        request,
        message=f"{resource[:1].upper()}{resource[1:]} fetched successfully",
        data=present(data) if present is not None else data,
        cached=cached,
        started=started,
        rate_limit=rate_limit,
    )


# --- Module Notes -----------------------------------------------------------
# Domain errors other than GitHub failures (unknown project, bad activity type) propagate
# unchanged to the handlers in `ghfolio.api.errors`.
