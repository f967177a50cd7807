"""
ghfolio.api.responses

Uniform JSON response envelope.

Responsibilities:
- Render success/failure envelopes with request metadata (id, timing, cache state).
- Attach GitHub rate-limit details to responses served from a fresh fetch.
"""

from __future__ import annotations

import enum
import time
from datetime import datetime, timezone
from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse

from ghfolio.cache.service import to_jsonable
from ghfolio.github.models import RateLimitInfo
from ghfolio.observability.middleware import request_id_of


class StatusCode(str, enum.Enum):
    # Application-level code, independent of the HTTP status.
    success = "10000"
    failure = "10001"
    retry = "10002"


_ABSENT: Any = object()


def elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)


def envelope(
    request: Request,
    *,
    http_status: int,
    status_code: StatusCode,
    message: str,
    data: Any = _ABSENT,
    cached: bool | None = None,
    started: float | None = None,
    rate_limit: RateLimitInfo | None = None,
    api_error: str | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    metadata: dict[str, Any] = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "request_id": request_id_of(request),
        "cached": cached,
        "duration": f"{elapsed_ms(started)}ms" if started is not None else None,
        "rate_limit": rate_limit,
    }
    body: dict[str, Any] = {
        "status_code": status_code.value,
        "message": message,
        "api_error": api_error,
        "metadata": {k: v for k, v in metadata.items() if v is not None},
    }
    if data is not _ABSENT:
        body["data"] = data
    body = {k: v for k, v in body.items() if v is not None or k == "data"}
    return JSONResponse(status_code=http_status, content=to_jsonable(body), headers=headers)


def success(
    request: Request,
    *,
    message: str,
    data: Any,
    cached: bool | None = None,
    started: float | None = None,
    rate_limit: RateLimitInfo | None = None,
) -> JSONResponse:
    return envelope(
        request,
        http_status=200,
        status_code=StatusCode.success,
        message=message,
        data=data,
        cached=cached,
        started=started,
        rate_limit=rate_limit,
    )


def failure(
    request: Request,
    *,
    http_status: int,
    message: str,
    api_error: str | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    return envelope(
        request,
        http_status=http_status,
        status_code=StatusCode.retry if http_status == 429 else StatusCode.failure,
        message=message,
        api_error=api_error,
        headers=headers,
    )


# --- Module Notes -----------------------------------------------------------
# `data` is always present on success (even when it is an empty list); error envelopes
# never carry it.
