"""
ghfolio.api.routers.system

Detailed system health and visitor counter endpoints.

Responsibilities:
- Report Redis and GitHub reachability with response times.
- Derive an overall status (healthy / degraded / unhealthy).
- Expose the portfolio visitor counter.
"""

from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Literal

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ghfolio import __version__
from ghfolio.api.deps import cache_dep, github_dep, settings_dep
from ghfolio.api.responses import elapsed_ms, success
from ghfolio.cache.service import CacheService
from ghfolio.errors import GitHubApiError
from ghfolio.github.client import GitHubClient
from ghfolio.observability.logging import get_logger
from ghfolio.observability.middleware import peak_rss_mb
from ghfolio.settings import Settings

log = get_logger(__name__)

router = APIRouter(prefix="/system", tags=["system"])

HealthStatus = Literal["healthy", "degraded", "unhealthy"]


class ServiceHealth(BaseModel):
    status: HealthStatus
    response_time_ms: int | None = None
    error: str | None = None


class SystemInfo(BaseModel):
    memory_peak_rss_mb: float
    uptime: float


class HealthCheck(BaseModel):
    status: HealthStatus
    timestamp: datetime
    uptime: float
    environment: str
    version: str
    port: int
    timezone: str
    services: dict[str, ServiceHealth]
    system: SystemInfo


@router.get("/health")
async def system_health(
    request: Request,
    cache: CacheService = Depends(cache_dep),
    github: GitHubClient = Depends(github_dep),
    settings: Settings = Depends(settings_dep),
) -> JSONResponse:
    started = time.perf_counter()

    t0 = time.perf_counter()
    redis_ok = await cache.is_healthy()
    redis = ServiceHealth(
        status="healthy" if redis_ok else "unhealthy", response_time_ms=elapsed_ms(t0)
    )

    t0 = time.perf_counter()
    try:
        await github.check_health()
        gh = ServiceHealth(status="healthy", response_time_ms=elapsed_ms(t0))
    except GitHubApiError as e:
        log.warning("github_health_check_failed", error=e.message)
        gh = ServiceHealth(status="degraded", response_time_ms=elapsed_ms(t0), error=e.message)

    if redis.status == "unhealthy":
        overall: HealthStatus = "unhealthy"
    elif gh.status != "healthy":
        overall = "degraded"
    else:
        overall = "healthy"

    uptime = round(time.time() - request.app.state.started_at, 3)
    report = HealthCheck(
        status=overall,
        timestamp=datetime.now(timezone.utc),
        uptime=uptime,
        environment=settings.env,
        version=__version__,
        port=settings.api_port,
        timezone=settings.timezone,
        services={"redis": redis, "github": gh},
        system=SystemInfo(memory_peak_rss_mb=peak_rss_mb(), uptime=uptime),
    )
    log.info("health_check_completed", status=overall, redis=redis.status, github=gh.status)
    return success(
        request,
        message=f"System health check completed - Status: {overall}",
        data=report,
        started=started,
    )


@router.get("/visitors")
async def get_visitors(
    request: Request, cache: CacheService = Depends(cache_dep)
) -> JSONResponse:
    return success(
        request, message="Visitor count fetched", data={"total": await cache.get_visitor_count()}
    )


@router.post("/visitors")
async def record_visitor(
    request: Request, cache: CacheService = Depends(cache_dep)
) -> JSONResponse:
    return success(
        request, message="Visitor recorded", data={"total": await cache.increment_visitor_count()}
    )


# --- Module Notes -----------------------------------------------------------
# Health always answers 200; callers read `data.status` to decide.
