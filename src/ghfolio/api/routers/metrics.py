"""
ghfolio.api.routers.metrics

Portfolio metrics endpoints, cached for a day.

Responsibilities:
- Expose every derived metric (languages, activity, commits, repositories,
  contributions, productivity, technologies, streak, timeline, summary).
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse

from ghfolio.api.cached import serve_cached
from ghfolio.api.deps import cache_dep, metrics_service_dep
from ghfolio.api.rate_limit import rate_limit
from ghfolio.cache import keys
from ghfolio.cache.service import CacheService
from ghfolio.services.metrics import MetricsService

router = APIRouter(
    prefix="/metrics", tags=["metrics"], dependencies=[Depends(rate_limit("api"))]
)


async def _serve(
    request: Request,
    cache: CacheService,
    name: str,
    loader: Callable[[], Awaitable[Any]],
    resource: str,
) -> JSONResponse:
    return await serve_cached(
        request,
        cache=cache,
        key=keys.metrics(name),
        ttl=keys.METRICS_TTL,
        loader=loader,
        resource=resource,
    )


@router.get("/languages")
async def languages(
    request: Request,
    cache: CacheService = Depends(cache_dep),
    service: MetricsService = Depends(metrics_service_dep),
) -> JSONResponse:
    return await _serve(request, cache, "languages", service.get_languages, "language metrics")


@router.get("/activity")
async def activity(
    request: Request,
    activity_type: str = Query("recent", alias="type"),
    cache: CacheService = Depends(cache_dep),
    service: MetricsService = Depends(metrics_service_dep),
) -> JSONResponse:
    async def load():
        return await service.get_activity(activity_type)

    return await _serve(
        request, cache, f"activity:{activity_type}", load, f"{activity_type} activity metrics"
    )


@router.get("/commits")
async def commits(
    request: Request,
    cache: CacheService = Depends(cache_dep),
    service: MetricsService = Depends(metrics_service_dep),
) -> JSONResponse:
    return await _serve(request, cache, "commits", service.get_commit_activity, "commit metrics")


@router.get("/repositories")
async def repositories(
    request: Request,
    cache: CacheService = Depends(cache_dep),
    service: MetricsService = Depends(metrics_service_dep),
) -> JSONResponse:
    return await _serve(
        request, cache, "repositories", service.get_repositories_metrics, "repository metrics"
    )


@router.get("/contributions")
async def contributions(
    request: Request,
    cache: CacheService = Depends(cache_dep),
    service: MetricsService = Depends(metrics_service_dep),
) -> JSONResponse:
    return await _serve(
        request,
        cache,
        "contributions",
        service.get_contributions_metrics,
        "contribution metrics",
    )


@router.get("/productivity")
async def productivity(
    request: Request,
    cache: CacheService = Depends(cache_dep),
    service: MetricsService = Depends(metrics_service_dep),
) -> JSONResponse:
    return await _serve(
        request, cache, "productivity", service.get_productivity_metrics, "productivity metrics"
    )


@router.get("/technologies")
async def technologies(
    request: Request,
    cache: CacheService = Depends(cache_dep),
    service: MetricsService = Depends(metrics_service_dep),
) -> JSONResponse:
    return await _serve(
        request, cache, "technologies", service.get_technologies_metrics, "technology metrics"
    )


@router.get("/streak")
async def streak(
    request: Request,
    cache: CacheService = Depends(cache_dep),
    service: MetricsService = Depends(metrics_service_dep),
) -> JSONResponse:
    return await _serve(request, cache, "streak", service.get_streak_metrics, "streak metrics")


@router.get("/summary")
async def summary(
    request: Request,
    cache: CacheService = Depends(cache_dep),
    service: MetricsService = Depends(metrics_service_dep),
) -> JSONResponse:
    return await _serve(request, cache, "summary", service.get_metrics_summary, "metrics summary")


@router.get("/timeline")
async def timeline(
    request: Request,
    cache: CacheService = Depends(cache_dep),
    service: MetricsService = Depends(metrics_service_dep),
) -> JSONResponse:
    return await _serve(
        request, cache, "timeline", service.get_timeline_metrics, "timeline metrics"
    )


# --- Module Notes -----------------------------------------------------------
# Metrics are derived from many GitHub calls, so responses carry no per-request
# rate-limit snapshot; an unknown `type` is rejected before any GitHub call.
