"""
ghfolio.api.routers.github

Cached GitHub proxy endpoints, manual sync and the webhook receiver.

Responsibilities:
- Serve profile, repository, commit, language, contributor and event data
  through the cache-aside helper.
- Trigger a full cache refresh (`POST /github/sync`).
- Accept signed GitHub webhooks and invalidate affected cache keys.
"""

from __future__ import annotations

import json
import time
from datetime import datetime, timezone
from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query, Request
from fastapi.responses import JSONResponse
from starlette.status import HTTP_400_BAD_REQUEST, HTTP_500_INTERNAL_SERVER_ERROR

from ghfolio.api.cached import serve_cached
from ghfolio.api.deps import cache_dep, github_dep, settings_dep, sync_service_dep
from ghfolio.api.errors import ApiError
from ghfolio.api.rate_limit import rate_limit
from ghfolio.api.responses import success
from ghfolio.cache import keys
from ghfolio.cache.service import CacheService
from ghfolio.errors import WebhookSignatureError
from ghfolio.github.client import GitHubClient, calculate_stats
from ghfolio.github.models import ActivityFeed
from ghfolio.observability.logging import get_logger
from ghfolio.services.sync import SyncService
from ghfolio.services.webhooks import process_webhook_event, verify_webhook_signature
from ghfolio.settings import Settings

log = get_logger(__name__)

router = APIRouter(prefix="/github", tags=["github"])

_limited = [Depends(rate_limit("api"))]

RepoName = Annotated[str, Path(pattern=r"^[A-Za-z0-9._-]{1,100}$")]


@router.get("/profile", dependencies=_limited)
async def get_profile(
    request: Request,
    cache: CacheService = Depends(cache_dep),
    github: GitHubClient = Depends(github_dep),
) -> JSONResponse:
    return await serve_cached(
        request,
        cache=cache,
        key=keys.GITHUB_PROFILE,
        ttl=keys.PROFILE_TTL,
        loader=github.fetch_profile,
        resource="github profile",
        github=github,
    )


@router.get("/overview", dependencies=_limited)
async def get_overview(
    request: Request,
    cache: CacheService = Depends(cache_dep),
    github: GitHubClient = Depends(github_dep),
) -> JSONResponse:
    return await serve_cached(
        request,
        cache=cache,
        key=keys.GITHUB_OVERVIEW,
        ttl=keys.OVERVIEW_TTL,
        loader=github.get_overview,
        resource="github overview",
        github=github,
    )


@router.get("/activities", dependencies=_limited)
async def get_activities(
    request: Request,
    cache: CacheService = Depends(cache_dep),
    github: GitHubClient = Depends(github_dep),
) -> JSONResponse:
    # The cache holds the bare list, the same shape sync writes.
    def feed(activities: list) -> ActivityFeed:
        return ActivityFeed(
            activities=activities,
            total_count=len(activities),
            last_updated=datetime.now(timezone.utc),
        )

    return await serve_cached(
        request,
        cache=cache,
        key=keys.GITHUB_ACTIVITIES,
        ttl=keys.ACTIVITIES_TTL,
        loader=github.fetch_activities,
        resource="github activities",
        github=github,
        present=feed,
    )


@router.get("/repositories", dependencies=_limited)
async def get_repositories(
    request: Request,
    cache: CacheService = Depends(cache_dep),
    github: GitHubClient = Depends(github_dep),
) -> JSONResponse:
    return await serve_cached(
        request,
        cache=cache,
        key=keys.GITHUB_REPOSITORIES,
        ttl=keys.REPOSITORIES_TTL,
        loader=github.fetch_repositories,
        resource="github repositories",
        github=github,
    )


@router.get("/stats", dependencies=_limited)
async def get_stats(
    request: Request,
    cache: CacheService = Depends(cache_dep),
    github: GitHubClient = Depends(github_dep),
) -> JSONResponse:
    async def load():
        return calculate_stats(await github.fetch_repositories())

    return await serve_cached(
        request,
        cache=cache,
        key=keys.GITHUB_STATS,
        ttl=keys.STATS_TTL,
        loader=load,
        resource="github stats",
        github=github,
    )


@router.get("/events", dependencies=_limited)
async def get_events(
    request: Request,
    page: int = Query(1, ge=1),
    per_page: int = Query(30, ge=1, le=100),
    cache: CacheService = Depends(cache_dep),
    github: GitHubClient = Depends(github_dep),
) -> JSONResponse:
    async def load():
        return await github.fetch_events(page=page, per_page=per_page)

    return await serve_cached(
        request,
        cache=cache,
        key=keys.events(page, per_page),
        ttl=keys.EVENTS_TTL,
        loader=load,
        resource="github events",
        github=github,
    )


@router.get("/repository/{name}", dependencies=_limited)
async def get_repository(
    request: Request,
    name: RepoName,
    cache: CacheService = Depends(cache_dep),
    github: GitHubClient = Depends(github_dep),
) -> JSONResponse:
    full_name = github.full_name(name)

    async def load():
        return await github.fetch_repository_by_name(full_name)

    return await serve_cached(
        request,
        cache=cache,
        key=keys.repository(full_name),
        ttl=keys.REPOSITORY_TTL,
        loader=load,
        resource="repository",
        github=github,
    )


@router.get("/repository/{name}/commits", dependencies=_limited)
async def get_repository_commits(
    request: Request,
    name: RepoName,
    cache: CacheService = Depends(cache_dep),
    github: GitHubClient = Depends(github_dep),
) -> JSONResponse:
    full_name = github.full_name(name)

    async def load():
        return await github.fetch_commits(full_name)

    return await serve_cached(
        request,
        cache=cache,
        key=keys.repository_commits(full_name),
        ttl=keys.REPOSITORY_COMMITS_TTL,
        loader=load,
        resource="repository commits",
        github=github,
    )


@router.get("/repository/{name}/languages", dependencies=_limited)
async def get_repository_languages(
    request: Request,
    name: RepoName,
    cache: CacheService = Depends(cache_dep),
    github: GitHubClient = Depends(github_dep),
) -> JSONResponse:
    full_name = github.full_name(name)

    async def load():
        return await github.fetch_repository_languages(full_name)

    return await serve_cached(
        request,
        cache=cache,
        key=keys.repository_languages(full_name),
        ttl=keys.REPOSITORY_TTL,
        loader=load,
        resource="repository languages",
        github=github,
    )


@router.get("/repository/{name}/contributors", dependencies=_limited)
async def get_repository_contributors(
    request: Request,
    name: RepoName,
    cache: CacheService = Depends(cache_dep),
    github: GitHubClient = Depends(github_dep),
) -> JSONResponse:
    full_name = github.full_name(name)

    async def load():
        return await github.fetch_contributors(full_name)

    return await serve_cached(
        request,
        cache=cache,
        key=keys.repository_contributors(full_name),
        ttl=keys.REPOSITORY_TTL,
        loader=load,
        resource="repository contributors",
        github=github,
    )


@router.post("/sync", dependencies=_limited)
async def sync(
    request: Request, service: SyncService = Depends(sync_service_dep)
) -> JSONResponse:
    started = time.perf_counter()
    result = await service.sync_all_user_data()
    if not result.success:
        raise ApiError(
            HTTP_500_INTERNAL_SERVER_ERROR,
            "Failed to sync github data",
            api_error="; ".join(result.errors) or None,
        )
    return success(
        request,
        message="Github data synced successfully",
        data=result,
        cached=False,
        started=started,
    )


@router.post(
    "/webhook",
    dependencies=[
        Depends(
            rate_limit("webhook", max_requests_setting="webhook_rate_limit_max_requests")
        )
    ],
)
async def webhook(
    request: Request,
    cache: CacheService = Depends(cache_dep),
    settings: Settings = Depends(settings_dep),
) -> JSONResponse:
    started = time.perf_counter()
    body = await request.body()
    signature = request.headers.get("x-hub-signature-256")
    event = request.headers.get("x-github-event")
    delivery = request.headers.get("x-github-delivery")

    if not verify_webhook_signature(body, signature, settings.github_webhook_secret):
        raise WebhookSignatureError("Invalid webhook signature")
    if not event:
        raise ApiError(HTTP_400_BAD_REQUEST, "Missing X-GitHub-Event header")
    try:
        payload = json.loads(body)
    except ValueError as e:
        raise ApiError(HTTP_400_BAD_REQUEST, "Invalid webhook payload", api_error=str(e)) from e
    if not isinstance(payload, dict):
        raise ApiError(HTTP_400_BAD_REQUEST, "Invalid webhook payload")

    log.info("webhook_received", event_type=event, delivery=delivery)
    invalidated = await process_webhook_event(cache, event, payload)
    return success(
        request,
        message="Webhook processed successfully",
        data={"event": event, "delivery": delivery, "invalidated": invalidated},
        started=started,
    )


# --- Module Notes -----------------------------------------------------------
# Repository routes take the bare repository name and always resolve it under the
# configured user; `owner/name` paths are not accepted.
