"""
ghfolio.api.deps

FastAPI dependency wiring for the API layer.

Responsibilities:
- Expose settings and the shared cache/GitHub clients stored on `app.state`.
- Build request-scoped services from those shared clients.
"""

from __future__ import annotations

from fastapi import Depends, Request

from ghfolio.cache.service import CacheService
from ghfolio.github.client import GitHubClient
from ghfolio.services.metrics import MetricsService
from ghfolio.services.projects import ProjectService
from ghfolio.services.sync import SyncService
from ghfolio.settings import Settings


def settings_dep(request: Request) -> Settings:
    return request.app.state.settings  # type: ignore[attr-defined]


def cache_dep(request: Request) -> CacheService:
    # Created in the app lifespan (see `ghfolio.api.app.create_app`).
    return request.app.state.cache  # type: ignore[attr-defined]


def github_dep(request: Request) -> GitHubClient:
    return request.app.state.github  # type: ignore[attr-defined]


def project_service_dep(github: GitHubClient = Depends(github_dep)) -> ProjectService:
    return ProjectService(github=github)


def metrics_service_dep(
    projects: ProjectService = Depends(project_service_dep),
    github: GitHubClient = Depends(github_dep),
) -> MetricsService:
    return MetricsService(projects=projects, github=github)


def sync_service_dep(
    github: GitHubClient = Depends(github_dep),
    cache: CacheService = Depends(cache_dep),
) -> SyncService:
    return SyncService(github=github, cache=cache)


# --- Module Notes -----------------------------------------------------------
# Services are cheap wrappers; only the Redis and httpx clients are process-wide.
