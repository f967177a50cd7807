"""
ghfolio.api.routers.projects

Portfolio project endpoints (classified repositories).

Responsibilities:
- List all / featured projects, projects by language and search results.
- Look up one project by GitHub repository id.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse

from ghfolio.api.cached import serve_cached
from ghfolio.api.deps import cache_dep, github_dep, project_service_dep
from ghfolio.api.rate_limit import rate_limit
from ghfolio.cache import keys
from ghfolio.cache.service import CacheService
from ghfolio.github.client import GitHubClient
from ghfolio.services.models import ProjectCategory, ProjectStatus
from ghfolio.services.projects import ProjectService

router = APIRouter(
    prefix="/projects", tags=["projects"], dependencies=[Depends(rate_limit("api"))]
)


@router.get("/all-projects")
async def get_projects(
    request: Request,
    cache: CacheService = Depends(cache_dep),
    github: GitHubClient = Depends(github_dep),
    service: ProjectService = Depends(project_service_dep),
) -> JSONResponse:
    return await serve_cached(
        request,
        cache=cache,
        key=keys.PROJECTS_ALL,
        ttl=keys.PROJECTS_TTL,
        loader=service.get_all_projects,
        resource="projects",
        github=github,
    )


@router.get("/featured")
async def get_featured_projects(
    request: Request,
    cache: CacheService = Depends(cache_dep),
    github: GitHubClient = Depends(github_dep),
    service: ProjectService = Depends(project_service_dep),
) -> JSONResponse:
    return await serve_cached(
        request,
        cache=cache,
        key=keys.PROJECTS_FEATURED,
        ttl=keys.PROJECTS_TTL,
        loader=service.get_featured_projects,
        resource="featured projects",
        github=github,
    )


@router.get("/by-language/{language}")
async def get_projects_by_language(
    request: Request,
    language: str,
    cache: CacheService = Depends(cache_dep),
    github: GitHubClient = Depends(github_dep),
    service: ProjectService = Depends(project_service_dep),
) -> JSONResponse:
    async def load():
        return await service.get_projects_by_language(language)

    return await serve_cached(
        request,
        cache=cache,
        key=keys.projects_by_language(language),
        ttl=keys.PROJECTS_TTL,
        loader=load,
        resource=f"{language} projects",
        github=github,
    )


@router.get("/search")
async def search_projects(
    request: Request,
    q: str = Query("", max_length=100),
    category: ProjectCategory | None = None,
    status: ProjectStatus | None = None,
    cache: CacheService = Depends(cache_dep),
    github: GitHubClient = Depends(github_dep),
    service: ProjectService = Depends(project_service_dep),
) -> JSONResponse:
    async def load():
        return await service.search_projects(q, category=category, status=status)

    return await serve_cached(
        request,
        cache=cache,
        key=keys.projects_search(q, category, status),
        ttl=keys.PROJECTS_TTL,
        loader=load,
        resource="project search results",
        github=github,
    )


@router.get("/{project_id}")
async def get_project_by_id(
    request: Request,
    project_id: int,
    cache: CacheService = Depends(cache_dep),
    github: GitHubClient = Depends(github_dep),
    service: ProjectService = Depends(project_service_dep),
) -> JSONResponse:
    async def load():
        return await service.get_project_by_id(project_id)

    return await serve_cached(
        request,
        cache=cache,
        key=keys.projects_by_id(project_id),
        ttl=keys.PROJECTS_TTL,
        loader=load,
        resource="project",
        github=github,
    )


# --- Module Notes -----------------------------------------------------------
# `/{project_id}` is declared last so the literal paths above win the match.
# An empty search query matches every project (optionally narrowed by category/status).
