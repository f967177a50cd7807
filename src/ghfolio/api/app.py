"""
ghfolio.api.app

FastAPI app factory for the ghfolio service.

Responsibilities:
- Build the FastAPI application and register routers, middleware and exception handlers.
- Open and close the shared Redis and GitHub HTTP clients around the app's lifetime.
- Provide a single composition root where cross-cutting concerns live.
"""

from __future__ import annotations

import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from redis.asyncio import Redis

from ghfolio import __version__
from ghfolio.api.errors import register_exception_handlers
from ghfolio.api.routers.github import router as github_router
from ghfolio.api.routers.health import router as health_router
from ghfolio.api.routers.metrics import router as metrics_router
from ghfolio.api.routers.projects import router as projects_router
from ghfolio.api.routers.system import router as system_router
from ghfolio.cache.client import create_redis
from ghfolio.cache.service import CacheService
from ghfolio.github.client import GitHubClient, create_http_client
from ghfolio.observability.logging import configure_logging, get_logger
from ghfolio.observability.middleware import RequestContextMiddleware
from ghfolio.settings import Settings

log = get_logger(__name__)


def create_app(
    *,
    settings: Settings,
    redis: Redis | None = None,
    github_transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    # Configure structured logging once at process startup (before app serves requests).
    configure_logging(service_name=settings.service_name, level=settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        log.info("startup", env=settings.env, github_user=settings.github_username)
        # Shared clients live on app.state; routers reach them via `ghfolio.api.deps`.
        owns_redis = redis is None
        client = create_redis(settings) if owns_redis else redis
        http = create_http_client(settings, transport=github_transport)
        app.state.cache = CacheService(client)
        app.state.github = GitHubClient(settings=settings, http=http)
        app.state.started_at = time.time()
        if not await app.state.cache.is_healthy():
            log.warning("cache_unavailable_at_startup")
        try:
            yield
        finally:
            await http.aclose()
            if owns_redis:
                await client.aclose()
            log.info("shutdown")

    app = FastAPI(
        title="ghfolio",
        version=__version__,
        docs_url="/docs",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(RequestContextMiddleware, memory_warning_mb=settings.memory_warning_mb)
    register_exception_handlers(app)
    app.include_router(health_router, tags=["health"])
    app.include_router(system_router)
    app.include_router(github_router)
    app.include_router(projects_router)
    app.include_router(metrics_router)
    return app


# --- Module Notes -----------------------------------------------------------
# Tests pass a `fakeredis` client and an `httpx.MockTransport`; an injected Redis client
# belongs to the caller and is not closed here.
