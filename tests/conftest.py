"""
tests.conftest

Shared fixtures: an in-memory Redis, a scripted GitHub API and an in-process app client.

Responsibilities:
- Provide a fresh fake GitHub API, in-memory Redis and test settings per test.
- Build the app against fakeredis + the fake GitHub with its lifespan entered.
"""

from __future__ import annotations

from collections.abc import AsyncIterator

import fakeredis
import httpx
import pytest
import pytest_asyncio

from ghfolio.api.app import create_app
from ghfolio.settings import Settings
from tests.fakes import FakeGitHub, make_settings


@pytest.fixture
def github_api() -> FakeGitHub:
    return FakeGitHub()


@pytest.fixture
def redis_server() -> fakeredis.FakeServer:
    return fakeredis.FakeServer()


@pytest.fixture
def redis(redis_server: fakeredis.FakeServer) -> fakeredis.FakeAsyncRedis:
    return fakeredis.FakeAsyncRedis(server=redis_server, decode_responses=True)


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest_asyncio.fixture
async def client(
    settings: Settings, redis: fakeredis.FakeAsyncRedis, github_api: FakeGitHub
) -> AsyncIterator[httpx.AsyncClient]:
    app = create_app(
        settings=settings, redis=redis, github_transport=httpx.MockTransport(github_api)
    )
    # httpx's ASGITransport does not run the lifespan; enter it explicitly.
    async with app.router.lifespan_context(app):
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
            yield c


# --- Module Notes -----------------------------------------------------------
# Settings are built explicitly so no test depends on GHFOLIO_* environment variables.
