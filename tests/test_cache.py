"""
tests.test_cache

Cache service behaviour, including degradation when Redis is unreachable.
"""

from __future__ import annotations

import pytest

from ghfolio.cache import keys
from ghfolio.cache.service import CacheService
from ghfolio.github.models import RateLimitInfo


@pytest.mark.asyncio
async def test_get_or_load_populates_then_hits(redis) -> None:
    cache = CacheService(redis)
    calls = []

    async def loader():
        calls.append(1)
        return RateLimitInfo(remaining=10, reset="2024-01-01T00:00:00Z")

    first, cached_first = await cache.get_or_load("k", 60, loader)
    second, cached_second = await cache.get_or_load("k", 60, loader)

    assert (cached_first, cached_second) == (False, True)
    assert first == second == {"remaining": 10, "reset": "2024-01-01T00:00:00Z"}
    assert len(calls) == 1
    assert 0 < await redis.ttl("k") <= 60


@pytest.mark.asyncio
async def test_loader_errors_are_not_cached(redis) -> None:
    cache = CacheService(redis)

    async def loader():
        raise RuntimeError("upstream down")

    with pytest.raises(RuntimeError):
        await cache.get_or_load("k", 60, loader)
    assert await redis.exists("k") == 0


@pytest.mark.asyncio
async def test_unreachable_redis_degrades_to_pass_through(redis_server, redis) -> None:
    redis_server.connected = False
    cache = CacheService(redis)

    async def loader():
        return [1, 2, 3]

    assert await cache.get("k") is None
    assert await cache.set("k", 1) is False
    assert await cache.increment("counter") == 0
    assert await cache.increment_window("counter", 60) == (0, 0)
    assert await cache.is_healthy() is False
    assert await cache.get_or_load("k", 60, loader) == ([1, 2, 3], False)


@pytest.mark.asyncio
async def test_increment_window_rearms_a_missing_expiry(redis) -> None:
    cache = CacheService(redis)
    await redis.set("hits", 4)

    count, seconds_left = await cache.increment_window("hits", 60)

    assert count == 5
    assert 0 < seconds_left <= 60

    # An existing expiry is kept, not pushed back.
    assert await cache.expire("hits", 10) is True
    assert (await cache.increment_window("hits", 60))[1] <= 10


@pytest.mark.asyncio
async def test_clear_project_and_metrics_caches(redis) -> None:
    cache = CacheService(redis)
    for key in (
        keys.PROJECTS_ALL,
        keys.PROJECTS_FEATURED,
        keys.projects_by_id(1),
        keys.projects_by_language("Python"),
        keys.projects_search("api", None, None),
        keys.metrics("languages"),
        keys.metrics("activity:recent"),
        keys.GITHUB_PROFILE,
    ):
        await cache.set(key, {"x": 1})

    await cache.clear_project_cache()
    assert await cache.clear_metrics_cache() == 2

    assert sorted(await cache.keys("*")) == [keys.GITHUB_PROFILE]


@pytest.mark.asyncio
async def test_visitor_counter(redis) -> None:
    cache = CacheService(redis)

    assert await cache.get_visitor_count() == 0
    await cache.increment_visitor_count()
    assert await cache.increment_visitor_count() == 2
    assert await cache.get_visitor_count() == 2


def test_project_language_keys_are_case_insensitive() -> None:
    assert keys.projects_by_language("Python") == keys.projects_by_language("python")
