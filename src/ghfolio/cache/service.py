"""
ghfolio.cache.service

JSON cache facade over Redis.

Responsibilities:
- Get/set JSON values with TTLs, delete keys and key patterns.
- Provide the cache-aside primitive (`get_or_load`) shared by all endpoints.
- Degrade to pass-through when Redis is unreachable (log, never raise).
"""

from __future__ import annotations

import json
from collections.abc import Awaitable, Callable
from typing import Any

from pydantic import TypeAdapter
from redis.asyncio import Redis
from redis.exceptions import RedisError

from ghfolio.cache import keys
from ghfolio.observability.logging import get_logger

log = get_logger(__name__)

_jsonable = TypeAdapter(Any)

# Redis client errors surface as RedisError; raw socket failures as OSError.
_CACHE_ERRORS = (RedisError, OSError)


def to_jsonable(value: Any) -> Any:
    # Pydantic models, datetimes and nested containers collapse to JSON-native values.
    return _jsonable.dump_python(value, mode="json")


class CacheService:
    def __init__(self, client: Redis) -> None:
        self._client = client

    async def get(self, key: str) -> Any | None:
        try:
            raw = await self._client.get(key)
        except _CACHE_ERRORS as e:
            log.error("cache_get_failed", key=key, error=str(e))
            return None
        if raw is None:
            log.info("cache_miss", key=key)
            return None
        try:
            value = json.loads(raw)
        except ValueError as e:
            log.warning("cache_decode_failed", key=key, error=str(e))
            return None
        log.info("cache_hit", key=key)
        return value

    async def set(self, key: str, value: Any, ttl: int = 3600) -> bool:
        try:
            await self._client.setex(key, ttl, json.dumps(to_jsonable(value)))
        except _CACHE_ERRORS as e:
            log.error("cache_set_failed", key=key, error=str(e))
            return False
        log.info("cache_set", key=key, ttl=ttl)
        return True

    async def delete(self, *cache_keys: str) -> bool:
        if not cache_keys:
            return True
        try:
            await self._client.delete(*cache_keys)
        except _CACHE_ERRORS as e:
            log.error("cache_delete_failed", keys=list(cache_keys), error=str(e))
            return False
        log.info("cache_delete", keys=list(cache_keys))
        return True

    async def keys(self, pattern: str) -> list[str]:
        # SCAN instead of KEYS so large keyspaces do not block the server.
        try:
            return [k async for k in self._client.scan_iter(match=pattern, count=200)]
        except _CACHE_ERRORS as e:
            log.error("cache_keys_failed", pattern=pattern, error=str(e))
            return []

    async def delete_pattern(self, pattern: str) -> int:
        matched = await self.keys(pattern)
        if matched and await self.delete(*matched):
            return len(matched)
        return 0

    async def increment(self, key: str, amount: int = 1) -> int:
        try:
            result = await self._client.incrby(key, amount)
        except _CACHE_ERRORS as e:
            log.error("cache_increment_failed", key=key, error=str(e))
            return 0
        return int(result)

    async def expire(self, key: str, ttl: int) -> bool:
        try:
            return bool(await self._client.expire(key, ttl))
        except _CACHE_ERRORS as e:
            log.error("cache_expire_failed", key=key, error=str(e))
            return False

    async def increment_window(self, key: str, window: int) -> tuple[int, int]:
        """
        Count a hit in a fixed window and return `(count, seconds_left)`.

        The expiry is re-armed with NX on every hit, so a counter left without a TTL
        heals on the next request. `(0, 0)` means the cache is unreachable.
        """

        try:
            async with self._client.pipeline(transaction=True) as pipe:
                pipe.incr(key)
                pipe.expire(key, window, nx=True)
                pipe.ttl(key)
                count, _, ttl = await pipe.execute()
        except _CACHE_ERRORS as e:
            log.error("cache_increment_failed", key=key, error=str(e))
            return 0, 0
        return int(count), int(ttl)

    async def is_healthy(self) -> bool:
        try:
            return bool(await self._client.ping())
        except _CACHE_ERRORS as e:
            log.error("cache_health_check_failed", error=str(e))
            return False

    async def info(self) -> dict[str, Any] | None:
        try:
            return dict(await self._client.info())
        except _CACHE_ERRORS as e:
            log.error("cache_info_failed", error=str(e))
            return None

    async def get_or_load(
        self,
        key: str,
        ttl: int,
        loader: Callable[[], Awaitable[Any]],
    ) -> tuple[Any, bool]:
        """
        Cache-aside read.

        Returns `(value, cached)`. On a miss the loader runs, its result is stored
        as JSON under `key` for `ttl` seconds and returned in JSON-native form so
        hits and misses have the same shape. Loader exceptions propagate; nothing
        is cached for them.
        """

        cached = await self.get(key)
        if cached is not None:
            return cached, True
        value = to_jsonable(await loader())
        await self.set(key, value, ttl)
        return value, False

    async def clear_project_cache(self) -> bool:
        ok = await self.delete(keys.PROJECTS_ALL, keys.PROJECTS_FEATURED)
        for pattern in (
            keys.PROJECTS_SEARCH_PATTERN,
            keys.PROJECTS_LANGUAGE_PATTERN,
            keys.PROJECTS_ID_PATTERN,
        ):
            await self.delete_pattern(pattern)
        log.info("project_cache_cleared")
        return ok

    async def clear_metrics_cache(self) -> int:
        removed = await self.delete_pattern(keys.METRICS_PATTERN)
        log.info("metrics_cache_cleared", removed=removed)
        return removed

    async def increment_visitor_count(self) -> int:
        return await self.increment(keys.VISITOR_TOTAL)

    async def get_visitor_count(self) -> int:
        # INCRBY stores a bare integer, which is also valid JSON.
        count = await self.get(keys.VISITOR_TOTAL)
        return int(count) if count else 0


# --- Module Notes -----------------------------------------------------------
# Every method swallows backend errors after logging them: an unavailable cache must
# never turn into a failed request, only into extra GitHub calls.
