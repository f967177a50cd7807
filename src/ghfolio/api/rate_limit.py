"""
ghfolio.api.rate_limit

Fixed-window request limiter backed by the Redis cache.

Responsibilities:
- Count requests per (bucket, client IP) within a time window.
- Reject callers over the limit with `RateLimitExceeded` (rendered as 429).
"""

from __future__ import annotations

from fastapi import Depends, Request

from ghfolio.api.deps import cache_dep, settings_dep
from ghfolio.api.errors import RateLimitExceeded
from ghfolio.cache import keys
from ghfolio.cache.service import CacheService
from ghfolio.settings import Settings


def rate_limit(bucket: str, *, max_requests_setting: str = "rate_limit_max_requests"):
    async def _dep(
        request: Request,
        cache: CacheService = Depends(cache_dep),
        settings: Settings = Depends(settings_dep),
    ) -> None:
        client = request.client.host if request.client else "unknown"
        key = keys.rate_limit(bucket, client)
        window = settings.rate_limit_window_seconds

        count, seconds_left = await cache.increment_window(key, window)
        # count == 0 means the cache is down; let the request through.
        if count > int(getattr(settings, max_requests_setting)):
            raise RateLimitExceeded(retry_after=seconds_left if seconds_left > 0 else window)

    return _dep


# --- Module Notes -----------------------------------------------------------
# Attach with `dependencies=[Depends(rate_limit("github"))]` on a router or route.
