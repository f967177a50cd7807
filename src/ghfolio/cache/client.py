"""
ghfolio.cache.client

Async Redis client construction.

Responsibilities:
- Create the `redis.asyncio` client from settings (URL or host/port/password).
- Enable TLS without certificate verification for `rediss://` URLs.
"""

from __future__ import annotations

from redis.asyncio import Redis

from ghfolio.settings import Settings


def create_redis(settings: Settings) -> Redis:
    kwargs: dict[str, object] = {
        "decode_responses": True,
        "health_check_interval": 30,
        "socket_connect_timeout": 5,
    }
    if settings.redis_is_tls:
        # Managed Redis providers commonly present self-signed certificates.
        kwargs["ssl_cert_reqs"] = None
    return Redis.from_url(settings.redis_connection_url, **kwargs)


# --- Module Notes -----------------------------------------------------------
# The client connects lazily; startup does not fail when Redis is down, requests
# simply fall through to GitHub (see `CacheService`).
