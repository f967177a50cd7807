"""
tests.test_webhooks

Webhook signature verification and per-event cache invalidation.
"""

from __future__ import annotations

import hashlib
import hmac

import pytest

from ghfolio.cache import keys
from ghfolio.cache.service import CacheService
from ghfolio.services.webhooks import process_webhook_event, verify_webhook_signature

SECRET = "s3cret"
BODY = b'{"zen": "Keep it logically awesome."}'


def sign(body: bytes, secret: str = SECRET) -> str:
    return "sha256=" + hmac.new(secret.encode(), body, hashlib.sha256).hexdigest()


def test_valid_signature() -> None:
    assert verify_webhook_signature(BODY, sign(BODY), SECRET)


@pytest.mark.parametrize(
    "signature",
    [
        None,
        "",
        "sha256=deadbeef",
        sign(BODY, "other-secret"),
        sign(BODY + b" "),
        sign(BODY).replace("sha256=", "sha1="),
    ],
)
def test_invalid_signatures(signature) -> None:
    assert not verify_webhook_signature(BODY, signature, SECRET)


def test_missing_secret_or_body_never_verifies() -> None:
    assert not verify_webhook_signature(BODY, sign(BODY, ""), "")
    assert not verify_webhook_signature(b"", sign(b""), SECRET)


async def _seed(cache: CacheService) -> None:
    for key in (*keys.GITHUB_CORE_KEYS, keys.PROJECTS_ALL, keys.metrics("summary")):
        await cache.set(key, {"stale": True})


@pytest.mark.asyncio
async def test_push_invalidates_snapshot_and_derived_caches(redis) -> None:
    cache = CacheService(redis)
    await _seed(cache)

    dropped = await process_webhook_event(
        cache, "push", {"repository": {"name": "portfolio"}, "commits": [{}, {}]}
    )

    assert set(dropped) == {
        keys.GITHUB_REPOSITORIES,
        keys.GITHUB_OVERVIEW,
        keys.GITHUB_STATS,
        keys.GITHUB_ACTIVITIES,
    }
    assert await cache.keys("*") == [keys.GITHUB_PROFILE]


@pytest.mark.asyncio
async def test_star_only_invalidates_stats(redis) -> None:
    cache = CacheService(redis)
    await _seed(cache)

    assert await process_webhook_event(cache, "watch", {"action": "started"}) == [
        keys.GITHUB_STATS
    ]
    assert await cache.get(keys.GITHUB_STATS) is None
    assert await cache.get(keys.PROJECTS_ALL) == {"stale": True}


@pytest.mark.asyncio
async def test_issue_events_invalidate_activities(redis) -> None:
    cache = CacheService(redis)
    await _seed(cache)

    assert await process_webhook_event(cache, "issues", {"action": "opened"}) == [
        keys.GITHUB_ACTIVITIES
    ]


@pytest.mark.asyncio
@pytest.mark.parametrize("event", ["ping", "gollum"])
async def test_ping_and_unknown_events_change_nothing(redis, event) -> None:
    cache = CacheService(redis)
    await _seed(cache)

    assert await process_webhook_event(cache, event, {"zen": "hi"}) == []
    assert len(await cache.keys("*")) == len(keys.GITHUB_CORE_KEYS) + 2
