"""
ghfolio.services.webhooks

GitHub webhook verification and cache invalidation.

Responsibilities:
- Verify `X-Hub-Signature-256` HMAC signatures over the raw request body.
- Map webhook event types to the cache keys they make stale, and drop them.
"""

from __future__ import annotations

import hashlib
import hmac
from typing import Any

from ghfolio.cache import keys
from ghfolio.cache.service import CacheService
from ghfolio.observability.logging import get_logger

log = get_logger(__name__)

# Event type → exact keys to drop. `True` in the second slot also clears the
# derived project/metrics caches.
_INVALIDATIONS: dict[str, tuple[tuple[str, ...], bool]] = {
    "push": (
        (
            keys.GITHUB_REPOSITORIES,
            keys.GITHUB_OVERVIEW,
            keys.GITHUB_STATS,
            keys.GITHUB_ACTIVITIES,
        ),
        True,
    ),
    "create": ((keys.GITHUB_REPOSITORIES, keys.GITHUB_STATS), True),
    "delete": ((keys.GITHUB_REPOSITORIES, keys.GITHUB_STATS), True),
    "watch": ((keys.GITHUB_STATS,), False),
    "fork": ((keys.GITHUB_STATS,), False),
    "issues": ((keys.GITHUB_ACTIVITIES,), False),
    "pull_request": ((keys.GITHUB_ACTIVITIES,), False),
}


def verify_webhook_signature(payload: bytes, signature: str | None, secret: str) -> bool:
    if not secret or not signature or not payload:
        log.warning("webhook_verification_missing_input")
        return False

    expected = b"sha256=" + hmac.new(secret.encode(), payload, hashlib.sha256).hexdigest().encode()
    received = signature.encode()
    if len(received) != len(expected):
        log.warning("webhook_signature_length_mismatch")
        return False

    ok = hmac.compare_digest(received, expected)
    log.info("webhook_signature_verified", match=ok)
    return ok


async def process_webhook_event(
    cache: CacheService, event_type: str, payload: dict[str, Any]
) -> list[str]:
    """
    Invalidate the cache keys affected by one webhook delivery.

    Returns the exact keys that were dropped (derived caches are cleared by
    pattern and not listed). Unknown event types are logged and ignored.
    """

    if event_type == "ping":
        log.info("webhook_ping", zen=payload.get("zen"))
        return []

    rule = _INVALIDATIONS.get(event_type)
    if rule is None:
        log.info("webhook_unhandled_event", event_type=event_type)
        return []

    stale, derived = rule
    await cache.delete(*stale)
    if derived:
        await cache.clear_project_cache()
        await cache.clear_metrics_cache()

    repository = (payload.get("repository") or {}).get("name")
    details: dict[str, Any] = {"repository": repository}
    if event_type == "push":
        details["commits"] = len(payload.get("commits") or [])
    elif event_type in ("create", "delete"):
        details["ref"] = payload.get("ref")
    elif event_type == "fork":
        details["forkee"] = (payload.get("forkee") or {}).get("name")
    else:
        details["action"] = payload.get("action")
    log.info("webhook_event_processed", event_type=event_type, invalidated=list(stale), **details)
    return list(stale)


# --- Module Notes -----------------------------------------------------------
# The signature must be computed over the exact bytes GitHub sent; the API layer
# reads `request.body()` before any JSON parsing.
