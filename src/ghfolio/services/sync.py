"""
ghfolio.services.sync

Full cache refresh from GitHub.

Responsibilities:
- Drop the cached GitHub snapshot and re-fetch it in one pass.
- Write each fresh piece under its sync TTL.
- Invalidate derived (project/metrics) caches built from the old snapshot.
"""

from __future__ import annotations

import asyncio
import time

from ghfolio.cache import keys
from ghfolio.cache.service import CacheService
from ghfolio.errors import GitHubApiError
from ghfolio.github.client import GitHubClient, calculate_stats
from ghfolio.github.models import GitHubOverview, SyncResult
from ghfolio.observability.logging import get_logger

log = get_logger(__name__)


class SyncService:
    def __init__(self, *, github: GitHubClient, cache: CacheService) -> None:
        self._github = github
        self._cache = cache

    async def sync_all_user_data(self) -> SyncResult:
        started = time.perf_counter()
        result = SyncResult()
        try:
            await self._cache.delete(*keys.GITHUB_CORE_KEYS)

            profile, repositories, activities = await asyncio.gather(
                self._github.fetch_profile(),
                self._github.fetch_all_repositories_in_batches(20, 10),
                self._github.fetch_activities(),
            )
            await self._cache.set(keys.GITHUB_PROFILE, profile, keys.SYNC_PROFILE_TTL)
            await self._cache.set(
                keys.GITHUB_REPOSITORIES, repositories, keys.SYNC_REPOSITORIES_TTL
            )
            await self._cache.set(keys.GITHUB_ACTIVITIES, activities, keys.SYNC_ACTIVITIES_TTL)

            stats = calculate_stats(repositories)
            await self._cache.set(keys.GITHUB_STATS, stats, keys.SYNC_STATS_TTL)

            overview = GitHubOverview(
                profile=profile,
                stats=stats,
                commits=await self._github.fetch_recent_commits(repositories),
                activities=activities,
            )
            await self._cache.set(keys.GITHUB_OVERVIEW, overview, keys.SYNC_OVERVIEW_TTL)

            await self._cache.clear_project_cache()
            await self._cache.clear_metrics_cache()

            result.synced_data = ["profile", "repositories", "activities", "stats", "overview"]
            result.overview = overview
        except GitHubApiError as e:
            log.error("sync_failed", error=e.message)
            result.success = False
            result.errors.append(e.message)

        result.duration_ms = int((time.perf_counter() - started) * 1000)
        log.info(
            "sync_completed",
            success=result.success,
            synced=result.synced_data,
            duration_ms=result.duration_ms,
        )
        return result


# --- Module Notes -----------------------------------------------------------
# Only GitHub failures are folded into the result; anything else is a bug and propagates
# to the API layer's generic 500 handler.
