"""
ghfolio.cache.keys

Cache key and TTL catalogue.

Responsibilities:
- Name every Redis key the service reads or writes.
- Keep endpoint TTLs and sync TTLs next to the keys they apply to.
"""

from __future__ import annotations

GITHUB_PROFILE = "github:profile"
GITHUB_OVERVIEW = "github:overview"
GITHUB_ACTIVITIES = "github:activities"
GITHUB_REPOSITORIES = "github:repositories"
GITHUB_STATS = "github:stats"

PROJECTS_ALL = "projects:all"
PROJECTS_FEATURED = "projects:featured"
PROJECTS_SEARCH_PATTERN = "projects:search*"
PROJECTS_LANGUAGE_PATTERN = "projects:language*"
PROJECTS_ID_PATTERN = "projects:id*"

METRICS_PATTERN = "metrics:*"
VISITOR_TOTAL = "visitor:total"

# Endpoint TTLs (seconds).
PROFILE_TTL = 60 * 60
OVERVIEW_TTL = 60 * 60
ACTIVITIES_TTL = 10 * 60
REPOSITORIES_TTL = 60 * 60
REPOSITORY_TTL = 60 * 60
REPOSITORY_COMMITS_TTL = 15 * 60
STATS_TTL = 60 * 60
EVENTS_TTL = 10 * 60
PROJECTS_TTL = 60 * 60
METRICS_TTL = 60 * 60 * 24

# Sync writes fresher data with its own TTLs.
SYNC_PROFILE_TTL = 60 * 60
SYNC_REPOSITORIES_TTL = 30 * 60
SYNC_ACTIVITIES_TTL = 10 * 60
SYNC_STATS_TTL = 2 * 60 * 60
SYNC_OVERVIEW_TTL = 15 * 60

GITHUB_CORE_KEYS = (
    GITHUB_PROFILE,
    GITHUB_REPOSITORIES,
    GITHUB_ACTIVITIES,
    GITHUB_STATS,
    GITHUB_OVERVIEW,
)


def repository(full_name: str) -> str:
    return f"github:repository:{full_name}"


def repository_commits(full_name: str) -> str:
    return f"{repository(full_name)}:commits"


def repository_languages(full_name: str) -> str:
    return f"{repository(full_name)}:languages"


def repository_contributors(full_name: str) -> str:
    return f"{repository(full_name)}:contributors"


def events(page: int, per_page: int) -> str:
    return f"github:events:{page}:{per_page}"


def projects_by_language(language: str) -> str:
    return f"projects:language:{language.lower()}"


def projects_by_id(project_id: int) -> str:
    return f"projects:id:{project_id}"


def projects_search(query: str, category: str | None, status: str | None) -> str:
    return f"projects:search:{query.strip().lower()}:{category or '*'}:{status or '*'}"


def metrics(name: str) -> str:
    return f"metrics:{name}"


def rate_limit(bucket: str, client: str) -> str:
    return f"ratelimit:{bucket}:{client}"
