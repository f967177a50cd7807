"""
ghfolio.github.models

DTOs for the GitHub data the service fetches, caches and serves.

Responsibilities:
- Validate/normalize raw GitHub JSON into stable shapes.
- Define the composite payloads served by `/github/*` (stats, overview, feeds).
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class GitHubProfile(BaseModel):
    login: str
    name: str | None = None
    bio: str | None = None
    avatar_url: str = ""
    html_url: str | None = None
    location: str | None = None
    email: str | None = None
    company: str | None = None
    blog: str | None = None
    twitter_username: str | None = None
    public_repos: int = 0
    public_gists: int = 0
    followers: int = 0
    following: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None


class GitHubRepository(BaseModel):
    id: int
    name: str
    full_name: str = ""
    description: str | None = None
    html_url: str = ""
    homepage: str | None = None
    language: str | None = None
    stargazers_count: int = 0
    forks_count: int = 0
    watchers_count: int = 0
    open_issues_count: int = 0
    size: int = 0
    topics: list[str] = Field(default_factory=list)
    private: bool = False
    fork: bool = False
    archived: bool = False
    has_pages: bool = False
    default_branch: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    pushed_at: datetime | None = None


class GitHubCommit(BaseModel):
    sha: str
    message: str = ""
    author_name: str | None = None
    author_login: str | None = None
    date: datetime | None = None
    html_url: str = ""
    repository: str = ""

    @classmethod
    def from_api(cls, raw: dict[str, Any], *, repository: str) -> GitHubCommit:
        commit = raw.get("commit") or {}
        author = commit.get("author") or {}
        committer = commit.get("committer") or {}
        return cls(
            sha=str(raw.get("sha", "")),
            message=str(commit.get("message", "")),
            author_name=author.get("name"),
            author_login=(raw.get("author") or {}).get("login"),
            date=author.get("date") or committer.get("date"),
            html_url=str(raw.get("html_url", "")),
            repository=repository,
        )


class GitHubContributor(BaseModel):
    login: str
    avatar_url: str = ""
    html_url: str = ""
    contributions: int = 0


class GitHubEvent(BaseModel):
    id: str
    type: str
    actor: str | None = None
    repo: str | None = None
    public: bool = True
    created_at: datetime | None = None
    payload: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_api(cls, raw: dict[str, Any]) -> GitHubEvent:
        return cls(
            id=str(raw.get("id", "")),
            type=str(raw.get("type", "UnknownEvent")),
            actor=(raw.get("actor") or {}).get("login"),
            repo=(raw.get("repo") or {}).get("name"),
            public=bool(raw.get("public", True)),
            created_at=raw.get("created_at"),
            payload=dict(raw.get("payload") or {}),
        )


class GitHubActivity(BaseModel):
    id: str
    type: str
    repo: str | None = None
    description: str
    created_at: datetime | None = None
    url: str | None = None


class ActivityFeed(BaseModel):
    activities: list[GitHubActivity]
    total_count: int
    last_updated: datetime


class RepositoryLanguages(BaseModel):
    repository: str
    languages: dict[str, int]
    percentages: dict[str, float]
    primary_language: str | None = None


class RateLimitInfo(BaseModel):
    remaining: int
    reset: datetime


class GitHubStats(BaseModel):
    total_repositories: int = 0
    original_repositories: int = 0
    forked_repositories: int = 0
    total_stars: int = 0
    total_forks: int = 0
    total_watchers: int = 0
    total_open_issues: int = 0
    total_size_kb: int = 0
    languages: dict[str, int] = Field(default_factory=dict)
    most_starred_repository: str | None = None
    most_forked_repository: str | None = None


class GitHubOverview(BaseModel):
    profile: GitHubProfile
    stats: GitHubStats
    commits: list[GitHubCommit] = Field(default_factory=list)
    activities: list[GitHubActivity] = Field(default_factory=list)


class SyncResult(BaseModel):
    success: bool = True
    synced_data: list[str] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)
    duration_ms: int = 0
    overview: GitHubOverview | None = None


# --- Module Notes -----------------------------------------------------------
# Unknown GitHub fields are ignored (pydantic default), so API additions never break parsing.
