"""
ghfolio.services.models

Portfolio DTOs derived from GitHub data.

Responsibilities:
- Define `Project` (a classified repository).
- Define the metric payloads served by `/metrics/*`.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

from ghfolio.github.models import GitHubCommit

ProjectCategory = Literal["web-frontend", "backend", "fullstack", "mobile", "desktop", "other"]
ProjectStatus = Literal["active", "in development", "inactive", "archived", "completed"]
ActivityType = Literal["recent", "monthly", "project", "technology", "commit", "deployment"]

ACTIVITY_TYPES: tuple[str, ...] = (
    "recent",
    "monthly",
    "project",
    "technology",
    "commit",
    "deployment",
)


class Project(BaseModel):
    id: int
    name: str
    full_name: str = ""
    description: str | None = None
    html_url: str = ""
    homepage: str | None = None
    language: str | None = None
    stargazers_count: int = 0
    forks_count: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None
    pushed_at: datetime | None = None
    topics: list[str] = Field(default_factory=list)
    has_pages: bool = False

    categories: list[ProjectCategory]
    status: ProjectStatus
    featured: bool
    technologies: list[str]


class LanguageMetric(BaseModel):
    name: str
    count: int
    percentage: float
    projects: list[str]


class LanguageSummary(BaseModel):
    most_used: str | None
    total_languages: int
    total_projects: int
    average_projects_per_language: float


class LanguageMetricsData(BaseModel):
    languages: list[LanguageMetric]
    summary: LanguageSummary


class ActivityMetric(BaseModel):
    type: ActivityType
    period: str
    count: int
    projects: list[str]
    details: dict[str, Any] = Field(default_factory=dict)


class CommitMetric(BaseModel):
    repository: str
    commit_count: int
    last_commit: datetime | None
    authors: list[str]
    messages: list[str]


class CommitSummary(BaseModel):
    total_commits: int
    total_repositories: int
    most_active_repository: str | None
    most_active_repository_count: int
    average_commits_per_repository: float
    recent_commits: list[GitHubCommit]


class CommitMetricsData(BaseModel):
    commit_metrics: list[CommitMetric]
    commit_summary: CommitSummary


class RepositoryMetric(BaseModel):
    name: str
    language: str | None
    stars: int
    forks: int
    status: ProjectStatus
    categories: list[ProjectCategory]
    featured: bool
    age_days: int | None
    days_since_push: int | None
    html_url: str


class RepositorySummary(BaseModel):
    total_repositories: int
    total_stars: int
    total_forks: int
    average_stars: float
    average_forks: float
    most_starred: str | None
    most_forked: str | None
    by_status: dict[str, int]
    by_category: dict[str, int]


class RepositoryMetricsData(BaseModel):
    repositories: list[RepositoryMetric]
    summary: RepositorySummary


class ContributionsData(BaseModel):
    total_contributions: int
    active_days: int
    contributions_by_day: dict[str, int]
    contributions_by_weekday: dict[str, int]
    contributions_by_month: dict[str, int]
    most_active_day: str | None
    most_active_day_count: int
    average_per_active_day: float
    repositories: dict[str, int]


class ProductivityMetrics(BaseModel):
    commits_last_7_days: int
    commits_last_30_days: int
    average_commits_per_week: float
    average_commits_per_month: float
    active_days_last_30_days: int
    most_productive_weekday: str | None
    most_productive_hour: int | None
    commits_by_hour: dict[str, int]
    projects_created_last_year: int
    projects_pushed_last_30_days: int


class TechnologyMetric(BaseModel):
    name: str
    count: int
    percentage: float
    projects: list[str]
    categories: list[str]


class TechnologiesSummary(BaseModel):
    total_technologies: int
    most_used: str | None
    most_used_count: int
    average_technologies_per_project: float


class TechnologiesData(BaseModel):
    technologies: list[TechnologyMetric]
    categories: dict[str, int]
    summary: TechnologiesSummary


class StreakMetrics(BaseModel):
    current_streak: int
    longest_streak: int
    longest_streak_start: date | None
    longest_streak_end: date | None
    total_active_days: int
    last_active_date: date | None


class TimelineEntry(BaseModel):
    period: str
    count: int
    projects: list[str]


class TimelineMetrics(BaseModel):
    timeline: list[TimelineEntry]
    projects_per_year: dict[str, int]
    first_project: str | None
    first_project_date: datetime | None
    latest_project: str | None
    latest_project_date: datetime | None
    years_active: int


class MetricsSummary(BaseModel):
    total_projects: int
    featured_projects: int
    total_stars: int
    total_forks: int
    total_languages: int
    top_language: str | None
    total_technologies: int
    top_technology: str | None
    projects_by_status: dict[str, int]
    current_streak: int
    longest_streak: int
    generated_at: datetime


# --- Module Notes -----------------------------------------------------------
# These are response shapes only; every value is recomputed from GitHub data on a cache miss.
