"""
ghfolio.services.metrics

Portfolio metrics derived from classified projects and their commits.

Responsibilities:
- Aggregate languages, technologies, activity, repositories and timelines from projects.
- Aggregate commit-based metrics (commit summary, contributions, productivity, streaks).
- Keep every computation a pure function of its inputs and a reference time.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from datetime import date, datetime, timedelta, timezone

from ghfolio.errors import InvalidActivityTypeError
from ghfolio.github.client import GitHubClient
from ghfolio.github.models import GitHubCommit
from ghfolio.observability.logging import get_logger
from ghfolio.services.models import (
    ACTIVITY_TYPES,
    ActivityMetric,
    CommitMetric,
    CommitMetricsData,
    CommitSummary,
    ContributionsData,
    LanguageMetric,
    LanguageMetricsData,
    LanguageSummary,
    MetricsSummary,
    ProductivityMetrics,
    Project,
    RepositoryMetric,
    RepositoryMetricsData,
    RepositorySummary,
    StreakMetrics,
    TechnologiesData,
    TechnologiesSummary,
    TechnologyMetric,
    TimelineEntry,
    TimelineMetrics,
)
from ghfolio.services.projects import ProjectService

log = get_logger(__name__)

WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")
_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _pct(part: int, whole: int) -> float:
    return round(part / whole * 100, 2) if whole else 0.0


def _avg(total: int, n: int) -> float:
    return round(total / n, 2) if n else 0.0


def _utc_day(moment: datetime) -> date:
    return moment.astimezone(timezone.utc).date()


def compute_languages(projects: list[Project]) -> LanguageMetricsData:
    by_language: dict[str, list[str]] = {}
    for p in projects:
        if p.language:
            by_language.setdefault(p.language, []).append(p.name)

    total = sum(len(names) for names in by_language.values())
    languages = sorted(
        (
            LanguageMetric(
                name=lang,
                count=len(names),
                percentage=_pct(len(names), total),
                projects=names,
            )
            for lang, names in by_language.items()
        ),
        key=lambda m: (-m.count, m.name),
    )
    return LanguageMetricsData(
        languages=languages,
        summary=LanguageSummary(
            most_used=languages[0].name if languages else None,
            total_languages=len(languages),
            total_projects=total,
            average_projects_per_language=_avg(total, len(languages)),
        ),
    )


def compute_activity(
    activity_type: str,
    projects: list[Project],
    *,
    now: datetime,
    commits_by_repo: dict[str, list[GitHubCommit]] | None = None,
) -> ActivityMetric:
    thirty_days_ago = now - timedelta(days=30)

    if activity_type == "recent":
        recent = [p for p in projects if p.created_at and p.created_at > thirty_days_ago]
        return ActivityMetric(
            type="recent",
            period="last 30 days",
            count=len(recent),
            projects=[p.name for p in recent],
        )

    if activity_type == "monthly":

        def month_diff(p: Project) -> int | None:
            if p.created_at is None:
                return None
            return (now.year - p.created_at.year) * 12 + now.month - p.created_at.month

        monthly = [p for p in projects if (d := month_diff(p)) is not None and d <= 1]
        return ActivityMetric(
            type="monthly",
            period="last month",
            count=len(monthly),
            projects=[p.name for p in monthly],
        )

    if activity_type == "project":
        active = [p for p in projects if p.updated_at and p.updated_at > thirty_days_ago]
        pushed = [p for p in projects if p.pushed_at and p.pushed_at > thirty_days_ago]
        latest = max(active, key=lambda p: p.updated_at or _EPOCH, default=None)
        return ActivityMetric(
            type="project",
            period="last 30 days",
            count=len(active),
            projects=[p.name for p in active],
            details={
                "total_projects": len(projects),
                "active_projects": len(active),
                "recently_pushed": len(pushed),
                "activity_rate": _pct(len(active), len(projects)),
                "most_recent_update": latest.name if latest else None,
            },
        )

    if activity_type == "technology":
        technologies = compute_technologies(projects).technologies
        most = technologies[0] if technologies else None
        least = technologies[-1] if technologies else None
        return ActivityMetric(
            type="technology",
            period="all time",
            count=len(technologies),
            projects=[t.name for t in technologies],
            details={
                "total_technologies": len(technologies),
                "most_used_technology": most.name if most else None,
                "most_used_technology_count": most.count if most else None,
                "most_used_technology_projects": most.projects if most else None,
                "most_used_technology_percentage": most.percentage if most else None,
                "least_used_technology": least.name if least else None,
                "least_used_technology_count": least.count if least else None,
                "least_used_technology_projects": least.projects if least else None,
                "least_used_technology_percentage": least.percentage if least else None,
                "average_usage": _avg(sum(t.count for t in technologies), len(technologies)),
            },
        )

    if activity_type == "commit":
        per_project = {
            name: sum(1 for c in commits if c.date and c.date > thirty_days_ago)
            for name, commits in (commits_by_repo or {}).items()
        }
        per_project = {name: n for name, n in per_project.items() if n > 0}
        ranked = sorted(per_project.items(), key=lambda kv: (-kv[1], kv[0]))
        return ActivityMetric(
            type="commit",
            period="last 30 days",
            count=len(ranked),
            projects=[name for name, _ in ranked],
            details={
                "total_commits": sum(per_project.values()),
                "commits_by_project": dict(ranked),
                "most_active_project": ranked[0][0] if ranked else None,
            },
        )

    if activity_type == "deployment":
        deployed = [p for p in projects if p.homepage or p.has_pages]
        return ActivityMetric(
            type="deployment",
            period="all time",
            count=len(deployed),
            projects=[p.name for p in deployed],
            details={
                "with_homepage": sum(1 for p in deployed if p.homepage),
                "with_pages": sum(1 for p in deployed if p.has_pages),
                "deployment_rate": _pct(len(deployed), len(projects)),
                "urls": {p.name: p.homepage for p in deployed if p.homepage},
            },
        )

    raise InvalidActivityTypeError(activity_type)


def compute_commit_metrics(commits_by_repo: dict[str, list[GitHubCommit]]) -> CommitMetricsData:
    metrics: list[CommitMetric] = []
    for repo, commits in commits_by_repo.items():
        ordered = sorted(commits, key=lambda c: c.date or _EPOCH, reverse=True)
        authors = dict.fromkeys(
            a for c in ordered if (a := c.author_login or c.author_name)
        )
        metrics.append(
            CommitMetric(
                repository=repo,
                commit_count=len(ordered),
                last_commit=ordered[0].date if ordered else None,
                authors=list(authors),
                messages=[c.message.splitlines()[0] if c.message else "" for c in ordered[:5]],
            )
        )
    metrics.sort(key=lambda m: (-m.commit_count, m.repository))

    all_commits = sorted(
        (c for commits in commits_by_repo.values() for c in commits),
        key=lambda c: c.date or _EPOCH,
        reverse=True,
    )
    top = metrics[0] if metrics and metrics[0].commit_count else None
    return CommitMetricsData(
        commit_metrics=metrics,
        commit_summary=CommitSummary(
            total_commits=len(all_commits),
            total_repositories=len(metrics),
            most_active_repository=top.repository if top else None,
            most_active_repository_count=top.commit_count if top else 0,
            average_commits_per_repository=_avg(len(all_commits), len(metrics)),
            recent_commits=all_commits[:10],
        ),
    )


def compute_repository_metrics(projects: list[Project], *, now: datetime) -> RepositoryMetricsData:
    repos = [
        RepositoryMetric(
            name=p.name,
            language=p.language,
            stars=p.stargazers_count,
            forks=p.forks_count,
            status=p.status,
            categories=p.categories,
            featured=p.featured,
            age_days=(now - p.created_at).days if p.created_at else None,
            days_since_push=(now - p.pushed_at).days if p.pushed_at else None,
            html_url=p.html_url,
        )
        for p in projects
    ]
    repos.sort(key=lambda r: (-r.stars, -r.forks, r.name))

    total_stars = sum(r.stars for r in repos)
    total_forks = sum(r.forks for r in repos)
    most_starred = max(repos, key=lambda r: r.stars, default=None)
    most_forked = max(repos, key=lambda r: r.forks, default=None)
    return RepositoryMetricsData(
        repositories=repos,
        summary=RepositorySummary(
            total_repositories=len(repos),
            total_stars=total_stars,
            total_forks=total_forks,
            average_stars=_avg(total_stars, len(repos)),
            average_forks=_avg(total_forks, len(repos)),
            most_starred=most_starred.name if most_starred else None,
            most_forked=most_forked.name if most_forked else None,
            by_status=dict(Counter(p.status for p in projects)),
            by_category=dict(Counter(c for p in projects for c in p.categories)),
        ),
    )


def compute_contributions(commits: Iterable[GitHubCommit]) -> ContributionsData:
    by_day: Counter[str] = Counter()
    by_month: Counter[str] = Counter()
    by_weekday = {day: 0 for day in WEEKDAYS}
    by_repository: Counter[str] = Counter()
    for c in commits:
        if c.date is None:
            continue
        day = _utc_day(c.date)
        by_day[day.isoformat()] += 1
        by_month[day.strftime("%Y-%m")] += 1
        by_weekday[WEEKDAYS[day.weekday()]] += 1
        by_repository[c.repository] += 1

    total = sum(by_day.values())
    # Earliest day wins a tie.
    most_active = max(sorted(by_day.items()), key=lambda kv: kv[1], default=None)
    return ContributionsData(
        total_contributions=total,
        active_days=len(by_day),
        contributions_by_day=dict(sorted(by_day.items())),
        contributions_by_weekday=by_weekday,
        contributions_by_month=dict(sorted(by_month.items())),
        most_active_day=most_active[0] if most_active else None,
        most_active_day_count=most_active[1] if most_active else 0,
        average_per_active_day=_avg(total, len(by_day)),
        repositories=dict(by_repository),
    )


def compute_productivity(
    commits: Iterable[GitHubCommit], projects: list[Project], *, now: datetime
) -> ProductivityMetrics:
    dated = [c.date for c in commits if c.date is not None]

    def since(days: int) -> list[datetime]:
        cutoff = now - timedelta(days=days)
        return [d for d in dated if d > cutoff]

    last_30 = since(30)
    last_12_weeks = len(since(7 * 12))
    weekdays = Counter(WEEKDAYS[_utc_day(d).weekday()] for d in dated)
    hours = Counter(d.astimezone(timezone.utc).hour for d in dated)
    # Ties resolve to the earliest weekday / hour.
    top_weekday = max(WEEKDAYS, key=lambda w: weekdays[w]) if dated else None
    top_hour = max(range(24), key=lambda h: hours[h]) if dated else None
    year_ago = now - timedelta(days=365)
    return ProductivityMetrics(
        commits_last_7_days=len(since(7)),
        commits_last_30_days=len(last_30),
        average_commits_per_week=_avg(last_12_weeks, 12),
        # 84 days over 30-day months.
        average_commits_per_month=_avg(last_12_weeks * 30, 7 * 12),
        active_days_last_30_days=len({_utc_day(d) for d in last_30}),
        most_productive_weekday=top_weekday,
        most_productive_hour=top_hour,
        commits_by_hour={f"{h:02d}": hours[h] for h in range(24)},
        projects_created_last_year=sum(
            1 for p in projects if p.created_at and p.created_at > year_ago
        ),
        projects_pushed_last_30_days=sum(
            1 for p in projects if p.pushed_at and p.pushed_at > now - timedelta(days=30)
        ),
    )


def compute_technologies(projects: list[Project]) -> TechnologiesData:
    tech_projects: dict[str, list[str]] = {}
    tech_categories: dict[str, dict[str, None]] = {}
    for p in projects:
        for tech in p.technologies:
            tech_projects.setdefault(tech, []).append(p.name)
            tech_categories.setdefault(tech, {}).update(dict.fromkeys(p.categories))

    technologies = sorted(
        (
            TechnologyMetric(
                name=tech,
                count=len(names),
                percentage=_pct(len(names), len(projects)),
                projects=names,
                categories=list(tech_categories[tech]),
            )
            for tech, names in tech_projects.items()
        ),
        key=lambda t: (-t.count, t.name.lower()),
    )
    most = technologies[0] if technologies else None
    return TechnologiesData(
        technologies=technologies,
        categories=dict(Counter(c for p in projects for c in p.categories)),
        summary=TechnologiesSummary(
            total_technologies=len(technologies),
            most_used=most.name if most else None,
            most_used_count=most.count if most else 0,
            average_technologies_per_project=_avg(
                sum(len(p.technologies) for p in projects), len(projects)
            ),
        ),
    )


def compute_streak(active_dates: Iterable[date], *, today: date) -> StreakMetrics:
    """
    Streaks over UTC calendar days with at least one commit.

    The current streak still counts when today has no commit yet but yesterday
    does; it is 0 once a full day has been missed.
    """

    days = sorted(set(active_dates))
    longest = run = 0
    longest_start = longest_end = run_start = None
    previous: date | None = None
    for d in days:
        if previous is not None and d - previous == timedelta(days=1):
            run += 1
        else:
            run, run_start = 1, d
        if run > longest:
            longest, longest_start, longest_end = run, run_start, d
        previous = d

    current = 0
    if days and today - days[-1] <= timedelta(days=1):
        current = 1
        for a, b in zip(reversed(days[:-1]), reversed(days[1:])):
            if b - a != timedelta(days=1):
                break
            current += 1

    return StreakMetrics(
        current_streak=current,
        longest_streak=longest,
        longest_streak_start=longest_start,
        longest_streak_end=longest_end,
        total_active_days=len(days),
        last_active_date=days[-1] if days else None,
    )


def compute_timeline(projects: list[Project]) -> TimelineMetrics:
    dated = sorted(
        ((p.created_at, p.name) for p in projects if p.created_at is not None),
        key=lambda pair: pair[0],
    )
    by_month: dict[str, list[str]] = {}
    per_year: Counter[str] = Counter()
    for created, name in dated:
        by_month.setdefault(created.strftime("%Y-%m"), []).append(name)
        per_year[str(created.year)] += 1

    first = dated[0] if dated else None
    latest = dated[-1] if dated else None
    return TimelineMetrics(
        timeline=[
            TimelineEntry(period=period, count=len(names), projects=names)
            for period, names in sorted(by_month.items(), reverse=True)
        ],
        projects_per_year=dict(sorted(per_year.items())),
        first_project=first[1] if first else None,
        first_project_date=first[0] if first else None,
        latest_project=latest[1] if latest else None,
        latest_project_date=latest[0] if latest else None,
        years_active=latest[0].year - first[0].year + 1 if first and latest else 0,
    )


def compute_summary(
    projects: list[Project], commits: Iterable[GitHubCommit], *, now: datetime
) -> MetricsSummary:
    languages = compute_languages(projects)
    technologies = compute_technologies(projects)
    streak = compute_streak(
        (_utc_day(c.date) for c in commits if c.date is not None), today=now.date()
    )
    return MetricsSummary(
        total_projects=len(projects),
        featured_projects=sum(1 for p in projects if p.featured),
        total_stars=sum(p.stargazers_count for p in projects),
        total_forks=sum(p.forks_count for p in projects),
        total_languages=languages.summary.total_languages,
        top_language=languages.summary.most_used,
        total_technologies=technologies.summary.total_technologies,
        top_technology=technologies.summary.most_used,
        projects_by_status=dict(Counter(p.status for p in projects)),
        current_streak=streak.current_streak,
        longest_streak=streak.longest_streak,
        generated_at=now,
    )


class MetricsService:
    def __init__(
        self,
        *,
        projects: ProjectService,
        github: GitHubClient,
        commit_repo_limit: int = 10,
        commit_window_days: int = 365,
    ) -> None:
        self._projects = projects
        self._github = github
        self._commit_repo_limit = commit_repo_limit
        self._commit_window_days = commit_window_days

    async def _commits_by_project(
        self, projects: list[Project], *, own_only: bool
    ) -> dict[str, list[GitHubCommit]]:
        # Most recently pushed projects first; older ones rarely add commits in the window.
        candidates = sorted(projects, key=lambda p: p.pushed_at or _EPOCH, reverse=True)[
            : self._commit_repo_limit
        ]
        names = {self._github.full_name(p.name, p.full_name): p.name for p in candidates}
        by_full_name = await self._github.fetch_commits_for_repositories(
            list(names),
            per_repo=100,
            since=datetime.now(timezone.utc) - timedelta(days=self._commit_window_days),
            author=self._github.username if own_only else None,
        )
        return {names[full]: commits for full, commits in by_full_name.items()}

    async def _own_commits(self, projects: list[Project]) -> list[GitHubCommit]:
        by_project = await self._commits_by_project(projects, own_only=True)
        return [c for commits in by_project.values() for c in commits]

    async def get_languages(self) -> LanguageMetricsData:
        log.info("metrics_languages")
        return compute_languages(await self._projects.get_all_projects())

    async def get_activity(self, activity_type: str = "recent") -> ActivityMetric:
        # Validate before spending GitHub calls on an unknown type.
        if activity_type not in ACTIVITY_TYPES:
            raise InvalidActivityTypeError(activity_type)
        log.info("metrics_activity", activity_type=activity_type)
        projects = await self._projects.get_all_projects()
        commits_by_repo = (
            await self._commits_by_project(projects, own_only=True)
            if activity_type == "commit"
            else None
        )
        return compute_activity(
            activity_type,
            projects,
            now=datetime.now(timezone.utc),
            commits_by_repo=commits_by_repo,
        )

    async def get_commit_activity(self) -> CommitMetricsData:
        log.info("metrics_commits")
        projects = await self._projects.get_all_projects()
        return compute_commit_metrics(await self._commits_by_project(projects, own_only=False))

    async def get_repositories_metrics(self) -> RepositoryMetricsData:
        log.info("metrics_repositories")
        projects = await self._projects.get_all_projects()
        return compute_repository_metrics(projects, now=datetime.now(timezone.utc))

    async def get_contributions_metrics(self) -> ContributionsData:
        log.info("metrics_contributions")
        projects = await self._projects.get_all_projects()
        return compute_contributions(await self._own_commits(projects))

    async def get_productivity_metrics(self) -> ProductivityMetrics:
        log.info("metrics_productivity")
        projects = await self._projects.get_all_projects()
        commits = await self._own_commits(projects)
        return compute_productivity(commits, projects, now=datetime.now(timezone.utc))

    async def get_technologies_metrics(self) -> TechnologiesData:
        log.info("metrics_technologies")
        return compute_technologies(await self._projects.get_all_projects())

    async def get_streak_metrics(self) -> StreakMetrics:
        log.info("metrics_streak")
        projects = await self._projects.get_all_projects()
        commits = await self._own_commits(projects)
        return compute_streak(
            (_utc_day(c.date) for c in commits if c.date is not None),
            today=datetime.now(timezone.utc).date(),
        )

    async def get_timeline_metrics(self) -> TimelineMetrics:
        log.info("metrics_timeline")
        return compute_timeline(await self._projects.get_all_projects())

    async def get_metrics_summary(self) -> MetricsSummary:
        log.info("metrics_summary")
        projects = await self._projects.get_all_projects()
        commits = await self._own_commits(projects)
        return compute_summary(projects, commits, now=datetime.now(timezone.utc))


# --- Module Notes -----------------------------------------------------------
# Commit-based metrics only look at the most recently pushed projects within the
# commit window; widening either multiplies GitHub calls per cache miss.
