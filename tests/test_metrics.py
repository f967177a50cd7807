"""
tests.test_metrics

Metric derivations over projects and commits.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest

from ghfolio.errors import InvalidActivityTypeError
from ghfolio.github.models import GitHubCommit
from ghfolio.services.metrics import (
    MetricsService,
    compute_activity,
    compute_contributions,
    compute_languages,
    compute_productivity,
    compute_repository_metrics,
    compute_streak,
    compute_summary,
    compute_technologies,
    compute_timeline,
)
from ghfolio.services.models import Project
from ghfolio.services.projects import ProjectService
from tests.fakes import FakeGitHub, make_github

NOW = datetime(2024, 5, 15, 12, 0, tzinfo=timezone.utc)


def _project(name: str, **kwargs) -> Project:
    values = {
        "id": abs(hash(name)) % 10_000,
        "name": name,
        "categories": ["other"],
        "status": "active",
        "featured": False,
        "technologies": [],
    }
    values.update(kwargs)
    return Project(**values)


def _commit(sha: str, when: datetime, repository: str = "octo/x") -> GitHubCommit:
    return GitHubCommit(sha=sha, date=when, repository=repository, author_login="octo")


def _metrics_service(api: FakeGitHub) -> MetricsService:
    github = make_github(api)
    return MetricsService(projects=ProjectService(github=github), github=github)


def test_streak_counts_consecutive_days() -> None:
    days = [date(2024, 5, d) for d in (1, 2, 3, 4, 8, 9, 10)]

    streak = compute_streak(days, today=date(2024, 5, 10))

    assert streak.current_streak == 3
    assert streak.longest_streak == 4
    assert streak.longest_streak_start == date(2024, 5, 1)
    assert streak.longest_streak_end == date(2024, 5, 4)
    assert streak.total_active_days == 7
    assert streak.last_active_date == date(2024, 5, 10)


def test_current_streak_survives_until_end_of_next_day() -> None:
    days = [date(2024, 5, 8), date(2024, 5, 9), date(2024, 5, 9)]

    assert compute_streak(days, today=date(2024, 5, 10)).current_streak == 2
    assert compute_streak(days, today=date(2024, 5, 11)).current_streak == 0


def test_streak_of_nothing() -> None:
    streak = compute_streak([], today=date(2024, 5, 10))
    assert streak.current_streak == 0
    assert streak.longest_streak == 0
    assert streak.last_active_date is None


def test_languages_sorted_by_count_then_name() -> None:
    projects = [
        _project("a", language="Python"),
        _project("b", language="Go"),
        _project("c", language="Python"),
        _project("d", language="C"),
        _project("e"),
    ]

    data = compute_languages(projects)

    assert [(m.name, m.count) for m in data.languages] == [("Python", 2), ("C", 1), ("Go", 1)]
    assert data.languages[0].percentage == 50.0
    assert data.languages[0].projects == ["a", "c"]
    assert data.summary.most_used == "Python"
    assert data.summary.total_projects == 4
    assert data.summary.average_projects_per_language == 1.33


def test_unknown_activity_type_is_rejected() -> None:
    with pytest.raises(InvalidActivityTypeError, match="Invalid activity type: weekly"):
        compute_activity("weekly", [], now=NOW)


def test_recent_and_deployment_activity() -> None:
    projects = [
        _project("new", created_at=NOW - timedelta(days=3), homepage="https://new.dev"),
        _project("old", created_at=NOW - timedelta(days=90), has_pages=True),
        _project("plain", created_at=NOW - timedelta(days=300)),
    ]

    recent = compute_activity("recent", projects, now=NOW)
    assert recent.count == 1
    assert recent.projects == ["new"]

    deployment = compute_activity("deployment", projects, now=NOW)
    assert deployment.projects == ["new", "old"]
    assert deployment.details["with_homepage"] == 1
    assert deployment.details["with_pages"] == 1
    assert deployment.details["urls"] == {"new": "https://new.dev"}


def test_commit_activity_counts_last_30_days_per_project() -> None:
    commits = {
        "alpha": [_commit("1", NOW - timedelta(days=1)), _commit("2", NOW - timedelta(days=45))],
        "beta": [_commit("3", NOW - timedelta(days=2)), _commit("4", NOW - timedelta(days=5))],
        "gamma": [_commit("5", NOW - timedelta(days=60))],
    }

    activity = compute_activity("commit", [], now=NOW, commits_by_repo=commits)

    assert activity.projects == ["beta", "alpha"]
    assert activity.details["total_commits"] == 3
    assert activity.details["most_active_project"] == "beta"


def test_contributions_group_by_day_weekday_and_month() -> None:
    commits = [
        _commit("1", datetime(2024, 5, 13, 9, tzinfo=timezone.utc), "octo/a"),
        _commit("2", datetime(2024, 5, 13, 18, tzinfo=timezone.utc), "octo/b"),
        _commit("3", datetime(2024, 4, 30, 8, tzinfo=timezone.utc), "octo/a"),
    ]

    data = compute_contributions(commits)

    assert data.total_contributions == 3
    assert data.active_days == 2
    assert data.contributions_by_day == {"2024-04-30": 1, "2024-05-13": 2}
    assert data.contributions_by_month == {"2024-04": 1, "2024-05": 2}
    assert data.contributions_by_weekday["Monday"] == 2
    assert data.contributions_by_weekday["Tuesday"] == 1
    assert data.most_active_day == "2024-05-13"
    assert data.repositories == {"octo/a": 2, "octo/b": 1}


def test_technologies_count_projects_per_technology() -> None:
    projects = [
        _project("a", technologies=["Python", "fastapi"], categories=["backend"]),
        _project("b", technologies=["Python"], categories=["other"]),
    ]

    data = compute_technologies(projects)

    assert [(t.name, t.count) for t in data.technologies] == [("Python", 2), ("fastapi", 1)]
    assert data.technologies[0].percentage == 100.0
    assert data.technologies[0].categories == ["backend", "other"]
    assert data.summary.most_used == "Python"
    assert data.summary.average_technologies_per_project == 1.5


def test_timeline_groups_by_creation_month_newest_first() -> None:
    projects = [
        _project("first", created_at=datetime(2021, 3, 2, tzinfo=timezone.utc)),
        _project("second", created_at=datetime(2023, 7, 9, tzinfo=timezone.utc)),
        _project("third", created_at=datetime(2023, 7, 20, tzinfo=timezone.utc)),
    ]

    data = compute_timeline(projects)

    assert [(e.period, e.projects) for e in data.timeline] == [
        ("2023-07", ["second", "third"]),
        ("2021-03", ["first"]),
    ]
    assert data.projects_per_year == {"2021": 1, "2023": 2}
    assert data.first_project == "first"
    assert data.latest_project == "third"
    assert data.years_active == 3


def test_monthly_activity_spans_the_year_boundary() -> None:
    now = datetime(2024, 1, 10, 12, 0, tzinfo=timezone.utc)
    projects = [
        _project("jan", created_at=datetime(2024, 1, 2, tzinfo=timezone.utc)),
        _project("dec", created_at=datetime(2023, 12, 20, tzinfo=timezone.utc)),
        _project("nov", created_at=datetime(2023, 11, 30, tzinfo=timezone.utc)),
        _project("undated"),
    ]

    monthly = compute_activity("monthly", projects, now=now)

    assert monthly.period == "last month"
    assert monthly.projects == ["jan", "dec"]
    assert monthly.count == 2


def test_project_activity_reports_recent_updates() -> None:
    projects = [
        _project("a", updated_at=NOW - timedelta(days=2), pushed_at=NOW - timedelta(days=2)),
        _project("b", updated_at=NOW - timedelta(days=10), pushed_at=NOW - timedelta(days=40)),
        _project("c", updated_at=NOW - timedelta(days=50)),
    ]

    activity = compute_activity("project", projects, now=NOW)

    assert activity.projects == ["a", "b"]
    assert activity.details == {
        "total_projects": 3,
        "active_projects": 2,
        "recently_pushed": 1,
        "activity_rate": 66.67,
        "most_recent_update": "a",
    }


def test_technology_activity_reports_most_and_least_used() -> None:
    projects = [
        _project("a", technologies=["Python", "fastapi"]),
        _project("b", technologies=["Python"]),
        _project("c", technologies=["Go"]),
    ]

    activity = compute_activity("technology", projects, now=NOW)

    assert activity.period == "all time"
    assert activity.projects == ["Python", "fastapi", "Go"]
    details = activity.details
    assert details["most_used_technology"] == "Python"
    assert details["most_used_technology_projects"] == ["a", "b"]
    assert details["most_used_technology_percentage"] == 66.67
    assert details["least_used_technology"] == "Go"
    assert details["least_used_technology_count"] == 1
    assert details["average_usage"] == 1.33


def test_repository_metrics_summarise_stars_forks_and_breakdowns() -> None:
    projects = [
        _project(
            "b",
            stargazers_count=2,
            forks_count=5,
            status="inactive",
            categories=["backend", "web-frontend"],
        ),
        _project(
            "a",
            stargazers_count=10,
            forks_count=1,
            categories=["backend"],
            created_at=NOW - timedelta(days=100),
            pushed_at=NOW - timedelta(days=2),
        ),
        _project("c", status="completed"),
    ]

    data = compute_repository_metrics(projects, now=NOW)

    assert [r.name for r in data.repositories] == ["a", "b", "c"]
    assert data.repositories[0].age_days == 100
    assert data.repositories[0].days_since_push == 2
    assert data.repositories[2].age_days is None
    summary = data.summary
    assert (summary.total_stars, summary.total_forks) == (12, 6)
    assert (summary.average_stars, summary.average_forks) == (4.0, 2.0)
    assert summary.most_starred == "a"
    assert summary.most_forked == "b"
    assert summary.by_status == {"inactive": 1, "active": 1, "completed": 1}
    assert summary.by_category == {"backend": 2, "web-frontend": 1, "other": 1}


def test_productivity_windows_and_peaks() -> None:
    commits = [
        _commit("1", datetime(2024, 5, 14, 9, 30, tzinfo=timezone.utc)),
        _commit("2", datetime(2024, 5, 14, 9, 10, tzinfo=timezone.utc)),
        _commit("3", datetime(2024, 5, 1, 15, 0, tzinfo=timezone.utc)),
        _commit("4", datetime(2024, 3, 20, 9, 0, tzinfo=timezone.utc)),
        _commit("5", datetime(2023, 12, 1, 20, 0, tzinfo=timezone.utc)),
    ]
    projects = [
        _project("new", created_at=NOW - timedelta(days=100), pushed_at=NOW - timedelta(days=5)),
        _project("old", created_at=NOW - timedelta(days=400), pushed_at=NOW - timedelta(days=45)),
        _project("undated"),
    ]

    data = compute_productivity(commits, projects, now=NOW)

    assert data.commits_last_7_days == 2
    assert data.commits_last_30_days == 3
    # Four commits fall inside the last 12 weeks.
    assert data.average_commits_per_week == 0.33
    assert data.average_commits_per_month == 1.43
    assert data.active_days_last_30_days == 2
    # Tuesday and Wednesday tie on two commits; the earlier weekday wins.
    assert data.most_productive_weekday == "Tuesday"
    assert data.most_productive_hour == 9
    assert data.commits_by_hour["09"] == 3
    assert data.commits_by_hour["20"] == 1
    assert data.projects_created_last_year == 1
    assert data.projects_pushed_last_30_days == 1


def test_productivity_without_commits() -> None:
    data = compute_productivity([], [], now=NOW)

    assert data.commits_last_30_days == 0
    assert data.average_commits_per_month == 0.0
    assert data.most_productive_weekday is None
    assert data.most_productive_hour is None


def test_summary_totals() -> None:
    projects = [
        _project(
            "a",
            language="Python",
            technologies=["Python"],
            featured=True,
            stargazers_count=3,
            forks_count=1,
        ),
        _project("b", language="Python", technologies=["Python", "docker"], stargazers_count=1),
        _project("c", language="Go", technologies=["Go"], featured=True, status="inactive"),
    ]
    commits = [
        _commit("1", datetime(2024, 5, 15, 8, tzinfo=timezone.utc)),
        _commit("2", datetime(2024, 5, 14, 10, tzinfo=timezone.utc)),
        _commit("3", datetime(2024, 5, 10, 10, tzinfo=timezone.utc)),
    ]

    summary = compute_summary(projects, commits, now=NOW)

    assert summary.total_projects == 3
    assert summary.featured_projects == 2
    assert (summary.total_stars, summary.total_forks) == (4, 1)
    assert (summary.total_languages, summary.top_language) == (2, "Python")
    assert (summary.total_technologies, summary.top_technology) == (3, "Python")
    assert summary.projects_by_status == {"active": 2, "inactive": 1}
    assert (summary.current_streak, summary.longest_streak) == (2, 2)
    assert summary.generated_at == NOW


@pytest.mark.asyncio
async def test_invalid_activity_type_makes_no_github_calls() -> None:
    api = FakeGitHub()

    with pytest.raises(InvalidActivityTypeError):
        await _metrics_service(api).get_activity("bogus")
    assert api.calls == []


@pytest.mark.asyncio
async def test_streak_from_fetched_commits() -> None:
    streak = await _metrics_service(FakeGitHub()).get_streak_metrics()

    # portfolio: commits ~2h and ~26h ago; api-server: one commit 40 days ago.
    assert streak.current_streak == 2
    assert streak.longest_streak == 2
    assert streak.total_active_days == 3


@pytest.mark.asyncio
async def test_commit_metrics_skip_repositories_that_fail() -> None:
    api = FakeGitHub()
    api.fail("/repos/octo/api-server/commits", 500)

    data = await _metrics_service(api).get_commit_activity()

    assert [m.repository for m in data.commit_metrics] == ["portfolio"]
    assert data.commit_summary.total_commits == 2
    assert data.commit_summary.most_active_repository == "portfolio"
