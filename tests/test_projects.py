"""
tests.test_projects

Repository → project classification and project queries.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from ghfolio.errors import ProjectNotFoundError
from ghfolio.github.models import GitHubRepository
from ghfolio.services.projects import (
    ProjectService,
    determine_categories,
    determine_featured,
    determine_status,
    determine_technologies,
    is_project_repository,
)
from tests.fakes import FakeGitHub, make_github, repo_json


def _repo(*, id: int = 1, name: str = "x", **kwargs) -> GitHubRepository:
    return GitHubRepository.model_validate(repo_json(id, name, **kwargs))


def _service(api: FakeGitHub) -> ProjectService:
    return ProjectService(github=make_github(api))


def test_filter_excludes_private_forks_and_fork_names() -> None:
    assert is_project_repository(_repo(name="portfolio"))
    assert not is_project_repository(_repo(name="portfolio", private=True))
    assert not is_project_repository(_repo(name="portfolio", fork=True))
    assert not is_project_repository(_repo(name="My-Fork-Of-Things"))


def test_categories_from_topics_and_language() -> None:
    assert determine_categories(_repo(topics=["react"])) == ["web-frontend"]
    assert determine_categories(_repo(language="TypeScript", topics=["api"])) == [
        "backend",
        "web-frontend",
    ]
    assert determine_categories(_repo(language="Rust", topics=["cli"])) == ["other"]


@pytest.mark.parametrize(
    ("days", "status"),
    [
        (3, "active"),
        (20, "in development"),
        (60, "inactive"),
        (200, "archived"),
        (400, "completed"),
        (None, "inactive"),
    ],
)
def test_status_by_days_since_push(days, status) -> None:
    now = datetime.now(timezone.utc)
    repo = _repo(pushed_days_ago=days)
    assert determine_status(repo, now=now) == status


def test_featured_needs_one_signal() -> None:
    now = datetime.now(timezone.utc) + timedelta(seconds=1)
    assert not determine_featured(_repo(pushed_days_ago=200), now=now)
    # Five characters is not a description.
    assert not determine_featured(_repo(description="notes", pushed_days_ago=200), now=now)
    assert determine_featured(_repo(description="Longer text", pushed_days_ago=200), now=now)
    assert determine_featured(_repo(stars=1, pushed_days_ago=200), now=now)
    assert determine_featured(_repo(pushed_days_ago=10), now=now)


def test_technologies_drop_generic_topics_and_duplicates() -> None:
    repo = _repo(language="Python", topics=["fastapi", "web", "backend", "fastapi", "redis"])
    assert determine_technologies(repo) == ["Python", "fastapi", "redis"]


@pytest.mark.asyncio
async def test_all_projects_are_filtered_and_classified() -> None:
    projects = await _service(FakeGitHub()).get_all_projects()

    by_name = {p.name: p for p in projects}
    assert set(by_name) == {"portfolio", "api-server"}
    assert by_name["portfolio"].status == "active"
    assert by_name["portfolio"].featured is True
    assert by_name["portfolio"].categories == ["web-frontend"]
    assert by_name["api-server"].status == "archived"
    assert by_name["api-server"].categories == ["backend"]


@pytest.mark.asyncio
async def test_project_by_id_rejects_unknown_and_filtered_repositories() -> None:
    service = _service(FakeGitHub())

    assert (await service.get_project_by_id(1)).name == "portfolio"

    with pytest.raises(ProjectNotFoundError, match="does not meet the filtering criteria"):
        await service.get_project_by_id(3)
    with pytest.raises(ProjectNotFoundError, match="Project with ID 999 not found"):
        await service.get_project_by_id(999)


@pytest.mark.asyncio
async def test_search_matches_text_category_and_status() -> None:
    service = _service(FakeGitHub())

    assert [p.name for p in await service.search_projects("REST")] == ["api-server"]
    assert [p.name for p in await service.search_projects("fastapi")] == ["api-server"]
    assert [
        p.name for p in await service.search_projects("", category="web-frontend")
    ] == ["portfolio"]
    assert await service.search_projects("portfolio", status="archived") == []


@pytest.mark.asyncio
async def test_projects_by_language_is_case_insensitive() -> None:
    projects = await _service(FakeGitHub()).get_projects_by_language("python")
    # secret-notes is Python too, but private.
    assert [p.name for p in projects] == ["api-server"]
