"""
ghfolio.services.projects

Repository → project classification.

Responsibilities:
- Filter the user's repositories down to portfolio projects.
- Classify each project (categories, status, featured flag, technologies).
- Answer project queries (all, featured, by id, by language, search).
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from ghfolio.errors import GitHubNotFoundError, ProjectNotFoundError
from ghfolio.github.client import GitHubClient
from ghfolio.github.models import GitHubRepository
from ghfolio.observability.logging import get_logger
from ghfolio.services.models import Project, ProjectCategory, ProjectStatus

log = get_logger(__name__)

# Topic keyword → category. Order is the order categories are reported in.
CATEGORY_TOPICS: tuple[tuple[ProjectCategory, frozenset[str]], ...] = (
    ("web-frontend", frozenset({"react", "vue", "angular", "frontend", "ui", "client"})),
    (
        "backend",
        frozenset({"api", "backend", "server", "express", "node", "fastapi", "nestjs"}),
    ),
    ("fullstack", frozenset({"fullstack", "full-stack", "mern", "mean", "nextjs"})),
    (
        "mobile",
        frozenset({"mobile", "ios", "android", "flutter", "react-native", "swift", "kotlin"}),
    ),
    ("desktop", frozenset({"desktop", "electron", "windows", "macos", "linux"})),
)
WEB_LANGUAGES = frozenset({"TypeScript", "JavaScript", "CSS", "HTML"})
GENERIC_TOPICS = frozenset({"web", "mobile", "desktop", "backend", "frontend", "fullstack"})


def is_project_repository(repo: GitHubRepository) -> bool:
    return not repo.private and not repo.fork and "fork" not in repo.name.lower()


def determine_categories(repo: GitHubRepository) -> list[ProjectCategory]:
    topics = {t.lower() for t in repo.topics}
    categories: list[ProjectCategory] = [
        category for category, keywords in CATEGORY_TOPICS if topics & keywords
    ]
    if repo.language in WEB_LANGUAGES and "web-frontend" not in categories:
        categories.append("web-frontend")
    return categories or ["other"]


def determine_status(repo: GitHubRepository, *, now: datetime) -> ProjectStatus:
    if repo.pushed_at is None:
        return "inactive"
    days = (now - repo.pushed_at).days
    if days <= 7:
        return "active"
    if days <= 30:
        return "in development"
    if days <= 90:
        return "inactive"
    if days <= 365:
        return "archived"
    return "completed"


def determine_featured(repo: GitHubRepository, *, now: datetime) -> bool:
    criteria = (
        repo.stargazers_count > 0,
        repo.forks_count > 0,
        bool(repo.description) and len(repo.description or "") > 5,
        bool(repo.topics),
        repo.pushed_at is not None and repo.pushed_at > now - timedelta(days=90),
    )
    return any(criteria)


def determine_technologies(repo: GitHubRepository) -> list[str]:
    technologies: list[str] = []
    if repo.language:
        technologies.append(repo.language)
    technologies.extend(t for t in repo.topics if t.lower() not in GENERIC_TOPICS)
    return list(dict.fromkeys(technologies))


def to_project(repo: GitHubRepository, *, now: datetime) -> Project:
    return Project(
        id=repo.id,
        name=repo.name,
        full_name=repo.full_name,
        description=repo.description,
        html_url=repo.html_url,
        homepage=repo.homepage or None,
        language=repo.language,
        stargazers_count=repo.stargazers_count,
        forks_count=repo.forks_count,
        created_at=repo.created_at,
        updated_at=repo.updated_at,
        pushed_at=repo.pushed_at,
        topics=list(repo.topics),
        has_pages=repo.has_pages,
        categories=determine_categories(repo),
        status=determine_status(repo, now=now),
        featured=determine_featured(repo, now=now),
        technologies=determine_technologies(repo),
    )


class ProjectService:
    def __init__(self, *, github: GitHubClient) -> None:
        self._github = github

    def _classify(self, repositories: list[GitHubRepository]) -> list[Project]:
        now = datetime.now(timezone.utc)
        return [to_project(r, now=now) for r in repositories if is_project_repository(r)]

    async def get_all_projects(self) -> list[Project]:
        repositories = await self._github.fetch_repositories()
        projects = self._classify(repositories)
        log.info("projects_classified", repositories=len(repositories), projects=len(projects))
        return projects

    async def get_featured_projects(self) -> list[Project]:
        featured = [p for p in await self.get_all_projects() if p.featured]
        log.info("featured_projects_found", count=len(featured))
        return featured

    async def get_project_by_id(self, project_id: int) -> Project:
        try:
            repo = await self._github.fetch_repository_by_id(project_id)
        except GitHubNotFoundError as e:
            raise ProjectNotFoundError(project_id) from e
        if not is_project_repository(repo):
            raise ProjectNotFoundError(project_id, "does not meet the filtering criteria")
        return to_project(repo, now=datetime.now(timezone.utc))

    async def get_projects_by_language(self, language: str) -> list[Project]:
        repositories = await self._github.fetch_repositories_by_language(language)
        if not repositories:
            log.info("no_repositories_for_language", language=language)
        return self._classify(repositories)

    async def search_projects(
        self,
        query: str,
        *,
        category: str | None = None,
        status: str | None = None,
    ) -> list[Project]:
        needle = query.strip().lower()
        results: list[Project] = []
        for p in await self.get_all_projects():
            if category and category not in p.categories:
                continue
            if status and p.status != status:
                continue
            haystack = [p.name, p.description or "", *p.topics, *p.technologies]
            if needle and not any(needle in h.lower() for h in haystack):
                continue
            results.append(p)
        log.info("projects_searched", query=query, results=len(results))
        return results


# --- Module Notes -----------------------------------------------------------
# Classification is pure (see the module-level `determine_*` helpers); the service only
# adds fetching and the current time.
