"""
ghfolio.github.client

Async client for the GitHub REST API.

Responsibilities:
- Attach GitHub headers (API version, media type, bearer token) to every call.
- Fetch profile, repositories, commits, languages, contributors and events
  for the configured user and normalize them into DTOs.
- Translate HTTP/transport failures into `GitHubApiError`.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Any

import httpx

from ghfolio.errors import GitHubApiError, GitHubConfigError, GitHubNotFoundError
from ghfolio.github.models import (
    GitHubActivity,
    GitHubCommit,
    GitHubContributor,
    GitHubEvent,
    GitHubOverview,
    GitHubProfile,
    GitHubRepository,
    GitHubStats,
    RateLimitInfo,
    RepositoryLanguages,
)
from ghfolio.observability.logging import get_logger
from ghfolio.settings import Settings

log = get_logger(__name__)

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def create_http_client(
    settings: Settings, *, transport: httpx.AsyncBaseTransport | None = None
) -> httpx.AsyncClient:
    # One pooled client per process; tests inject an `httpx.MockTransport`.
    return httpx.AsyncClient(
        base_url=settings.github_api_base_url.rstrip("/"),
        timeout=settings.github_timeout_seconds,
        transport=transport,
    )


class GitHubClient:
    def __init__(self, *, settings: Settings, http: httpx.AsyncClient) -> None:
        if not settings.github_username:
            raise GitHubConfigError("GitHub username is not set (GHFOLIO_GITHUB_USERNAME)")
        self._settings = settings
        self._http = http
        self.username = settings.github_username

    def full_name(self, name: str, full_name: str = "") -> str:
        return full_name or f"{self.username}/{name}"

    def _headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/vnd.github+json",
            "User-Agent": self._settings.service_name,
            "X-GitHub-Api-Version": self._settings.github_api_version,
        }
        if self._settings.github_token:
            headers["Authorization"] = f"Bearer {self._settings.github_token}"
        return headers

    async def _get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        try:
            r = await self._http.get(path, params=params, headers=self._headers())
        except httpx.HTTPError as e:
            log.error("github_request_failed", path=path, error=str(e))
            raise GitHubApiError(f"GitHub request failed: {e}") from e

        if r.status_code >= 400:
            remaining_raw = r.headers.get("x-ratelimit-remaining")
            remaining = int(remaining_raw) if remaining_raw and remaining_raw.isdigit() else None
            try:
                detail = str(r.json().get("message", r.reason_phrase))
            except ValueError:
                detail = r.reason_phrase
            log.error(
                "github_api_error",
                path=path,
                status=r.status_code,
                error=detail,
                rate_limit_remaining=remaining,
            )
            error_cls = GitHubNotFoundError if r.status_code == 404 else GitHubApiError
            raise error_cls(
                f"GitHub API error: {detail}",
                status_code=r.status_code,
                rate_limit_remaining=remaining,
            )
        if r.status_code == 204 or not r.content:
            # e.g. contributors of an empty repository
            return None
        return r.json()

    async def fetch_profile(self) -> GitHubProfile:
        log.info("github_fetch_profile")
        profile = GitHubProfile.model_validate(await self._get(f"/users/{self.username}"))
        log.info(
            "github_profile_fetched",
            login=profile.login,
            repos=profile.public_repos,
            followers=profile.followers,
        )
        return profile

    async def _fetch_repository_pages(
        self, *, per_page: int, max_pages: int
    ) -> list[GitHubRepository]:
        if self._settings.github_token:
            # Authenticated: include the owner's private repos (filtered later by projects).
            path = "/user/repos"
            base: dict[str, Any] = {"affiliation": "owner", "visibility": "all"}
        else:
            path = f"/users/{self.username}/repos"
            base = {"type": "owner"}

        repos: list[GitHubRepository] = []
        for page in range(1, max_pages + 1):
            batch = await self._get(
                path, params={**base, "sort": "updated", "per_page": per_page, "page": page}
            )
            repos.extend(GitHubRepository.model_validate(r) for r in batch)
            if len(batch) < per_page:
                break
        return repos

    async def fetch_repositories(
        self, *, per_page: int = 100, max_pages: int = 10
    ) -> list[GitHubRepository]:
        repos = await self._fetch_repository_pages(per_page=per_page, max_pages=max_pages)
        log.info("github_repositories_fetched", count=len(repos))
        return repos

    async def fetch_all_repositories_in_batches(
        self, batch_size: int = 20, max_batches: int = 10
    ) -> list[GitHubRepository]:
        repos = await self._fetch_repository_pages(per_page=batch_size, max_pages=max_batches)
        log.info("github_repositories_fetched_in_batches", count=len(repos), batch_size=batch_size)
        return repos

    async def fetch_repository_by_name(self, full_name: str) -> GitHubRepository:
        return GitHubRepository.model_validate(await self._get(f"/repos/{full_name}"))

    async def fetch_repository_by_id(self, repository_id: int) -> GitHubRepository:
        return GitHubRepository.model_validate(await self._get(f"/repositories/{repository_id}"))

    async def fetch_repositories_by_language(self, language: str) -> list[GitHubRepository]:
        wanted = language.strip().lower()
        repos = await self.fetch_repositories()
        return [r for r in repos if r.language and r.language.lower() == wanted]

    async def fetch_commits(
        self,
        full_name: str,
        *,
        per_page: int = 30,
        since: datetime | None = None,
        author: str | None = None,
    ) -> list[GitHubCommit]:
        params: dict[str, Any] = {"per_page": per_page}
        if since is not None:
            params["since"] = since.isoformat()
        if author:
            params["author"] = author
        try:
            raw = await self._get(f"/repos/{full_name}/commits", params=params)
        except GitHubApiError as e:
            # 409: "Git Repository is empty."
            if e.status_code == 409:
                return []
            raise
        return [GitHubCommit.from_api(c, repository=full_name) for c in raw]

    async def fetch_commits_for_repositories(
        self,
        full_names: list[str],
        *,
        per_repo: int = 30,
        since: datetime | None = None,
        author: str | None = None,
    ) -> dict[str, list[GitHubCommit]]:
        """
        Fetch commits for several repositories concurrently, keyed by full name.

        A repository whose fetch fails is logged and left out of the result, so
        one broken repo does not sink an aggregate metric.
        """

        results = await asyncio.gather(
            *(
                self.fetch_commits(name, per_page=per_repo, since=since, author=author)
                for name in full_names
            ),
            return_exceptions=True,
        )
        by_repo: dict[str, list[GitHubCommit]] = {}
        for name, result in zip(full_names, results):
            if isinstance(result, GitHubApiError):
                log.warning("github_commits_skipped", repository=name, error=result.message)
                continue
            if isinstance(result, BaseException):
                raise result
            by_repo[name] = result
        return by_repo

    async def fetch_recent_commits(
        self,
        repositories: list[GitHubRepository],
        *,
        repo_limit: int = 5,
        per_repo: int = 5,
        limit: int = 10,
    ) -> list[GitHubCommit]:
        candidates = sorted(
            (r for r in repositories if not r.fork),
            key=lambda r: r.pushed_at or _EPOCH,
            reverse=True,
        )[:repo_limit]
        by_repo = await self.fetch_commits_for_repositories(
            [self.full_name(r.name, r.full_name) for r in candidates], per_repo=per_repo
        )
        commits = [c for batch in by_repo.values() for c in batch]
        commits.sort(key=lambda c: c.date or _EPOCH, reverse=True)
        return commits[:limit]

    async def fetch_repository_languages(self, full_name: str) -> RepositoryLanguages:
        raw: dict[str, int] = await self._get(f"/repos/{full_name}/languages")
        total = sum(raw.values())
        percentages = {
            lang: round(size / total * 100, 2) if total else 0.0 for lang, size in raw.items()
        }
        primary = max(raw, key=raw.__getitem__) if raw else None
        return RepositoryLanguages(
            repository=full_name,
            languages=raw,
            percentages=percentages,
            primary_language=primary,
        )

    async def fetch_contributors(self, full_name: str) -> list[GitHubContributor]:
        raw = await self._get(f"/repos/{full_name}/contributors", params={"per_page": 100})
        return [GitHubContributor.model_validate(c) for c in raw or []]

    async def fetch_events(self, *, page: int = 1, per_page: int = 30) -> list[GitHubEvent]:
        raw = await self._get(
            f"/users/{self.username}/events/public",
            params={"page": page, "per_page": per_page},
        )
        return [GitHubEvent.from_api(e) for e in raw]

    async def fetch_activities(self, *, limit: int = 30) -> list[GitHubActivity]:
        events = await self.fetch_events(per_page=limit)
        return [summarize_event(e) for e in events]

    async def get_rate_limit(self) -> RateLimitInfo | None:
        # Informational only; a failure here must not fail the caller's request.
        try:
            data = await self._get("/rate_limit")
        except GitHubApiError:
            return None
        rate = data.get("rate") or {}
        if "remaining" not in rate:
            return None
        return RateLimitInfo(
            remaining=int(rate["remaining"]),
            reset=datetime.fromtimestamp(int(rate.get("reset", 0)), tz=timezone.utc),
        )

    async def check_health(self) -> bool:
        # /rate_limit does not count against the quota.
        await self._get("/rate_limit")
        return True

    async def get_overview(self) -> GitHubOverview:
        profile, repositories, activities = await asyncio.gather(
            self.fetch_profile(),
            self.fetch_repositories(),
            self.fetch_activities(),
        )
        commits = await self.fetch_recent_commits(repositories)
        return GitHubOverview(
            profile=profile,
            stats=calculate_stats(repositories),
            commits=commits,
            activities=activities,
        )


def calculate_stats(repositories: list[GitHubRepository]) -> GitHubStats:
    languages: dict[str, int] = {}
    for r in repositories:
        if r.language:
            languages[r.language] = languages.get(r.language, 0) + 1

    most_starred = max(repositories, key=lambda r: r.stargazers_count, default=None)
    most_forked = max(repositories, key=lambda r: r.forks_count, default=None)
    forked = sum(1 for r in repositories if r.fork)
    return GitHubStats(
        total_repositories=len(repositories),
        original_repositories=len(repositories) - forked,
        forked_repositories=forked,
        total_stars=sum(r.stargazers_count for r in repositories),
        total_forks=sum(r.forks_count for r in repositories),
        total_watchers=sum(r.watchers_count for r in repositories),
        total_open_issues=sum(r.open_issues_count for r in repositories),
        total_size_kb=sum(r.size for r in repositories),
        languages=dict(sorted(languages.items(), key=lambda kv: (-kv[1], kv[0]))),
        most_starred_repository=most_starred.name if most_starred else None,
        most_forked_repository=most_forked.name if most_forked else None,
    )


def summarize_event(event: GitHubEvent) -> GitHubActivity:
    p = event.payload
    repo = event.repo or "unknown repository"
    if event.type == "PushEvent":
        n = int(p.get("size", len(p.get("commits") or [])) or 0)
        ref = str(p.get("ref", "")).removeprefix("refs/heads/")
        description = f"Pushed {n} commit{'s' if n != 1 else ''} to {ref or 'a branch'} in {repo}"
    elif event.type == "CreateEvent":
        ref_type = p.get("ref_type", "repository")
        description = (
            f"Created repository {repo}"
            if ref_type == "repository"
            else f"Created {ref_type} {p.get('ref')} in {repo}"
        )
    elif event.type == "DeleteEvent":
        description = f"Deleted {p.get('ref_type', 'ref')} {p.get('ref')} in {repo}"
    elif event.type == "WatchEvent":
        description = f"Starred {repo}"
    elif event.type == "ForkEvent":
        forkee = (p.get("forkee") or {}).get("full_name")
        description = f"Forked {repo}" + (f" to {forkee}" if forkee else "")
    elif event.type == "IssuesEvent":
        number = (p.get("issue") or {}).get("number")
        description = f"{str(p.get('action', 'updated')).capitalize()} issue #{number} in {repo}"
    elif event.type == "IssueCommentEvent":
        number = (p.get("issue") or {}).get("number")
        description = f"Commented on issue #{number} in {repo}"
    elif event.type == "PullRequestEvent":
        number = p.get("number") or (p.get("pull_request") or {}).get("number")
        description = (
            f"{str(p.get('action', 'updated')).capitalize()} pull request #{number} in {repo}"
        )
    elif event.type == "PullRequestReviewEvent":
        number = (p.get("pull_request") or {}).get("number")
        description = f"Reviewed pull request #{number} in {repo}"
    elif event.type == "ReleaseEvent":
        tag = (p.get("release") or {}).get("tag_name")
        description = f"Published release {tag} in {repo}"
    elif event.type == "PublicEvent":
        description = f"Made {repo} public"
    else:
        description = f"{event.type.removesuffix('Event')} activity in {repo}"

    return GitHubActivity(
        id=event.id,
        type=event.type,
        repo=event.repo,
        description=description,
        created_at=event.created_at,
        url=f"https://github.com/{event.repo}" if event.repo else None,
    )


# --- Module Notes -----------------------------------------------------------
# No retries here: every read is cached, and a failed fetch is reported to the caller.
