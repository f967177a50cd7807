"""
ghfolio.errors

Domain exceptions shared by the GitHub client, services and API layer.

Responsibilities:
- Carry upstream (GitHub) failure details up to the API layer.
- Give the API layer distinct types to map onto HTTP status codes.
"""

from __future__ import annotations


class GitHubConfigError(RuntimeError):
    """Raised when the service is started without the GitHub settings it needs."""


class GitHubApiError(RuntimeError):
    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        rate_limit_remaining: int | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.rate_limit_remaining = rate_limit_remaining


class GitHubNotFoundError(GitHubApiError):
    pass


class ProjectNotFoundError(LookupError):
    def __init__(self, project_id: int, reason: str = "not found") -> None:
        super().__init__(f"Project with ID {project_id} {reason}")
        self.project_id = project_id


class InvalidActivityTypeError(ValueError):
    def __init__(self, activity_type: str) -> None:
        super().__init__(f"Invalid activity type: {activity_type}")
        self.activity_type = activity_type


class WebhookSignatureError(PermissionError):
    pass


# --- Module Notes -----------------------------------------------------------
# `ghfolio.api.errors` registers one FastAPI exception handler per type defined here.
