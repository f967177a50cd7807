"""
ghfolio.settings

Central configuration model (Pydantic Settings).

Responsibilities:
- Provide strongly-typed, env-driven settings for all layers.
- Hide secrets from repr/logging (GitHub token, webhook secret, Redis password).
- Offer a cached settings instance for dependency injection.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Every field maps to a `GHFOLIO_*` environment variable
    (e.g. `GHFOLIO_GITHUB_TOKEN`, `GHFOLIO_REDIS_URL`).
    """

    model_config = SettingsConfigDict(env_prefix="GHFOLIO_", case_sensitive=False)

    env: Literal["dev", "test", "prod"] = "dev"
    service_name: str = "ghfolio"
    log_level: str = "INFO"
    timezone: str = "UTC"

    api_host: str = "0.0.0.0"
    api_port: int = 3000
    # Proxies whose X-Forwarded-For is trusted for the client IP.
    forwarded_allow_ips: str = "127.0.0.1"

    # GitHub
    github_username: str = ""
    github_token: str = Field(default="", repr=False)
    github_api_base_url: str = "https://api.github.com"
    github_api_version: str = "2022-11-28"
    github_timeout_seconds: float = 20.0
    github_webhook_secret: str = Field(default="", repr=False)

    # Redis: a full URL wins over host/port/password.
    redis_url: str = ""
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_password: str = Field(default="", repr=False)

    # Fixed-window limiter, counted per client IP.
    rate_limit_window_seconds: int = 15 * 60
    rate_limit_max_requests: int = 100
    webhook_rate_limit_max_requests: int = 100

    # Peak RSS above this logs a warning on each request.
    memory_warning_mb: int = 400

    @property
    def redis_connection_url(self) -> str:
        if self.redis_url:
            return self.redis_url
        return f"redis://:{self.redis_password}@{self.redis_host}:{self.redis_port}"

    @property
    def redis_is_tls(self) -> bool:
        return self.redis_connection_url.lower().startswith("rediss://")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    # Cache avoids re-parsing env vars for each request dependency.
    return Settings()


# --- Module Notes -----------------------------------------------------------
# Tests build `Settings(...)` directly and pass it to `create_app`; nothing else should
# read environment variables.
