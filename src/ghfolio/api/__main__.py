"""
ghfolio.api.__main__

`python -m ghfolio.api` (or the `ghfolio` script) serves the proxy with uvicorn.

Responsibilities:
- Build the app from `GHFOLIO_*` settings.
- Trust `X-Forwarded-For` only from the configured proxies, since rate limits key on
  the client IP.
"""

from __future__ import annotations

import uvicorn

from ghfolio.api.app import create_app
from ghfolio.settings import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        create_app(settings=settings),
        host=settings.api_host,
        port=settings.api_port,
        proxy_headers=True,
        forwarded_allow_ips=settings.forwarded_allow_ips,
        log_config=None,  # records flow through the structlog formatter
    )


if __name__ == "__main__":
    main()


# --- Module Notes -----------------------------------------------------------
# `GHFOLIO_FORWARDED_ALLOW_IPS="*"` trusts any upstream; use it only behind a proxy that
# overwrites client-supplied forwarding headers.
