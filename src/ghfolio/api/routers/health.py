"""
ghfolio.api.routers.health

Health and readiness endpoints.

Responsibilities:
- Provide liveness probe (`/healthz`).
- Provide readiness probe (`/readyz`) with Redis connectivity validation.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from starlette.status import HTTP_503_SERVICE_UNAVAILABLE

from ghfolio.api.deps import cache_dep
from ghfolio.cache.service import CacheService

router = APIRouter()


@router.get("/healthz")
async def healthz() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/readyz")
async def readyz(cache: CacheService = Depends(cache_dep)) -> dict[str, str]:
    if not await cache.is_healthy():
        raise HTTPException(status_code=HTTP_503_SERVICE_UNAVAILABLE, detail="Cache unavailable")
    return {"status": "ready"}


# --- Module Notes -----------------------------------------------------------
# Kubernetes typically uses /healthz for liveness and /readyz for readiness gating;
# the detailed dependency report lives at /system/health.
