"""Health check endpoints.

Provides liveness (/health) and readiness (/health/ready) checks. Readiness
only verifies configuration; it deliberately does not call Fireflies so
probes never spend the upstream rate limit.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from src.firefeed.api.deps import get_app_settings
from src.firefeed.config import Settings

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(settings: Settings = Depends(get_app_settings)):
    """Basic liveness check. No external dependencies are checked."""
    return {"status": "ok", "environment": settings.ENVIRONMENT.value}


@router.get("/health/ready")
async def readiness_check(settings: Settings = Depends(get_app_settings)):
    """Readiness check: 200 when the Fireflies API key is configured, else 503."""
    checks = {"fireflies_api_key": "ok" if settings.fireflies_configured else "missing"}
    ready = settings.fireflies_configured

    return JSONResponse(
        status_code=status.HTTP_200_OK if ready else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "status": "ready" if ready else "degraded",
            "checks": checks,
        },
    )
