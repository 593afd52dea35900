"""
Health Check Routes

Liveness only: the service has no dependency worth probing besides the
upstream provider, and probing it would spend quota.
"""

from datetime import datetime, timezone

from fastapi import APIRouter

from retort.application.api.dependencies import SettingsDep
from retort.application.api.models import HealthResponse

router = APIRouter(prefix="/health", tags=["Health"])


@router.get("", response_model=HealthResponse)
async def health_check(settings: SettingsDep):
    """Quick health check endpoint for load balancers."""
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        version=settings.app.APP_VERSION,
        models=list(settings.model_candidates),
    )
