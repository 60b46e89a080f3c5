"""
Health Routes
=============

FastAPI routes for health check endpoints.
"""

from fastapi import APIRouter

from htmlshot.config.settings import get_settings
from htmlshot.models.schemas import HealthStatus

router = APIRouter(prefix="/api/v1", tags=["Health"])


@router.get("/health", response_model=HealthStatus)
async def health_check() -> HealthStatus:
    """Basic health check endpoint."""
    settings = get_settings()
    return HealthStatus(
        status="healthy",
        version=settings.app_version,
        disks=settings.disk_config(),
    )
