"""
Health check endpoints.

Provides endpoints for monitoring application health and readiness.
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from shared.config import Settings
from ..dependencies import get_app_settings

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    version: str


class ReadinessResponse(BaseModel):
    """Readiness check response model."""

    status: str
    profile_store: str
    directory: str


@router.get("/health", response_model=HealthResponse)
async def health_check(settings: Settings = Depends(get_app_settings)) -> HealthResponse:
    """
    Basic health check endpoint.

    Returns 200 if the API is running.
    """
    return HealthResponse(status="healthy", version=settings.app_version)


@router.get("/ready", response_model=ReadinessResponse)
async def readiness_check(settings: Settings = Depends(get_app_settings)) -> ReadinessResponse:
    """
    Readiness check endpoint.

    Reports which profile store is in use and whether directory
    credentials are configured. Does not call either backend.
    """
    directory_ready = bool(settings.intra_client_id and settings.intra_client_secret)
    if settings.profile_store == "supabase":
        store_ready = bool(settings.supabase_url and settings.supabase_service_role_key)
    else:
        store_ready = True

    return ReadinessResponse(
        status="ready" if directory_ready and store_ready else "degraded",
        profile_store=settings.profile_store if store_ready else "not configured",
        directory="configured" if directory_ready else "missing credentials",
    )
