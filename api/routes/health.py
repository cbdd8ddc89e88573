"""
Health check endpoints.

Provides endpoints for monitoring application health and readiness.
"""

from fastapi import APIRouter
from pydantic import BaseModel

from shared.config import get_settings

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    version: str


class ReadinessResponse(BaseModel):
    """Readiness check response model."""

    status: str
    database: str
    email: str
    webhook_verification: str


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """
    Basic health check endpoint.

    Returns 200 if the API is running.
    """
    return HealthResponse(status="healthy", version=get_settings().app_version)


@router.get("/ready", response_model=ReadinessResponse)
async def readiness_check() -> ReadinessResponse:
    """
    Readiness check endpoint.

    Reports whether the Supabase and email settings are present. The API is
    ready when the database is configured; email and webhook verification
    are optional.
    """
    settings = get_settings()
    database_ready = bool(
        settings.supabase_url
        and settings.supabase_service_role_key
        and settings.supabase_jwt_secret
    )
    return ReadinessResponse(
        status="ready" if database_ready else "not_ready",
        database="configured" if database_ready else "not_configured",
        email="configured" if settings.resend_api_key else "disabled",
        webhook_verification="enabled" if settings.payment_webhook_token else "disabled",
    )
