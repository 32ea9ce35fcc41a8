"""Health check endpoints.

Provides endpoints for monitoring service health and readiness.
"""

from fastapi import APIRouter
from pydantic import BaseModel

from catalog_service.infrastructure.config import settings

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response schema."""

    status: str
    service: str
    version: str
    backend: str


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Check service health.

    Returns:
        Health status with service name, version and repository backend.
    """
    return HealthResponse(
        status="healthy",
        service="catalog-service",
        version=settings.api_version,
        backend=settings.repository_backend,
    )
