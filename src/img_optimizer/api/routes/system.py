"""System routes for health checks and the error catalog.

Endpoints:
    GET /health
        - Response: HealthResponse. Does not touch the pipeline.

    GET /errors
        - Response: ErrorCatalogResponse, one entry per error code
"""

from __future__ import annotations

from fastapi import APIRouter

from img_optimizer.api.models import ErrorCatalogResponse, HealthResponse
from img_optimizer.domain.exceptions import list_all_errors

router = APIRouter(tags=["System"])


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Liveness probe."""
    return HealthResponse()


@router.get("/errors", response_model=ErrorCatalogResponse)
async def list_errors() -> ErrorCatalogResponse:
    """List every error code with its sample message."""
    errors = list_all_errors()
    return ErrorCatalogResponse(errors=errors, total=len(errors))


__all__ = ["router"]
