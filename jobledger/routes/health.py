"""
Health check route for the Job Ledger backend.

This endpoint is PUBLIC (no authentication required) and provides a simple
status check for load balancers, monitoring, and deployment verification.
"""

from fastapi import APIRouter

from jobledger.config import settings
from jobledger.schemas.health import HealthResponse
from jobledger.utils.logging import get_logger

logger = get_logger(__name__)

# Mounted at root level in main.py
router = APIRouter()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check endpoint",
    description=(
        "Public health check endpoint (no authentication required). "
        "Reports that the API is up and which record store backend it uses."
    ),
    status_code=200,
)
async def health_check() -> HealthResponse:
    """
    Public health check endpoint.

    Example response:
        {
            "status": "ok",
            "service": "jobledger-backend",
            "store_backend": "supabase"
        }
    """
    logger.debug("Health check endpoint called")

    return HealthResponse(status="ok", store_backend=settings.STORE_BACKEND)
