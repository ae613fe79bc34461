"""
Health check endpoint schemas.

The health endpoint is PUBLIC (no authentication required).
"""

from pydantic import BaseModel, ConfigDict, Field


class HealthResponse(BaseModel):
    """
    Response model for GET /health.

    Used by load balancers, monitoring systems, and deployment checks.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {"status": "ok", "service": "jobledger-backend", "store_backend": "supabase"}
        }
    )

    status: str = Field(
        default="ok",
        description="Health status of the API (always 'ok' if responding)",
        examples=["ok"]
    )
    service: str = Field(default="jobledger-backend", description="Service name")
    store_backend: str = Field(..., description="Configured record store backend")
