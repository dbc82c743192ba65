"""
API Models

Pydantic response models for the service's JSON endpoints.
"""

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Liveness check response."""

    status: str = Field(..., description="Service status")
    version: str = Field(..., description="Service version")
    timestamp: str = Field(..., description="ISO-8601 check time")
    open_databases: int = Field(default=0, description="User databases currently open")


class ReadinessResponse(BaseModel):
    """Readiness check response."""

    status: str = Field(..., description="ready or not_ready")
    version: str = Field(..., description="Service version")
    timestamp: str = Field(..., description="ISO-8601 check time")
    checks: dict[str, bool] = Field(default_factory=dict, description="Per-dependency results")
