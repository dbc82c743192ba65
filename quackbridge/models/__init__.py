"""API response models."""

from quackbridge.models.api import HealthResponse, ReadinessResponse

__all__ = ["HealthResponse", "ReadinessResponse"]
