"""
Health Check Routes

Greeting, liveness, and readiness endpoints.
"""

import logging
from datetime import UTC, datetime

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse, PlainTextResponse

from quackbridge import __version__
from quackbridge.models.api import HealthResponse, ReadinessResponse

logger = logging.getLogger(__name__)

router = APIRouter()

GREETING = "Quack! 👋"


@router.get("/", response_class=PlainTextResponse)
async def greeting() -> str:
    """Static greeting for humans opening the agent URL in a browser."""
    return GREETING


@router.get("/health", response_model=HealthResponse, status_code=status.HTTP_200_OK)
async def health() -> HealthResponse:
    """
    Basic liveness check.

    Returns 200 OK if the service is running, with the number of user
    databases currently held open.
    """
    from quackbridge.api.main import app_state

    registry = app_state.get("registry")
    return HealthResponse(
        status="healthy",
        version=__version__,
        timestamp=datetime.now(UTC).isoformat(),
        open_databases=len(registry) if registry is not None else 0,
    )


@router.get("/ready", status_code=status.HTTP_200_OK)
async def readiness() -> JSONResponse:
    """
    Readiness check for service dependencies.

    Returns:
        200 OK if the registry, verifier and pipeline are initialized
        503 Service Unavailable otherwise
    """
    from quackbridge.api.main import app_state

    checks = {
        name: app_state.get(name) is not None for name in ("registry", "verifier", "pipeline")
    }
    all_ready = all(checks.values())
    for name, ok in checks.items():
        if not ok:
            logger.warning(f"{name} check: FAILED (not initialized)")

    response_data = ReadinessResponse(
        status="ready" if all_ready else "not_ready",
        version=__version__,
        timestamp=datetime.now(UTC).isoformat(),
        checks=checks,
    )
    status_code = status.HTTP_200_OK if all_ready else status.HTTP_503_SERVICE_UNAVAILABLE

    return JSONResponse(status_code=status_code, content=response_data.model_dump())
