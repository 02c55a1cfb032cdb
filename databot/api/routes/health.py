"""
Health Check Routes

FastAPI endpoints for service health and readiness checks.
"""

import logging
from datetime import UTC, datetime

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from databot.models.events import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health", response_model=HealthResponse, status_code=status.HTTP_200_OK)
async def health() -> HealthResponse:
    """
    Basic liveness check.

    Returns 200 OK if the service is running.
    """
    return HealthResponse(
        status="healthy",
        version="0.1.0",
        timestamp=datetime.now(UTC).isoformat(),
    )


@router.get("/ready", status_code=status.HTTP_200_OK)
async def readiness() -> JSONResponse:
    """
    Readiness check.

    Checks that the credential cache and pipeline were built at startup.
    Does not call Google APIs.

    Returns:
        200 OK if all checks pass
        503 Service Unavailable if any check fails
    """
    from databot.api.main import app_state

    checks = {
        "credentials": app_state.get("credentials") is not None,
        "pipeline": app_state.get("pipeline") is not None,
    }
    all_ready = all(checks.values())
    if not all_ready:
        logger.warning("Readiness check failed", extra={"checks": checks})

    return JSONResponse(
        status_code=status.HTTP_200_OK if all_ready else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"status": "ready" if all_ready else "not_ready", "checks": checks},
    )
