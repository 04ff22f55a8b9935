"""
Health check route for the Posture Coach backend.

This endpoint is PUBLIC and reports whether the catalogs were loaded at
startup, for load balancers, monitoring and deployment verification.
"""

from fastapi import APIRouter, Request

from posture_coach.schemas.health import HealthResponse
from posture_coach.utils.logging import get_logger

logger = get_logger(__name__)

# Create router with no prefix (mounted at root level in main.py)
router = APIRouter()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check endpoint",
    description=(
        "Public health check endpoint. Returns a status indicator and the "
        "number of catalog entries loaded."
    ),
    status_code=200,
)
async def health_check(request: Request) -> HealthResponse:
    """
    Public health check endpoint.

    Never fails: when the catalogs are missing, dataInitialized is false.

    Example response:
        {
            "status": "ok",
            "dataInitialized": true,
            "exercisesLoaded": 873,
            "productsLoaded": 285
        }
    """
    logger.debug("Health check endpoint called")

    catalogs = getattr(request.app.state, "catalogs", None)
    if catalogs is None:
        return HealthResponse(status="ok", data_initialized=False)

    stats = catalogs.stats()
    return HealthResponse(
        status="ok",
        data_initialized=True,
        exercises_loaded=stats["exercises_loaded"],
        products_loaded=stats["products_loaded"],
    )
