"""
FastAPI dependency functions for the shared application state.

The catalogs, the LLM gateway and the recommendation service are created
once by the application lifespan (see main.py) and stored on app.state.
Routes reach them through these providers so tests can swap them with
app.dependency_overrides.
"""

from fastapi import Request

from posture_coach.services.catalog_service import CatalogStore
from posture_coach.services.recommendation_service import RecommendationService
from posture_coach.utils.errors import ErrorCode, ServiceError


def get_catalog_store(request: Request) -> CatalogStore:
    """
    Return the catalogs loaded at startup.

    Raises:
        ServiceError: CATALOG_UNAVAILABLE if the lifespan did not load them
    """
    catalogs = getattr(request.app.state, "catalogs", None)
    if catalogs is None:
        raise ServiceError(
            ErrorCode.CATALOG_UNAVAILABLE,
            "Data not loaded. Please try again later.",
        )
    return catalogs


def get_recommendation_service(request: Request) -> RecommendationService:
    service = getattr(request.app.state, "recommendation_service", None)
    if service is None:
        raise ServiceError(
            ErrorCode.CATALOG_UNAVAILABLE,
            "Recommendation service not initialized. Please try again later.",
        )
    return service
