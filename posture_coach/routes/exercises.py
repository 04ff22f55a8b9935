"""
FastAPI routes for the exercise endpoints.

Endpoints:
- POST /exercises/recommend: LLM selection of 3 exercises from questionnaire answers
- GET /exercises: Browse the catalog with optional filters and pagination
- GET /exercises/{name}: Single exercise by name (case-insensitive)
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from posture_coach.routes.dependencies import get_catalog_store, get_recommendation_service
from posture_coach.schemas.profile import UserProfile
from posture_coach.schemas.recommendations import (
    ErrorResponse,
    ExerciseDetailResponse,
    ExerciseListResponse,
    ExerciseRecommendationMeta,
    ExerciseRecommendationRequest,
    ExerciseRecommendationResponse,
    ListMeta,
)
from posture_coach.services.catalog_service import CatalogStore
from posture_coach.services.recommendation_service import RecommendationService
from posture_coach.utils.errors import ErrorCode, ServiceError
from posture_coach.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(
    prefix="/exercises",
    tags=["exercises"]
)

DEFAULT_PAGE_SIZE = 50


# ============================================================================
# ENDPOINTS
# ============================================================================

@router.post(
    "/recommend",
    response_model=ExerciseRecommendationResponse,
    status_code=200,
    summary="Recommend exercises",
    responses={
        400: {"model": ErrorResponse, "description": "Invalid questionnaire"},
        500: {"model": ErrorResponse, "description": "Catalog unavailable or nothing resolved"},
        503: {"model": ErrorResponse, "description": "LLM failure (code preserved)"},
    },
    description="""
    Selects 3 exercises from the catalog for the user's questionnaire answers.

    **Flow:**
    1. Questionnaire answers are validated and turned into a user profile
    2. The LLM picks 3 names from the full exercise list
    3. Each name is resolved onto the catalog (exact, then fuzzy)
    4. Resolved exercises are returned with resolution metadata

    Partial results (fewer than 3 resolved) are still a success; see
    `meta.unresolved`.
    """
)
async def recommend_exercises_endpoint(
    request: ExerciseRecommendationRequest,
    service: RecommendationService = Depends(get_recommendation_service),
) -> ExerciseRecommendationResponse:
    profile = UserProfile.from_questionnaire(request.questionnaire)
    logger.info(
        f"POST /exercises/recommend: level={profile.fitness_level}, "
        f"goals={profile.goals}, target_muscles={profile.target_muscles}"
    )

    outcome = await service.recommend_exercises(profile)

    logger.info(f"Returning {len(outcome.entries)} exercises ({len(outcome.unresolved)} unresolved)")
    return ExerciseRecommendationResponse(
        exercises=outcome.entries,
        meta=ExerciseRecommendationMeta(
            requested=len(outcome.requested),
            resolved=len(outcome.entries),
            resolution=outcome.records,
            unresolved=outcome.unresolved,
            reasoning=outcome.reasoning,
            user_profile=profile,
        ),
    )


@router.get(
    "",
    response_model=ExerciseListResponse,
    summary="List exercises",
    description="Browse the exercise catalog. All filters are exact matches except `muscle` (substring over primary and secondary muscles)."
)
async def list_exercises_endpoint(
    level: Optional[str] = Query(None, examples=["beginner"]),
    equipment: Optional[str] = Query(None, examples=["body only"]),
    muscle: Optional[str] = Query(None, examples=["lower back"]),
    category: Optional[str] = Query(None, examples=["stretching"]),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    catalogs: CatalogStore = Depends(get_catalog_store),
) -> ExerciseListResponse:
    matches = catalogs.exercises.filter(level=level, equipment=equipment, category=category, muscle=muscle)
    page = matches[offset:offset + limit]

    return ExerciseListResponse(
        exercises=page,
        meta=ListMeta(
            total=len(catalogs.exercises),
            filtered=len(matches),
            returned=len(page),
            limit=limit,
            offset=offset,
        ),
    )


@router.get(
    "/{name}",
    response_model=ExerciseDetailResponse,
    summary="Get one exercise",
    responses={404: {"model": ErrorResponse}},
)
async def get_exercise_endpoint(
    name: str,
    catalogs: CatalogStore = Depends(get_catalog_store),
) -> ExerciseDetailResponse:
    exercise = catalogs.exercises.get(name)
    if exercise is None:
        raise ServiceError(ErrorCode.NOT_FOUND, f'Exercise "{name}" not found.')
    return ExerciseDetailResponse(exercise=exercise)
