"""
FastAPI routes for the product endpoints.

Endpoints:
- POST /products/recommend: LLM selection of 3 products for chosen exercises
- GET /products: Browse the catalog with an optional label search
- GET /products/{label}: Single product by label (case-insensitive)
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from posture_coach.routes.dependencies import get_catalog_store, get_recommendation_service
from posture_coach.schemas.recommendations import (
    ErrorResponse,
    ListMeta,
    ProductDetailResponse,
    ProductListResponse,
    ProductRecommendationMeta,
    ProductRecommendationRequest,
    ProductRecommendationResponse,
)
from posture_coach.services.catalog_service import CatalogStore
from posture_coach.services.recommendation_service import RecommendationService
from posture_coach.utils.errors import ErrorCode, ServiceError
from posture_coach.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(
    prefix="/products",
    tags=["products"]
)

DEFAULT_PAGE_SIZE = 50


@router.post(
    "/recommend",
    response_model=ProductRecommendationResponse,
    status_code=200,
    summary="Recommend products",
    responses={
        400: {"model": ErrorResponse, "description": "Invalid body or unknown exercises"},
        500: {"model": ErrorResponse, "description": "Catalog unavailable or nothing resolved"},
        503: {"model": ErrorResponse, "description": "LLM failure (code preserved)"},
    },
    description="""
    Selects 3 products from the catalog that support the given exercises.

    Exercise names are looked up case-insensitively; unknown names are
    skipped. If none is known the request fails with EXERCISES_NOT_FOUND.
    """
)
async def recommend_products_endpoint(
    request: ProductRecommendationRequest,
    catalogs: CatalogStore = Depends(get_catalog_store),
    service: RecommendationService = Depends(get_recommendation_service),
) -> ProductRecommendationResponse:
    logger.info(f"POST /products/recommend for exercises {request.exercise_ids}")

    exercises = catalogs.exercises.get_many(request.exercise_ids)
    if not exercises:
        raise ServiceError(
            ErrorCode.EXERCISES_NOT_FOUND,
            "None of the provided exercise names could be found.",
            {"requested": request.exercise_ids},
        )

    outcome = await service.recommend_products(exercises)

    logger.info(f"Returning {len(outcome.entries)} products ({len(outcome.unresolved)} unresolved)")
    return ProductRecommendationResponse(
        products=outcome.entries,
        meta=ProductRecommendationMeta(
            requested=len(outcome.requested),
            resolved=len(outcome.entries),
            resolution=outcome.records,
            unresolved=outcome.unresolved,
            reasoning=outcome.reasoning,
            for_exercises=[exercise.name for exercise in exercises],
        ),
    )


@router.get(
    "",
    response_model=ProductListResponse,
    summary="List products",
)
async def list_products_endpoint(
    search: Optional[str] = Query(None, description="Case-insensitive label substring", examples=["tapis"]),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    catalogs: CatalogStore = Depends(get_catalog_store),
) -> ProductListResponse:
    matches = catalogs.products.search(search)
    page = matches[offset:offset + limit]

    return ProductListResponse(
        products=page,
        meta=ListMeta(
            total=len(catalogs.products),
            filtered=len(matches),
            returned=len(page),
            limit=limit,
            offset=offset,
        ),
    )


@router.get(
    "/{label}",
    response_model=ProductDetailResponse,
    summary="Get one product",
    responses={404: {"model": ErrorResponse}},
)
async def get_product_endpoint(
    label: str,
    catalogs: CatalogStore = Depends(get_catalog_store),
) -> ProductDetailResponse:
    product = catalogs.products.get(label)
    if product is None:
        raise ServiceError(ErrorCode.NOT_FOUND, f'Product "{label}" not found.')
    return ProductDetailResponse(product=product)
