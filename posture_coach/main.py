"""
FastAPI application entry point for the Posture Coach backend.

This module creates the FastAPI app instance, loads the catalogs in the
lifespan, registers the exception handlers and all routers.
"""

import logging
from contextlib import asynccontextmanager
from typing import List

import httpx
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from posture_coach import __version__
from posture_coach.config import settings
from posture_coach.routes.exercises import router as exercises_router
from posture_coach.routes.health import router as health_router
from posture_coach.routes.products import router as products_router
from posture_coach.schemas.recommendations import ErrorResponse
from posture_coach.services.catalog_service import CatalogStore
from posture_coach.services.llm_gateway import LLMGateway
from posture_coach.services.recommendation_service import RecommendationService
from posture_coach.utils.errors import ErrorCode, ServiceError
from posture_coach.utils.logging import LOG_FORMAT

# Configure logging
logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format=LOG_FORMAT
)

logger = logging.getLogger(__name__)


def _get_cors_origins() -> List[str]:
    """
    Get allowed CORS origins based on environment.

    Environment-based configuration:
    - ENVIRONMENT=production: Uses CORS_ALLOWED_ORIGINS env var
    - ENVIRONMENT=testing/development: Allows all origins (the Vite dev
      server runs on its own port)

    Returns:
        List of allowed origin URLs, or ["*"] for development.
    """
    if settings.is_production():
        origins = settings.CORS_ALLOWED_ORIGINS
        if origins:
            logger.info(f"CORS configured for production with {len(origins)} allowed origins")
        else:
            logger.warning(
                "CORS_ALLOWED_ORIGINS not set in production. "
                "No web origins allowed. Set CORS_ALLOWED_ORIGINS for the web client."
            )
        return list(origins)

    logger.info(f"CORS configured for {settings.ENVIRONMENT}: allowing all origins")
    return ["*"]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Load the catalogs and build the shared services.

    A catalog that fails to load aborts startup: CatalogLoadError is not
    caught here.
    """
    catalogs = CatalogStore.from_paths(
        settings.EXERCISES_JSON_PATH,
        settings.PRODUCTS_JSON_PATH,
        seed=settings.CATALOG_SEED,
    )

    async with httpx.AsyncClient(timeout=settings.LLM_TIMEOUT_SECONDS) as http_client:
        gateway = LLMGateway.from_settings(client=http_client)
        app.state.catalogs = catalogs
        app.state.recommendation_service = RecommendationService.from_settings(catalogs, gateway)

        logger.info(
            f"Catalogs ready: {len(catalogs.exercises)} exercises, {len(catalogs.products)} products. "
            f"LLM model: {settings.LLM_MODEL}"
        )
        yield

        app.state.catalogs = None
        app.state.recommendation_service = None

    logger.info("Shutdown complete")


# Create FastAPI app
app = FastAPI(
    title="Posture Coach API",
    description="Backend service for the Decathlon posture coach wizard",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)


def _error_response(status_code: int, code: str, message: str, details=None) -> JSONResponse:
    body = ErrorResponse(code=code, message=message, details=details)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    """Map a ServiceError to its HTTP status; the error code is returned unchanged."""
    if exc.code.is_llm_failure:
        logger.error(f"LLM failure on {request.method} {request.url.path}: {exc.code.value} - {exc.message}")
    elif exc.http_status >= 500:
        logger.error(f"Error on {request.method} {request.url.path}: {exc.code.value} - {exc.message}")
    else:
        logger.info(f"{exc.code.value} on {request.method} {request.url.path}: {exc.message}")

    return _error_response(exc.http_status, exc.code.value, exc.message, exc.details)


# Custom validation error handler: invalid input is a 400, reported before any LLM call
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Log detailed validation errors and return them in the standard error body."""
    logger.error(
        f"Validation error on {request.method} {request.url.path}: {exc.errors()}"
    )

    details = [
        {
            "loc": [str(part) for part in error.get("loc", ())],
            "msg": error.get("msg", ""),
            "type": error.get("type", ""),
        }
        for error in exc.errors()
    ]
    return _error_response(
        status.HTTP_400_BAD_REQUEST,
        ErrorCode.VALIDATION_ERROR.value,
        "Invalid request body",
        details,
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        ErrorCode.INTERNAL_ERROR.value,
        "An unexpected error occurred.",
    )


# Configure CORS with environment-based origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=_get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers
app.include_router(health_router)
app.include_router(exercises_router)
app.include_router(products_router)

logger.info("FastAPI app initialized successfully")
