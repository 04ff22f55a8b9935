"""
Health check endpoint schemas.

The health endpoint is public and reports whether the catalogs are loaded.
"""

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """
    Response model for GET /health endpoint.

    Used by load balancers, monitoring systems, and deployment checks.
    """

    status: str = Field(
        default="ok",
        description="Health status of the API (always 'ok' if responding)",
        examples=["ok"]
    )
    data_initialized: bool = Field(
        default=False,
        alias="dataInitialized",
        description="Whether both catalogs were loaded at startup"
    )
    exercises_loaded: int = Field(default=0, alias="exercisesLoaded")
    products_loaded: int = Field(default=0, alias="productsLoaded")

    model_config = {
        "populate_by_name": True,
        "json_schema_extra": {
            "example": {
                "status": "ok",
                "dataInitialized": True,
                "exercisesLoaded": 873,
                "productsLoaded": 285
            }
        }
    }
