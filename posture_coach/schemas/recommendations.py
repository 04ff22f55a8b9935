"""
Pydantic schemas for the recommendation endpoints.

These models define the request/response contracts of
POST /exercises/recommend and POST /products/recommend.
"""

from typing import Any, List, Literal, Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from posture_coach.schemas.catalog import ExerciseEntry, ProductEntry
from posture_coach.schemas.profile import QuestionnaireAnswers, UserProfile

_CAMEL_CONFIG = {
    "populate_by_name": True,
    "alias_generator": to_camel,
}

# ============================================================================
# REQUEST MODELS
# ============================================================================

class ExerciseRecommendationRequest(BaseModel):
    """
    Request to recommend exercises from questionnaire answers.

    The wizard sends `{"questionnaire": {...}}`; a bare questionnaire
    object is accepted as well.
    """
    questionnaire: QuestionnaireAnswers = Field(
        default_factory=QuestionnaireAnswers,
        description="Raw questionnaire answers"
    )

    @model_validator(mode="before")
    @classmethod
    def wrap_bare_questionnaire(cls, data: Any) -> Any:
        if isinstance(data, dict) and "questionnaire" not in data:
            return {"questionnaire": data}
        return data


class ProductRecommendationRequest(BaseModel):
    """
    Request to recommend products for a list of exercises.

    Exercise names are accepted under `exerciseIds`, `exerciseNames` or
    `exercises`.
    """
    exercise_ids: List[str] = Field(
        ...,
        validation_alias=AliasChoices("exerciseIds", "exerciseNames", "exercises", "exercise_ids"),
        serialization_alias="exerciseIds",
        min_length=1,
        description="Names of the exercises selected in the previous step",
        examples=[["Bodyweight Squat", "Plank", "Cat Stretch"]]
    )

    @field_validator("exercise_ids")
    @classmethod
    def validate_names(cls, v: List[str]) -> List[str]:
        """Reject blank names."""
        names = [name.strip() for name in v]
        if any(not name for name in names):
            raise ValueError("exercise names must be non-empty strings")
        return names


# ============================================================================
# RESPONSE MODELS
# ============================================================================

class ResolutionRecord(BaseModel):
    """
    How one name returned by the LLM was mapped onto the catalog.

    Exposed for debugging only; it never drives control flow.
    """
    requested: str = Field(..., description="Name as returned by the LLM")
    resolved: str = Field(..., description="Canonical catalog name")
    method: Literal["exact", "fuzzy"] = Field(..., description="Resolution method")
    distance: Optional[int] = Field(None, description="Edit distance (fuzzy matches only)")


class RecommendationMeta(BaseModel):
    """Metadata shared by both recommendation responses."""
    requested: int = Field(..., description="Number of names returned by the LLM (after truncation)")
    resolved: int = Field(..., description="Number of names resolved to catalog entries")
    resolution: List[ResolutionRecord] = Field(default_factory=list)
    unresolved: List[str] = Field(default_factory=list, description="Names that matched nothing")
    reasoning: Optional[str] = Field(None, description="The model's explanation of its choice")

    model_config = _CAMEL_CONFIG


class ExerciseRecommendationMeta(RecommendationMeta):
    user_profile: UserProfile


class ProductRecommendationMeta(RecommendationMeta):
    for_exercises: List[str] = Field(..., description="Exercises the products were chosen for")


class ExerciseRecommendationResponse(BaseModel):
    """Response of POST /exercises/recommend."""
    success: bool = True
    exercises: List[ExerciseEntry]
    meta: ExerciseRecommendationMeta


class ProductRecommendationResponse(BaseModel):
    """Response of POST /products/recommend."""
    success: bool = True
    products: List[ProductEntry]
    meta: ProductRecommendationMeta


class ListMeta(BaseModel):
    """Pagination metadata of the catalog listing endpoints."""
    total: int
    filtered: int
    returned: int
    limit: int
    offset: int


class ExerciseListResponse(BaseModel):
    success: bool = True
    exercises: List[ExerciseEntry]
    meta: ListMeta


class ExerciseDetailResponse(BaseModel):
    success: bool = True
    exercise: ExerciseEntry


class ProductListResponse(BaseModel):
    success: bool = True
    products: List[ProductEntry]
    meta: ListMeta


class ProductDetailResponse(BaseModel):
    success: bool = True
    product: ProductEntry


class ErrorResponse(BaseModel):
    """
    Body of every error response.

    `code` is an ErrorCode value; LLM failures keep their original code so
    clients can tell a rate limit from a timeout.
    """
    error: bool = True
    code: str = Field(..., examples=["LLM_RATE_LIMIT", "VALIDATION_ERROR"])
    message: str
    details: Optional[Any] = None
