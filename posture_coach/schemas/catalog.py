"""
Pydantic models for catalog entries (exercises and products).

Entries are frozen: they are built once when the catalogs are loaded and
shared read-only by every request afterwards. Source JSON and API responses
both use camelCase keys (`primaryMuscles`, `imageUrls`, ...).
"""

from typing import Any, List, Optional

from pydantic import BaseModel, Field, computed_field, model_validator
from pydantic.alias_generators import to_camel

from posture_coach.utils.constants import DECATHLON_BASE_URL, EXERCISE_IMAGE_BASE_URL
from posture_coach.utils.fuzzy import normalize_key


def _drop_nulls(data: Any) -> Any:
    """Treat explicit nulls in the source file like missing keys so defaults apply."""
    if isinstance(data, dict):
        return {key: value for key, value in data.items() if value is not None}
    return data


class ExerciseEntry(BaseModel):
    """
    One exercise from the free-exercise-db catalog.

    Identity is the name, compared case-insensitively.
    """
    id: str = Field("", description="Catalog identifier (folder name of the images)")
    name: str = Field(..., min_length=1, description="Canonical exercise name", examples=["Bodyweight Squat"])
    force: Optional[str] = Field(None, description="push | pull | static", examples=["push"])
    level: str = Field("beginner", description="beginner | intermediate | expert")
    mechanic: Optional[str] = Field(None, description="compound | isolation")
    equipment: str = Field("body only", description="Equipment needed", examples=["dumbbell"])
    primary_muscles: List[str] = Field(default_factory=list)
    secondary_muscles: List[str] = Field(default_factory=list)
    instructions: List[str] = Field(default_factory=list, description="Ordered instruction steps")
    category: str = Field("strength", description="strength | stretching | cardio | plyometrics | ...")
    images: List[str] = Field(default_factory=list, description="Image paths relative to the image base URL")

    model_config = {
        "frozen": True,
        "populate_by_name": True,
        "alias_generator": to_camel,
    }

    @model_validator(mode="before")
    @classmethod
    def drop_null_fields(cls, data: Any) -> Any:
        return _drop_nulls(data)

    @computed_field(alias="imageUrls")  # type: ignore[prop-decorator]
    @property
    def image_urls(self) -> List[str]:
        """Fully-qualified image URLs (derived, never stored)."""
        return [f"{EXERCISE_IMAGE_BASE_URL}{path}" for path in self.images]

    @property
    def key(self) -> str:
        return normalize_key(self.name)


class ProductEntry(BaseModel):
    """
    One Decathlon product.

    Identity is the label, compared case-insensitively. Fields absent from
    the source file are filled in by synthesize_product_fields() before the
    entry is built, so every attribute is always present.
    """
    label: str = Field(..., min_length=1, description="Canonical product label", examples=["Tapis de yoga 8mm"])
    url: str = Field("", description="Product URL as found in the catalog (relative or absolute)")
    brand: str = Field(..., description="Brand name", examples=["Domyos"])
    description: str = Field(..., description="Short product description")
    price: float = Field(..., ge=0, description="Price in euros")
    rating: float = Field(..., ge=0, le=5, description="Average rating out of 5")
    reviews: int = Field(..., ge=0, description="Number of reviews")
    image: str = Field(..., description="Image URL")

    model_config = {
        "frozen": True,
        "populate_by_name": True,
        "alias_generator": to_camel,
    }

    @model_validator(mode="before")
    @classmethod
    def drop_null_fields(cls, data: Any) -> Any:
        return _drop_nulls(data)

    @computed_field(alias="fullUrl")  # type: ignore[prop-decorator]
    @property
    def full_url(self) -> str:
        """Absolute product URL; relative catalog URLs are resolved against the shop."""
        if self.url.startswith("http"):
            return self.url
        return f"{DECATHLON_BASE_URL.rstrip('/')}/{self.url.lstrip('/')}"

    @property
    def key(self) -> str:
        return normalize_key(self.label)
