"""
Questionnaire answers and the user profile derived from them.

The wizard sends raw answers (goal, pain areas, level, equipment...). They
are validated here, before any LLM call, and turned into a UserProfile
that the prompt builder renders. Profiles are built per request and never
persisted.
"""

from typing import Any, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel

from posture_coach.utils.constants import (
    DEFAULT_CATEGORIES,
    DEFAULT_EQUIPMENT,
    FITNESS_LEVEL_ALIASES,
    GOAL_CATEGORIES,
    PAIN_AREA_MUSCLES,
    PAIN_AVOID_LIST,
    PAIN_CHECK_ANSWERS,
)

FitnessLevel = Literal["beginner", "intermediate", "expert"]

_CAMEL_CONFIG = {
    "populate_by_name": True,
    "alias_generator": to_camel,
}


def _unique(values: List[str]) -> List[str]:
    """De-duplicate while keeping first-seen order."""
    return list(dict.fromkeys(values))


class QuestionnaireAnswers(BaseModel):
    """
    Raw answers from the questionnaire wizard.

    Single-choice questions may arrive as a string and multi-choice ones as
    a list; both shapes are accepted for goals, painAreas and equipment.
    """
    fitness_level: FitnessLevel = Field(
        "beginner",
        description="Self-assessed level. 'advanced' is accepted as 'expert'.",
        examples=["beginner", "intermediate", "expert"]
    )
    goals: List[str] = Field(
        default_factory=list,
        description="Goal answers",
        examples=[["posture"], ["strength", "flexibility"]]
    )
    pain_areas: List[str] = Field(
        default_factory=list,
        description="Pain areas (neck, shoulders, upper_back, lower_back, hips, knees)",
        examples=[["lower_back", "neck"]]
    )
    equipment: List[str] = Field(
        default_factory=lambda: list(DEFAULT_EQUIPMENT),
        description="Available equipment",
        examples=[["body_only", "mat"]]
    )
    activity_level: str = Field("moderate", max_length=50, examples=["sedentary", "moderate"])
    available_time: str = Field("15-20", max_length=20, description="Minutes per session", examples=["5-10", "30+"])
    additional_notes: Optional[str] = Field(None, max_length=1000)

    model_config = {
        **_CAMEL_CONFIG,
        "json_schema_extra": {
            "example": {
                "goals": ["posture"],
                "painAreas": ["lower_back"],
                "fitnessLevel": "beginner",
                "activityLevel": "light",
                "availableTime": "15-20",
                "equipment": ["mat"]
            }
        }
    }

    @field_validator("fitness_level", mode="before")
    @classmethod
    def normalize_fitness_level(cls, v: Any) -> Any:
        if v is None or v == "":
            return "beginner"
        if isinstance(v, str):
            level = v.strip().lower()
            return FITNESS_LEVEL_ALIASES.get(level, level)
        return v

    @field_validator("goals", "pain_areas", mode="before")
    @classmethod
    def coerce_to_list(cls, v: Any) -> Any:
        """Accept a single string answer as a one-element list."""
        if v is None or v == "":
            return []
        if isinstance(v, str):
            return [v]
        return v

    @field_validator("equipment", mode="before")
    @classmethod
    def coerce_equipment(cls, v: Any) -> Any:
        if v is None or v == "" or v == []:
            return list(DEFAULT_EQUIPMENT)
        if isinstance(v, str):
            return [v]
        return v


class ExercisePreferences(BaseModel):
    """Preferences that narrow the exercise choice."""
    categories: List[str] = Field(default_factory=lambda: list(DEFAULT_CATEGORIES))
    force_type: Optional[str] = Field(None, description="push | pull | static, None for any")
    avoid: List[str] = Field(default_factory=list)

    model_config = _CAMEL_CONFIG


class UserProfile(BaseModel):
    """Fitness profile used to personalize the exercise selection prompt."""
    fitness_level: FitnessLevel = "beginner"
    goals: List[str] = Field(default_factory=list)
    target_muscles: List[str] = Field(default_factory=list)
    available_equipment: List[str] = Field(default_factory=lambda: list(DEFAULT_EQUIPMENT))
    exercise_preferences: ExercisePreferences = Field(default_factory=ExercisePreferences)
    additional_notes: str = ""

    model_config = _CAMEL_CONFIG

    @classmethod
    def from_questionnaire(cls, answers: QuestionnaireAnswers) -> "UserProfile":
        """
        Build a profile from questionnaire answers.

        - Pain areas are mapped to the muscles to target
        - Goals are mapped to preferred exercise categories
        - Reporting any pain adds "high impact" to the avoid list
        """
        pain_areas = [
            area for area in answers.pain_areas
            if area and area not in PAIN_CHECK_ANSWERS
        ]

        target_muscles: List[str] = []
        for area in pain_areas:
            target_muscles.extend(PAIN_AREA_MUSCLES.get(area, []))

        categories: List[str] = []
        for goal in answers.goals:
            categories.extend(GOAL_CATEGORIES.get(goal, []))
        categories = _unique(categories) or list(DEFAULT_CATEGORIES)

        # Wizard values use underscores ("body_only"), the catalog uses spaces
        equipment = _unique([item.replace("_", " ").strip() for item in answers.equipment if item.strip()])

        notes = (
            f"Activity level: {answers.activity_level}. "
            f"Available time: {answers.available_time} minutes. "
        )
        if pain_areas:
            notes += f"Pain areas: {', '.join(pain_areas)}."
        else:
            notes += "No pain reported."
        if answers.additional_notes:
            notes += f" {answers.additional_notes.strip()}"

        return cls(
            fitness_level=answers.fitness_level,
            goals=list(answers.goals),
            target_muscles=_unique(target_muscles),
            available_equipment=equipment or list(DEFAULT_EQUIPMENT),
            exercise_preferences=ExercisePreferences(
                categories=categories,
                force_type=None,
                avoid=list(PAIN_AVOID_LIST) if pain_areas else [],
            ),
            additional_notes=notes,
        )
