"""
Selection Prompt Templates

Contains the system prompts and user prompt builders for the two catalog
selection steps:
- Exercise selection: user profile + exercise names -> 3 exercise names
- Product selection: selected exercises + product labels -> 3 product labels

Prompt Engineering Pattern:
- System prompt fixes the role, the cardinality and the JSON output contract
- User prompt carries the context as flat "Key: value" lines and the full,
  index-prefixed candidate list (the order carries no ranking)
- Builders are pure: identical inputs render byte-identical prompts
"""

from typing import Dict, List, Sequence

from posture_coach.schemas.catalog import ExerciseEntry
from posture_coach.schemas.profile import UserProfile
from posture_coach.utils.constants import (
    MAX_EXERCISES,
    MAX_PRODUCTS,
    REASONING_FIELD,
    SELECTED_EXERCISES_FIELD,
    SELECTED_PRODUCTS_FIELD,
)

Message = Dict[str, str]


# =============================================================================
# SYSTEM PROMPTS
# =============================================================================

def build_exercise_system_prompt(count: int = MAX_EXERCISES) -> str:
    """System prompt for exercise selection."""
    return f"""You are a professional fitness coach assistant specializing in exercise recommendations and injury prevention. Your task is to select exactly {count} exercises from a provided list that best match the user's fitness profile and goals.

CRITICAL RULES:
1. You MUST select exactly {count} exercises - no more, no less
2. You MUST only select exercises from the provided list - do not invent new exercises
3. Return the EXACT exercise names as they appear in the list - spelling and capitalization must match exactly
4. Consider the user's:
   - Fitness level (beginner/intermediate/expert)
   - Goals (posture, strength, flexibility, rehabilitation)
   - Target muscles
   - Available equipment
   - Any exercises to avoid
5. Select exercises that:
   - Are appropriate for the user's fitness level
   - Target the requested muscle groups
   - Can be performed with available equipment
   - Complement each other for a balanced workout
   - Help prevent injuries through proper form focus

RESPONSE FORMAT:
You must respond with ONLY a valid JSON object, no additional text or explanation outside the JSON:
{{
  "{SELECTED_EXERCISES_FIELD}": ["Exact Exercise Name 1", "Exact Exercise Name 2", "Exact Exercise Name 3"],
  "{REASONING_FIELD}": "Brief explanation of why these exercises were chosen"
}}"""


def build_product_system_prompt(count: int = MAX_PRODUCTS) -> str:
    """System prompt for product selection."""
    return f"""You are a sports equipment specialist at Decathlon, helping customers find the perfect products for their workout routines. Your task is to recommend exactly {count} products from a provided list that would help a user perform their selected exercises better.

CRITICAL RULES:
1. You MUST select exactly {count} products - no more, no less
2. You MUST only select products from the provided list - do not suggest products not in the list
3. Return the EXACT product labels as they appear in the list - spelling must match exactly
4. Consider:
   - Equipment needed for the exercises (dumbbells, mats, bands, etc.)
   - Safety equipment (gloves, supports, etc.)
   - Performance enhancement (proper footwear, clothing, etc.)
   - Accessories that improve the workout experience
5. Prioritize products that:
   - Directly support the exercise movements
   - Match the equipment requirements of the exercises
   - Enhance safety and prevent injuries
   - Are appropriate for the exercise category (strength, cardio, stretching)

RESPONSE FORMAT:
You must respond with ONLY a valid JSON object, no additional text or explanation outside the JSON:
{{
  "{SELECTED_PRODUCTS_FIELD}": ["Exact Product Label 1", "Exact Product Label 2", "Exact Product Label 3"],
  "{REASONING_FIELD}": "Brief explanation of why these products were recommended"
}}"""


EXERCISE_SELECTION_SYSTEM_PROMPT = build_exercise_system_prompt()
PRODUCT_SELECTION_SYSTEM_PROMPT = build_product_system_prompt()


# =============================================================================
# CONTEXT FORMATTERS
# =============================================================================

def format_profile_context(profile: UserProfile) -> str:
    """Render the profile as flat "Key: value" lines, skipping empty fields."""
    preferences = profile.exercise_preferences
    lines = [f"Fitness Level: {profile.fitness_level}"]

    if profile.goals:
        lines.append(f"Goals: {', '.join(profile.goals)}")
    if profile.target_muscles:
        lines.append(f"Target Muscles: {', '.join(profile.target_muscles)}")
    if profile.available_equipment:
        lines.append(f"Available Equipment: {', '.join(profile.available_equipment)}")
    if preferences.categories:
        lines.append(f"Preferred Exercise Types: {', '.join(preferences.categories)}")
    if preferences.force_type:
        lines.append(f"Preferred Movement Type: {preferences.force_type}")
    if preferences.avoid:
        lines.append(f"Exercises to Avoid: {', '.join(preferences.avoid)}")
    if profile.additional_notes:
        lines.append(f"Additional Notes: {profile.additional_notes}")

    return "\n".join(lines)


def format_exercise_context(exercises: Sequence[ExerciseEntry]) -> str:
    """Render one block per exercise with its equipment, category, muscles and level."""
    blocks = []
    for exercise in exercises:
        blocks.append(
            f"- {exercise.name}\n"
            f"    Equipment: {exercise.equipment}\n"
            f"    Category: {exercise.category}\n"
            f"    Primary Muscles: {', '.join(exercise.primary_muscles)}\n"
            f"    Level: {exercise.level}"
        )
    return "\n".join(blocks)


def format_candidate_list(names: Sequence[str]) -> str:
    """Index-prefixed candidate lines ("1. Name")."""
    return "\n".join(f"{index}. {name}" for index, name in enumerate(names, start=1))


# =============================================================================
# USER PROMPT BUILDERS
# =============================================================================

def build_exercise_user_prompt(
    profile: UserProfile,
    exercise_names: Sequence[str],
    count: int = MAX_EXERCISES,
) -> str:
    """
    Build the user prompt for exercise selection.

    Args:
        profile: User's fitness profile
        exercise_names: Every canonical exercise name in the catalog
        count: Number of exercises to select

    Returns:
        str: Formatted user prompt
    """
    return f"""USER FITNESS PROFILE:
{format_profile_context(profile)}

AVAILABLE EXERCISES (you must select exactly {count} from this list):
{format_candidate_list(exercise_names)}

Based on the user's profile above, select the {count} most appropriate exercises from the list. Remember to return EXACT names from the list."""


def build_product_user_prompt(
    exercises: Sequence[ExerciseEntry],
    product_labels: Sequence[str],
    count: int = MAX_PRODUCTS,
) -> str:
    """
    Build the user prompt for product selection.

    Args:
        exercises: Exercises the user will perform
        product_labels: Every canonical product label in the catalog
        count: Number of products to select

    Returns:
        str: Formatted user prompt
    """
    return f"""SELECTED EXERCISES FOR THE USER:
{format_exercise_context(exercises)}

AVAILABLE PRODUCTS (you must select exactly {count} from this list):
{format_candidate_list(product_labels)}

Based on the exercises above, recommend the {count} most useful products from the list. Remember to return EXACT labels from the list."""


def build_exercise_selection_messages(
    profile: UserProfile,
    exercise_names: Sequence[str],
    count: int = MAX_EXERCISES,
) -> List[Message]:
    """System + user messages for exercise selection."""
    return [
        {"role": "system", "content": build_exercise_system_prompt(count)},
        {"role": "user", "content": build_exercise_user_prompt(profile, exercise_names, count)},
    ]


def build_product_selection_messages(
    exercises: Sequence[ExerciseEntry],
    product_labels: Sequence[str],
    count: int = MAX_PRODUCTS,
) -> List[Message]:
    """System + user messages for product selection."""
    return [
        {"role": "system", "content": build_product_system_prompt(count)},
        {"role": "user", "content": build_product_user_prompt(exercises, product_labels, count)},
    ]
