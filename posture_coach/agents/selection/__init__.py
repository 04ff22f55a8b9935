"""
Catalog Selection - Prompt templates for the two LLM selection steps.

Architecture:
- Pattern: single chat-completion call per step, JSON-object output mode
- Model: DeepSeek R1 via OpenRouter (configurable)
- Output: {"selected_exercises" | "selected_products": [...], "reasoning": "..."}

The service layer is in:
- posture_coach/services/recommendation_service.py

Prompt templates are in:
- posture_coach/agents/selection/prompts.py
"""

from posture_coach.agents.selection.prompts import (
    EXERCISE_SELECTION_SYSTEM_PROMPT,
    PRODUCT_SELECTION_SYSTEM_PROMPT,
    build_exercise_selection_messages,
    build_exercise_user_prompt,
    build_product_selection_messages,
    build_product_user_prompt,
    format_profile_context,
)

__all__ = [
    "EXERCISE_SELECTION_SYSTEM_PROMPT",
    "PRODUCT_SELECTION_SYSTEM_PROMPT",
    "build_exercise_selection_messages",
    "build_exercise_user_prompt",
    "build_product_selection_messages",
    "build_product_user_prompt",
    "format_profile_context",
]
