"""
LLM components for the Posture Coach backend.

1. Catalog Selection (single-shot chat completion, two steps)
   - Exercise selection from the user profile
   - Product selection from the selected exercises
   - Prompt templates in: posture_coach/agents/selection/prompts.py
   - Orchestration in: posture_coach/services/recommendation_service.py

The model only ever chooses among closed catalogs; its answers are mapped
back onto canonical entries by the recommendation service.
"""
