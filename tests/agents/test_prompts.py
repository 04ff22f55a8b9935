"""
Tests for the selection prompt builders (posture_coach/agents/selection/prompts.py).
"""

from posture_coach.agents.selection import (
    EXERCISE_SELECTION_SYSTEM_PROMPT,
    PRODUCT_SELECTION_SYSTEM_PROMPT,
    build_exercise_selection_messages,
    build_exercise_user_prompt,
    build_product_selection_messages,
    build_product_user_prompt,
    format_profile_context,
)
from posture_coach.agents.selection.prompts import (
    build_exercise_system_prompt,
    format_candidate_list,
    format_exercise_context,
)
from posture_coach.schemas.profile import UserProfile


class TestSystemPrompts:

    def test_exercise_system_prompt_contract(self):
        assert "exactly 3 exercises" in EXERCISE_SELECTION_SYSTEM_PROMPT
        assert '"selected_exercises"' in EXERCISE_SELECTION_SYSTEM_PROMPT
        assert '"reasoning"' in EXERCISE_SELECTION_SYSTEM_PROMPT
        assert "EXACT" in EXERCISE_SELECTION_SYSTEM_PROMPT

    def test_product_system_prompt_contract(self):
        assert "exactly 3 products" in PRODUCT_SELECTION_SYSTEM_PROMPT
        assert '"selected_products"' in PRODUCT_SELECTION_SYSTEM_PROMPT
        assert "do not suggest products not in the list" in PRODUCT_SELECTION_SYSTEM_PROMPT

    def test_count_is_parameterised(self):
        assert "exactly 5 exercises" in build_exercise_system_prompt(5)


class TestContextFormatters:

    def test_profile_context_lines(self, beginner_profile):
        context = format_profile_context(beginner_profile)

        assert context.splitlines() == [
            "Fitness Level: beginner",
            "Goals: posture",
            "Target Muscles: lower back, glutes",
            "Available Equipment: body only",
            "Preferred Exercise Types: stretching, strength",
            "Exercises to Avoid: high impact",
            "Additional Notes: Activity level: light. Available time: 15-20 minutes. Pain areas: lower_back.",
        ]

    def test_empty_sections_are_omitted(self):
        profile = UserProfile(exercise_preferences={"categories": []}, available_equipment=[])

        assert format_profile_context(profile) == "Fitness Level: beginner"

    def test_movement_type_line(self):
        profile = UserProfile(exercise_preferences={"force_type": "pull"})

        assert "Preferred Movement Type: pull" in format_profile_context(profile)

    def test_exercise_context_block(self, catalog_store):
        context = format_exercise_context([catalog_store.exercises.get("Lat Pulldown")])

        assert context == (
            "- Lat Pulldown\n"
            "    Equipment: cable\n"
            "    Category: strength\n"
            "    Primary Muscles: lats\n"
            "    Level: beginner"
        )

    def test_candidate_list_is_index_prefixed(self):
        assert format_candidate_list(["Plank", "Cat Stretch"]) == "1. Plank\n2. Cat Stretch"


class TestUserPrompts:

    def test_exercise_prompt_is_deterministic(self, beginner_profile, catalog_store):
        names = catalog_store.exercises.names_list()

        first = build_exercise_user_prompt(beginner_profile, names)
        second = build_exercise_user_prompt(beginner_profile.model_copy(deep=True), list(names))

        assert first == second

    def test_product_prompt_is_deterministic(self, catalog_store):
        exercises = catalog_store.exercises.get_many(["Plank", "Cat Stretch"])
        labels = catalog_store.products.names_list()

        assert build_product_user_prompt(exercises, labels) == build_product_user_prompt(exercises, labels)

    def test_exercise_prompt_lists_every_candidate_in_order(self, beginner_profile, catalog_store):
        names = catalog_store.exercises.names_list()

        prompt = build_exercise_user_prompt(beginner_profile, names)

        assert prompt.startswith("USER FITNESS PROFILE:\nFitness Level: beginner")
        positions = [prompt.index(f"{i}. {name}") for i, name in enumerate(names, start=1)]
        assert positions == sorted(positions)

    def test_product_prompt_sections(self, catalog_store):
        exercises = catalog_store.exercises.get_many(["Plank"])

        prompt = build_product_user_prompt(exercises, ["Tapis de yoga 8mm"])

        assert prompt.startswith("SELECTED EXERCISES FOR THE USER:\n- Plank")
        assert "AVAILABLE PRODUCTS (you must select exactly 3 from this list):\n1. Tapis de yoga 8mm" in prompt


class TestMessageBuilders:

    def test_exercise_messages(self, beginner_profile):
        messages = build_exercise_selection_messages(beginner_profile, ["Plank"])

        assert messages == [
            {"role": "system", "content": EXERCISE_SELECTION_SYSTEM_PROMPT},
            {"role": "user", "content": build_exercise_user_prompt(beginner_profile, ["Plank"])},
        ]

    def test_product_messages(self, catalog_store):
        exercises = catalog_store.exercises.get_many(["Plank"])

        messages = build_product_selection_messages(exercises, ["Tapis de yoga 8mm"])

        assert messages[0] == {"role": "system", "content": PRODUCT_SELECTION_SYSTEM_PROMPT}
        assert messages[1]["role"] == "user"
