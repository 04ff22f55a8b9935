"""
Tests for questionnaire parsing and UserProfile.from_questionnaire().
"""

import pytest
from pydantic import ValidationError

from posture_coach.schemas.profile import QuestionnaireAnswers, UserProfile


class TestQuestionnaireAnswers:
    """Validation of the raw wizard answers."""

    def test_accepts_camel_case_payload(self):
        answers = QuestionnaireAnswers.model_validate({
            "goals": ["posture"],
            "painAreas": ["neck"],
            "fitnessLevel": "intermediate",
            "activityLevel": "active",
            "availableTime": "30+",
            "equipment": ["dumbbell"],
        })

        assert answers.pain_areas == ["neck"]
        assert answers.fitness_level == "intermediate"
        assert answers.available_time == "30+"

    def test_defaults(self):
        answers = QuestionnaireAnswers()

        assert answers.fitness_level == "beginner"
        assert answers.goals == []
        assert answers.equipment == ["body only"]
        assert answers.activity_level == "moderate"
        assert answers.available_time == "15-20"

    def test_single_string_answers_become_lists(self):
        answers = QuestionnaireAnswers.model_validate({"goals": "strength", "painAreas": "knees", "equipment": "mat"})

        assert answers.goals == ["strength"]
        assert answers.pain_areas == ["knees"]
        assert answers.equipment == ["mat"]

    @pytest.mark.parametrize("raw,expected", [
        ("advanced", "expert"),
        ("Expert", "expert"),
        (" Beginner ", "beginner"),
        ("", "beginner"),
    ])
    def test_fitness_level_normalization(self, raw, expected):
        assert QuestionnaireAnswers(fitness_level=raw).fitness_level == expected

    def test_unknown_fitness_level_is_rejected(self):
        with pytest.raises(ValidationError):
            QuestionnaireAnswers(fitness_level="olympian")

    def test_goals_must_be_strings(self):
        with pytest.raises(ValidationError):
            QuestionnaireAnswers.model_validate({"goals": [{"nested": True}]})


class TestUserProfileFromQuestionnaire:

    def test_pain_areas_map_to_unique_muscles(self):
        answers = QuestionnaireAnswers(pain_areas=["neck", "shoulders", "upper_back"])

        profile = UserProfile.from_questionnaire(answers)

        assert profile.target_muscles == ["neck", "traps", "shoulders", "middle back", "lats"]

    def test_pain_check_answers_are_ignored(self):
        profile = UserProfile.from_questionnaire(QuestionnaireAnswers(pain_areas=["no-pain"]))

        assert profile.target_muscles == []
        assert profile.exercise_preferences.avoid == []
        assert "No pain reported." in profile.additional_notes

    def test_pain_adds_high_impact_to_avoid(self):
        profile = UserProfile.from_questionnaire(QuestionnaireAnswers(pain_areas=["has-pain", "knees"]))

        assert profile.target_muscles == ["quadriceps", "hamstrings", "calves"]
        assert profile.exercise_preferences.avoid == ["high impact"]
        assert "Pain areas: knees." in profile.additional_notes

    def test_goals_map_to_categories(self):
        profile = UserProfile.from_questionnaire(QuestionnaireAnswers(goals=["strength", "flexibility"]))

        assert profile.exercise_preferences.categories == ["strength", "powerlifting", "stretching"]

    def test_unknown_goal_defaults_to_strength(self):
        profile = UserProfile.from_questionnaire(QuestionnaireAnswers(goals=["be happy"]))

        assert profile.exercise_preferences.categories == ["strength"]

    def test_equipment_underscores_become_spaces(self):
        profile = UserProfile.from_questionnaire(QuestionnaireAnswers(equipment=["body_only", "e-z_curl_bar"]))

        assert profile.available_equipment == ["body only", "e-z curl bar"]

    def test_notes(self):
        answers = QuestionnaireAnswers(
            activity_level="sedentary",
            available_time="5-10",
            additional_notes="  Office job, long hours sitting.  ",
        )

        profile = UserProfile.from_questionnaire(answers)

        assert profile.additional_notes == (
            "Activity level: sedentary. Available time: 5-10 minutes. "
            "No pain reported. Office job, long hours sitting."
        )

    def test_profile_serializes_camel_case(self, beginner_profile):
        data = beginner_profile.model_dump(by_alias=True)

        assert data["fitnessLevel"] == "beginner"
        assert data["targetMuscles"] == ["lower back", "glutes"]
        assert data["exercisePreferences"]["forceType"] is None
