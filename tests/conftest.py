"""
Pytest configuration for Posture Coach backend tests.

Sets up test environment and global fixtures.
"""
import os
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

# Disable config validation during tests
# This allows tests to run without requiring real environment variables
os.environ["VALIDATE_CONFIG"] = "false"

# Set test environment variables
os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("OPENROUTER_API_KEY", "test-openrouter-key")

FIXTURES_DIR = Path(__file__).parent / "fixtures"
EXERCISES_FIXTURE = FIXTURES_DIR / "exercises.json"
PRODUCTS_FIXTURE = FIXTURES_DIR / "products.json"


@pytest.fixture
def exercises_path() -> Path:
    return EXERCISES_FIXTURE


@pytest.fixture
def products_path() -> Path:
    return PRODUCTS_FIXTURE


@pytest.fixture
def catalog_store():
    """Both fixture catalogs (7 exercises, 6 products), seed 0."""
    from posture_coach.services.catalog_service import CatalogStore

    return CatalogStore.from_paths(EXERCISES_FIXTURE, PRODUCTS_FIXTURE, seed=0)


@pytest.fixture
def mock_gateway():
    """
    Mock LLM gateway.

    Set `mock_gateway.complete.return_value` (or side_effect) to the parsed
    JSON object the model should "return".
    """
    gateway = MagicMock()
    gateway.complete = AsyncMock()
    return gateway


@pytest.fixture
def beginner_profile():
    """Profile of a beginner with lower back pain and no equipment."""
    from posture_coach.schemas.profile import QuestionnaireAnswers, UserProfile

    answers = QuestionnaireAnswers(
        goals=["posture"],
        pain_areas=["lower_back"],
        fitness_level="beginner",
        activity_level="light",
        available_time="15-20",
        equipment=["body_only"],
    )
    return UserProfile.from_questionnaire(answers)
