#!/usr/bin/env python3
"""
Recommendation Flow Script

Runs the two LLM steps locally (exercises, then products) against the real
OpenRouter API and the configured catalogs, without starting the server or
the web wizard.

Usage:
    python scripts/try_recommendations.py
    python scripts/try_recommendations.py --goal posture --pain lower_back --level beginner
    python scripts/try_recommendations.py --pain neck --pain shoulders --equipment dumbbell --debug
"""

import argparse
import asyncio
import logging
import os
import sys

# Add the project root to the path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import httpx

from posture_coach.config import settings
from posture_coach.schemas.profile import QuestionnaireAnswers, UserProfile
from posture_coach.services.catalog_service import CatalogStore
from posture_coach.services.llm_gateway import LLMGateway
from posture_coach.services.recommendation_service import RecommendationService, ResolutionOutcome
from posture_coach.utils.errors import ServiceError

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def print_outcome(title: str, outcome: ResolutionOutcome, label_of) -> None:
    """Pretty print one selection step."""
    print("\n" + "=" * 60)
    print(title)
    print("=" * 60)

    for i, entry in enumerate(outcome.entries, 1):
        print(f"  {i}. {label_of(entry)}")

    print("\n  Resolution:")
    for record in outcome.records:
        suffix = f" (distance {record.distance})" if record.distance is not None else ""
        print(f"    '{record.requested}' -> '{record.resolved}' [{record.method}]{suffix}")
    for name in outcome.unresolved:
        print(f"    '{name}' -> not found")

    if outcome.reasoning:
        print(f"\n  Reasoning: {outcome.reasoning}")


async def run(answers: QuestionnaireAnswers) -> int:
    if not settings.OPENROUTER_API_KEY:
        print("\n⚠️  ERROR: OPENROUTER_API_KEY environment variable not set!")
        print("   Please set it in your .env file or export it:")
        print("   export OPENROUTER_API_KEY=your-openrouter-key")
        return 1

    catalogs = CatalogStore.from_paths(
        settings.EXERCISES_JSON_PATH,
        settings.PRODUCTS_JSON_PATH,
        seed=settings.CATALOG_SEED,
    )
    profile = UserProfile.from_questionnaire(answers)

    print("\n" + "=" * 60)
    print(f"POSTURE COACH FLOW ({settings.LLM_MODEL})")
    print("=" * 60)
    print(f"Catalogs: {len(catalogs.exercises)} exercises, {len(catalogs.products)} products")
    print(f"Profile:  {profile.model_dump(by_alias=True)}")

    async with httpx.AsyncClient(timeout=settings.LLM_TIMEOUT_SECONDS) as client:
        service = RecommendationService.from_settings(catalogs, LLMGateway.from_settings(client=client))

        try:
            exercises = await service.recommend_exercises(profile)
            print_outcome("EXERCISES", exercises, lambda e: f"{e.name} ({e.equipment}, {e.level})")

            products = await service.recommend_products(exercises.entries)
            print_outcome("PRODUCTS", products, lambda p: f"{p.label} - {p.price} EUR, {p.brand}")
        except ServiceError as e:
            print(f"\n❌ {e.code.value}: {e.message}")
            if e.details:
                print(f"   Details: {e.details}")
            return 1

    print()
    return 0


def main():
    parser = argparse.ArgumentParser(
        description="Run the exercise and product recommendation flow locally",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--goal", "-g", action="append", default=None,
                        help="Goal (posture, strength, flexibility, rehabilitation); repeatable")
    parser.add_argument("--pain", "-p", action="append", default=None,
                        help="Pain area (neck, shoulders, upper_back, lower_back, hips, knees); repeatable")
    parser.add_argument("--level", "-l", default="beginner",
                        help="Fitness level (beginner, intermediate, advanced)")
    parser.add_argument("--equipment", "-e", action="append", default=None,
                        help="Available equipment (body_only, dumbbell, ...); repeatable")
    parser.add_argument("--time", default="15-20", help="Available time in minutes (default: 15-20)")
    parser.add_argument("--note", "-n", default=None, help="Additional notes (optional)")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")

    args = parser.parse_args()

    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)

    answers = QuestionnaireAnswers(
        goals=args.goal or ["posture"],
        pain_areas=args.pain or [],
        fitness_level=args.level,
        equipment=args.equipment or [],
        available_time=args.time,
        additional_notes=args.note,
    )

    sys.exit(asyncio.run(run(answers)))


if __name__ == "__main__":
    main()
