"""
Configuration module for the Posture Coach backend.

Loads environment variables and validates required settings.
"""
import os
from typing import List
from dotenv import load_dotenv

# Load .env file
load_dotenv()


class Settings:
    """Application settings loaded from environment variables."""

    # OpenRouter (OpenAI-compatible chat-completion API)
    OPENROUTER_API_KEY: str = os.getenv("OPENROUTER_API_KEY", "")
    LLM_BASE_URL: str = os.getenv("LLM_BASE_URL", "https://openrouter.ai/api/v1")
    LLM_MODEL: str = os.getenv("LLM_MODEL", "deepseek/deepseek-r1")

    # OpenRouter attribution headers (optional)
    LLM_HTTP_REFERER: str = os.getenv("LLM_HTTP_REFERER", "https://decathlon-posture-coach.local")
    LLM_APP_TITLE: str = os.getenv("LLM_APP_TITLE", "Decathlon Posture Coach")

    # Generation parameters
    LLM_TEMPERATURE: float = float(os.getenv("LLM_TEMPERATURE", "0.3"))
    LLM_MAX_TOKENS: int = int(os.getenv("LLM_MAX_TOKENS", "1500"))

    # Retry policy: attempts in total, base delay doubles on each attempt
    LLM_MAX_RETRIES: int = int(os.getenv("LLM_MAX_RETRIES", "3"))
    LLM_RETRY_DELAY_SECONDS: float = float(os.getenv("LLM_RETRY_DELAY_SECONDS", "1.0"))
    LLM_TIMEOUT_SECONDS: float = float(os.getenv("LLM_TIMEOUT_SECONDS", "60"))

    # Catalog files (JSON arrays), read once at startup
    EXERCISES_JSON_PATH: str = os.getenv("EXERCISES_JSON_PATH", "./data/exercises/exercises.json")
    PRODUCTS_JSON_PATH: str = os.getenv("PRODUCTS_JSON_PATH", "./data/products/products.json")

    # Seed for synthesized product fields (price, rating, reviews)
    CATALOG_SEED: int = int(os.getenv("CATALOG_SEED", "0"))

    # Fuzzy matching tolerances (edit distance). Product labels are longer
    # and more variable than exercise names, hence the looser default.
    EXERCISE_MATCH_MAX_DISTANCE: int = int(os.getenv("EXERCISE_MATCH_MAX_DISTANCE", "5"))
    PRODUCT_MATCH_MAX_DISTANCE: int = int(os.getenv("PRODUCT_MATCH_MAX_DISTANCE", "10"))

    # Application Settings
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # CORS Settings (production only; other environments allow all origins)
    CORS_ALLOWED_ORIGINS: List[str] = [
        origin.strip()
        for origin in os.getenv("CORS_ALLOWED_ORIGINS", "").split(",")
        if origin.strip()
    ]

    @classmethod
    def validate(cls) -> None:
        """
        Validate that all required settings are configured.

        Raises:
            ValueError: If any required setting is missing or out of range.
        """
        required_settings = {
            "OPENROUTER_API_KEY": cls.OPENROUTER_API_KEY,
        }

        missing = [key for key, value in required_settings.items() if not value]

        if missing:
            raise ValueError(
                f"Missing required environment variables: {', '.join(missing)}. "
                "Please check your .env file."
            )

        if cls.LLM_MAX_RETRIES < 1:
            raise ValueError("LLM_MAX_RETRIES must be at least 1")

    @classmethod
    def is_production(cls) -> bool:
        """Check if running in production environment."""
        return cls.ENVIRONMENT.lower() == "production"

    @classmethod
    def is_development(cls) -> bool:
        """Check if running in development environment."""
        return cls.ENVIRONMENT.lower() == "development"


# Create a singleton instance
settings = Settings()

# Validate settings on module import (will fail fast if misconfigured)
# Skip validation during tests or when importing for introspection
if os.getenv("VALIDATE_CONFIG", "true").lower() == "true":
    try:
        settings.validate()
    except ValueError as e:
        # In development, warn but don't crash
        if settings.is_development():
            print(f"⚠️  Warning: {e}")
            print("   LLM-powered recommendations will not work until you configure your .env file.")
        else:
            # In production or staging, fail immediately
            raise
