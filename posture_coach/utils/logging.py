"""
Logging utilities for the Posture Coach backend.

Provides standardized logger configuration.

LOGGING RULES:
- NEVER log the OpenRouter API key or Authorization headers
- NEVER log full raw LLM responses at INFO level (use DEBUG, truncated)
- Free-text questionnaire notes are logged only as part of the profile summary

Acceptable logging:
- High-level events (e.g., "Selecting exercises", "Catalogs loaded")
- LLM selections and resolution outcomes (exact/fuzzy/unresolved)
- Retry attempts with their delay
- Error codes and sanitized error messages
"""

import logging
from typing import Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def get_logger(name: str, level: Optional[int] = None) -> logging.Logger:
    """
    Get a configured logger for the specified module.

    Args:
        name: Module name (typically __name__)
        level: Optional logging level (defaults to INFO)

    Returns:
        Configured logger instance

    Usage:
        >>> from posture_coach.utils.logging import get_logger
        >>> logger = get_logger(__name__)
        >>> logger.info("Catalogs loaded")
    """
    logger = logging.getLogger(name)

    if level is None:
        level = logging.INFO

    logger.setLevel(level)

    # Add handler if not already configured (avoid duplicate handlers)
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger
