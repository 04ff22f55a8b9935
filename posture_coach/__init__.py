"""Posture Coach backend: LLM-backed exercise and product recommendations."""

__version__ = "1.0.0"
