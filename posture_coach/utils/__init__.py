"""Shared utilities: logging, error taxonomy, fuzzy matching, JSON extraction."""
