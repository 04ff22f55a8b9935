"""
Pydantic schemas for API request and response validation.

Catalog entries and API payloads use camelCase on the wire and snake_case
attributes in Python.
"""
