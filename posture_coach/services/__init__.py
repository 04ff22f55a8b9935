"""
Service layer for the Posture Coach backend.

Contains the business logic that:
- Loads and serves the exercise and product catalogs
- Calls the LLM through the gateway (retries, tolerant JSON parsing)
- Resolves the model's answers back onto canonical catalog entries

Services act as the glue between routes (HTTP layer) and the LLM/catalogs.
"""

from .catalog_service import (
    Catalog,
    CatalogStore,
    ExerciseCatalog,
    ProductCatalog,
    load_all,
    synthesize_product_fields,
)
from .llm_gateway import LLMGateway
from .recommendation_service import (
    RecommendationService,
    ResolutionOutcome,
    resolve_names,
)

__all__ = [
    "Catalog",
    "CatalogStore",
    "ExerciseCatalog",
    "ProductCatalog",
    "load_all",
    "synthesize_product_fields",
    "LLMGateway",
    "RecommendationService",
    "ResolutionOutcome",
    "resolve_names",
]
