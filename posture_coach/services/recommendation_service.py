"""
Recommendation Service - LLM selection over closed catalogs

This service turns a user profile into 3 catalog exercises, and a list of
exercises into 3 catalog products. Both steps share one algorithm:

1. Take the candidate names from the catalog
2. Build the selection prompt (posture_coach/agents/selection/prompts.py)
3. Call the LLM gateway (failures propagate unchanged)
4. Check the named array field, truncate to N, warn if short
5. Resolve every returned name: exact case-insensitive lookup first, then
   fuzzy matching against the full candidate list, else unresolved
6. Return resolved entries plus resolution metadata; an empty result is a
   NO_RESULTS_RESOLVED failure, a partial one is a success

The model is told to copy names exactly but does not always do so. Fuzzy
matching (Levenshtein distance) maps near misses back onto the catalog.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Generic, List, Optional, Sequence, TypeVar

from posture_coach.agents.selection.prompts import (
    Message,
    build_exercise_selection_messages,
    build_product_selection_messages,
)
from posture_coach.config import settings
from posture_coach.schemas.catalog import ExerciseEntry, ProductEntry
from posture_coach.schemas.profile import UserProfile
from posture_coach.schemas.recommendations import ResolutionRecord
from posture_coach.services.catalog_service import Catalog, CatalogStore
from posture_coach.services.llm_gateway import LLMGateway
from posture_coach.utils.constants import (
    MAX_EXERCISES,
    MAX_PRODUCTS,
    REASONING_FIELD,
    SELECTED_EXERCISES_FIELD,
    SELECTED_PRODUCTS_FIELD,
)
from posture_coach.utils.errors import ErrorCode, ServiceError
from posture_coach.utils.fuzzy import find_closest_match
from posture_coach.utils.logging import get_logger

logger = get_logger(__name__)

EntryT = TypeVar("EntryT")


@dataclass
class Resolution(Generic[EntryT]):
    """Outcome of mapping a list of names onto a catalog."""
    entries: List[EntryT] = field(default_factory=list)
    records: List[ResolutionRecord] = field(default_factory=list)
    unresolved: List[str] = field(default_factory=list)


@dataclass
class ResolutionOutcome(Generic[EntryT]):
    """Result of one selection step, ready to be mapped to a response."""
    entries: List[EntryT]
    records: List[ResolutionRecord]
    unresolved: List[str]
    requested: List[str]
    reasoning: Optional[str] = None

    @property
    def is_partial(self) -> bool:
        return bool(self.unresolved)


def resolve_names(
    names: Sequence[str],
    catalog: Catalog[EntryT],
    max_distance: int,
) -> Resolution[EntryT]:
    """
    Map names returned by the LLM onto catalog entries.

    Exact (case-insensitive) lookup is tried first; on a miss the name is
    fuzzy-matched against every canonical name. Unmatched names are
    reported and dropped. Duplicates are kept, in order.

    Args:
        names: Names as returned by the LLM
        catalog: Catalog to resolve against
        max_distance: Largest edit distance accepted for a fuzzy match

    Returns:
        Resolution with entries, per-name records and unresolved names
    """
    resolution: Resolution[EntryT] = Resolution()
    candidates = catalog.names_list()

    for name in names:
        entry = catalog.get(name)
        if entry is not None:
            resolution.entries.append(entry)
            resolution.records.append(ResolutionRecord(
                requested=name,
                resolved=_canonical_name(entry),
                method="exact",
            ))
            continue

        closest = find_closest_match(name, candidates, max_distance)
        if closest.match is not None:
            entry = catalog.get(closest.match)
            if entry is not None:
                resolution.entries.append(entry)
                resolution.records.append(ResolutionRecord(
                    requested=name,
                    resolved=_canonical_name(entry),
                    method="fuzzy",
                    distance=closest.distance,
                ))
                logger.warning(
                    f"Fuzzy matched {catalog.kind} '{name}' -> '{_canonical_name(entry)}' "
                    f"(distance: {closest.distance})"
                )
                continue

        resolution.unresolved.append(name)
        logger.warning(f"{catalog.kind.capitalize()} not found: '{name}'")

    return resolution


def _canonical_name(entry: Any) -> str:
    return entry.name if isinstance(entry, ExerciseEntry) else entry.label


class RecommendationService:
    """
    Orchestrates prompt building, the LLM call and catalog resolution.

    Holds no per-request state; one instance is shared by all requests.
    """

    def __init__(
        self,
        catalogs: CatalogStore,
        gateway: LLMGateway,
        exercise_count: int = MAX_EXERCISES,
        product_count: int = MAX_PRODUCTS,
        exercise_max_distance: int = 5,
        product_max_distance: int = 10,
    ):
        self.catalogs = catalogs
        self.gateway = gateway
        self.exercise_count = exercise_count
        self.product_count = product_count
        self.exercise_max_distance = exercise_max_distance
        self.product_max_distance = product_max_distance

    @classmethod
    def from_settings(cls, catalogs: CatalogStore, gateway: LLMGateway) -> "RecommendationService":
        return cls(
            catalogs=catalogs,
            gateway=gateway,
            exercise_max_distance=settings.EXERCISE_MATCH_MAX_DISTANCE,
            product_max_distance=settings.PRODUCT_MATCH_MAX_DISTANCE,
        )

    async def recommend_exercises(self, profile: UserProfile) -> ResolutionOutcome[ExerciseEntry]:
        """
        Select exercises for a user profile.

        Raises:
            ServiceError: CATALOG_UNAVAILABLE, NO_RESULTS_RESOLVED, or any
                LLM_* code from the gateway
        """
        catalog = self.catalogs.exercises
        names = self._candidates(catalog)

        logger.info(f"Selecting {self.exercise_count} exercises among {len(names)} candidates")
        messages = build_exercise_selection_messages(profile, names, self.exercise_count)

        return await self._select_and_resolve(
            messages=messages,
            field_name=SELECTED_EXERCISES_FIELD,
            catalog=catalog,
            expected_count=self.exercise_count,
            max_distance=self.exercise_max_distance,
        )

    async def recommend_products(self, exercises: Sequence[ExerciseEntry]) -> ResolutionOutcome[ProductEntry]:
        """
        Select products for a list of exercises.

        Raises:
            ServiceError: CATALOG_UNAVAILABLE, NO_RESULTS_RESOLVED, or any
                LLM_* code from the gateway
        """
        catalog = self.catalogs.products
        labels = self._candidates(catalog)

        logger.info(
            f"Selecting {self.product_count} products among {len(labels)} candidates "
            f"for exercises {[e.name for e in exercises]}"
        )
        messages = build_product_selection_messages(exercises, labels, self.product_count)

        return await self._select_and_resolve(
            messages=messages,
            field_name=SELECTED_PRODUCTS_FIELD,
            catalog=catalog,
            expected_count=self.product_count,
            max_distance=self.product_max_distance,
        )

    @staticmethod
    def _candidates(catalog: Catalog[Any]) -> List[str]:
        names = catalog.names_list()
        if not names:
            raise ServiceError(
                ErrorCode.CATALOG_UNAVAILABLE,
                f"{catalog.kind.capitalize()} data not available. Please try again later.",
            )
        return names

    async def _select_and_resolve(
        self,
        messages: List[Message],
        field_name: str,
        catalog: Catalog[EntryT],
        expected_count: int,
        max_distance: int,
    ) -> ResolutionOutcome[EntryT]:
        response = await self.gateway.complete(messages)

        selected = _selected_names(response, field_name, expected_count)
        logger.info(f"LLM selected {catalog.kind}s: {selected}")

        resolution = resolve_names(selected, catalog, max_distance)

        if resolution.unresolved:
            logger.warning(f"Some {catalog.kind}s could not be resolved: {resolution.unresolved}")

        if not resolution.entries:
            raise ServiceError(
                ErrorCode.NO_RESULTS_RESOLVED,
                f"Could not find matching {catalog.kind}s. Please try again.",
                {"requested": selected, "not_found": resolution.unresolved},
            )

        reasoning = response.get(REASONING_FIELD)
        return ResolutionOutcome(
            entries=resolution.entries,
            records=resolution.records,
            unresolved=resolution.unresolved,
            requested=selected,
            reasoning=reasoning if isinstance(reasoning, str) else None,
        )


def _selected_names(response: Dict[str, Any], field_name: str, expected_count: int) -> List[str]:
    """Validate the selection array, truncate it to expected_count and warn when short."""
    selected = response.get(field_name)
    if not isinstance(selected, list):
        logger.error(f"LLM response missing '{field_name}' array")
        raise ServiceError(
            ErrorCode.LLM_INVALID_RESPONSE,
            f"Response missing {field_name} array",
            {"response": response},
        )

    names = []
    for item in selected[:expected_count]:
        name = _item_name(item)
        if name is None:
            logger.warning(f"Ignoring non-name item in '{field_name}': {item!r}")
            continue
        names.append(name)

    if len(names) < expected_count:
        logger.warning(f"LLM returned only {len(names)} items for '{field_name}', expected {expected_count}")

    return names


def _item_name(item: Any) -> Optional[str]:
    """A selection item as a name: strings as-is, objects via their "name"/"label" key."""
    if isinstance(item, str):
        return item
    if isinstance(item, dict):
        for key in ("name", "label"):
            value = item.get(key)
            if isinstance(value, str):
                return value
    return None
