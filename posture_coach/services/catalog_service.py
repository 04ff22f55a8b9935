"""
Catalog Service - in-memory exercise and product catalogs.

Both catalogs are JSON arrays read once at process start. Each element
becomes one frozen entry keyed by its lower-cased name (exercises) or label
(products). Loading is all-or-nothing: a missing file, invalid JSON or an
invalid element raises CatalogLoadError and the application refuses to
start. After loading, catalogs are read-only and safe to share between
concurrent requests.

The CatalogStore is created by the application lifespan (see main.py) and
injected into routes; there is no module-level instance.
"""

import json
import random
import re
from pathlib import Path
from typing import Any, Callable, Dict, Generic, Iterable, List, Optional, TypeVar, Union

from pydantic import BaseModel, ValidationError

from posture_coach.schemas.catalog import ExerciseEntry, ProductEntry
from posture_coach.utils.constants import (
    DECATHLON_IMAGE_URL_TEMPLATE,
    DECATHLON_PLACEHOLDER_IMAGE_URL,
    DEFAULT_BRAND,
    KNOWN_BRANDS,
)
from posture_coach.utils.errors import CatalogLoadError
from posture_coach.utils.fuzzy import normalize_key
from posture_coach.utils.logging import get_logger

logger = get_logger(__name__)

EntryT = TypeVar("EntryT", bound=BaseModel)
PathLike = Union[str, Path]

MARKETPLACE_BRAND_PATTERN = re.compile(r"/mp/([^/]+)/")
PRODUCT_ID_PATTERN = re.compile(r"R-p-(\d+)")

# (label keywords, lowest price, number of price steps) checked in order
PRICE_BANDS = (
    (("garmin", "montre", "gps"), 150, 300),
    (("tapis", "vélo", "velo"), 100, 200),
    (("casque", "bande", "gourde"), 20, 50),
)
DEFAULT_PRICE_BAND = (20, 60)


# =============================================================================
# PRODUCT FIELD SYNTHESIS
# =============================================================================

def _infer_brand(label: str, url: str) -> str:
    """Marketplace seller from the URL, else a known house brand in the label."""
    if "/mp/" in url:
        match = MARKETPLACE_BRAND_PATTERN.search(url)
        if match:
            seller = match.group(1)
            return seller[:1].upper() + seller[1:].replace("-", " ")

    label_lower = label.lower()
    for brand in KNOWN_BRANDS:
        if brand.lower() in label_lower:
            return brand

    return DEFAULT_BRAND


def _image_url(url: str) -> str:
    match = PRODUCT_ID_PATTERN.search(url)
    if match:
        return DECATHLON_IMAGE_URL_TEMPLATE.format(product_id=match.group(1))
    return DECATHLON_PLACEHOLDER_IMAGE_URL


def _price(label: str, rng: random.Random) -> int:
    label_lower = label.lower()
    for keywords, low, steps in PRICE_BANDS:
        if any(keyword in label_lower for keyword in keywords):
            return low + rng.randrange(steps)
    low, steps = DEFAULT_PRICE_BAND
    return low + rng.randrange(steps)


def synthesize_product_fields(raw: Dict[str, Any], seed: int = 0) -> Dict[str, Any]:
    """
    Fill in product attributes missing from the catalog file.

    The random generator is seeded from `seed` and the product label, so a
    given seed always produces the same values for a product, whatever its
    position in the file. Values present in `raw` are never replaced.

    Args:
        raw: Product record as read from products.json
        seed: Catalog seed (settings.CATALOG_SEED)

    Returns:
        A new dict with brand, description, price, rating, reviews and image set.
    """
    data = dict(raw)
    label = str(data.get("label") or "")
    url = str(data.get("url") or "")
    rng = random.Random(f"{seed}:{label}")

    # Draw in a fixed order so each value does not depend on which others are missing
    price = _price(label, rng)
    rating = round(3.5 + rng.random() * 1.5, 1)
    reviews = 10 + rng.randrange(500)

    def missing(key: str) -> bool:
        return data.get(key) in (None, "")

    if missing("brand"):
        data["brand"] = _infer_brand(label, url)
    if missing("description"):
        data["description"] = (
            f"{label}. Produit de qualité sélectionné par Decathlon "
            "pour accompagner votre entraînement."
        )
    if missing("price"):
        data["price"] = price
    if missing("rating"):
        data["rating"] = rating
    if missing("reviews"):
        data["reviews"] = reviews
    if missing("image"):
        data["image"] = _image_url(url)

    return data


# =============================================================================
# LOADING
# =============================================================================

def load_all(
    path: PathLike,
    factory: Callable[[Dict[str, Any]], EntryT],
    key: Callable[[EntryT], str],
) -> Dict[str, EntryT]:
    """
    Load a JSON array file into a dict of entries keyed by normalized name.

    Args:
        path: Path to the JSON file
        factory: Builds one entry from one array element
        key: Returns the normalized key of an entry

    Returns:
        Ordered dict of normalized key -> entry (file order). When two
        elements share a key, the last one wins.

    Raises:
        CatalogLoadError: If the file is missing, unreadable, not a JSON
            array, or any element is invalid.
    """
    file_path = Path(path).resolve()

    try:
        raw_text = file_path.read_text(encoding="utf-8")
    except OSError as e:
        raise CatalogLoadError(str(file_path), f"cannot read file ({e})") from e

    try:
        records = json.loads(raw_text)
    except json.JSONDecodeError as e:
        raise CatalogLoadError(str(file_path), f"invalid JSON ({e})") from e

    if not isinstance(records, list):
        raise CatalogLoadError(str(file_path), "top-level JSON value must be an array")

    entries: Dict[str, EntryT] = {}
    for index, record in enumerate(records):
        if not isinstance(record, dict):
            raise CatalogLoadError(str(file_path), f"element {index} is not an object")
        try:
            entry = factory(record)
        except ValidationError as e:
            raise CatalogLoadError(str(file_path), f"element {index} is invalid: {e}") from e

        entry_key = key(entry)
        if entry_key in entries:
            logger.warning(f"Duplicate catalog key '{entry_key}' in {file_path.name}, keeping the last one")
        entries[entry_key] = entry

    return entries


class Catalog(Generic[EntryT]):
    """
    Read-only, name-keyed collection of catalog entries.

    No mutation API is exposed; the underlying dict is only written by the
    constructor.
    """

    def __init__(self, kind: str, entries: Dict[str, EntryT], name_of: Callable[[EntryT], str]):
        self.kind = kind
        self._entries = dict(entries)
        self._names = [name_of(entry) for entry in self._entries.values()]

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self):
        return iter(self._entries.values())

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.get(name) is not None

    def names_list(self) -> List[str]:
        """Canonical names in file order (a copy; callers may not mutate the catalog)."""
        return list(self._names)

    def get(self, name: str) -> Optional[EntryT]:
        """Case-insensitive point lookup."""
        return self._entries.get(normalize_key(name))

    def get_many(self, names: Iterable[str]) -> List[EntryT]:
        """Entries for the names that exist, in request order."""
        found = []
        for name in names:
            entry = self.get(name)
            if entry is not None:
                found.append(entry)
        return found


class ExerciseCatalog(Catalog[ExerciseEntry]):

    def __init__(self, entries: Dict[str, ExerciseEntry]):
        super().__init__("exercise", entries, lambda e: e.name)

    @classmethod
    def from_file(cls, path: PathLike) -> "ExerciseCatalog":
        return cls(load_all(path, ExerciseEntry.model_validate, lambda e: e.key))

    def filter(
        self,
        level: Optional[str] = None,
        equipment: Optional[str] = None,
        category: Optional[str] = None,
        muscle: Optional[str] = None,
    ) -> List[ExerciseEntry]:
        """Exercises matching every given criterion (muscle is a substring match)."""
        results = []
        for exercise in self:
            if level and exercise.level != level:
                continue
            if equipment and exercise.equipment != equipment:
                continue
            if category and exercise.category != category:
                continue
            if muscle:
                muscle_lower = muscle.lower()
                muscles = exercise.primary_muscles + exercise.secondary_muscles
                if not any(muscle_lower in m.lower() for m in muscles):
                    continue
            results.append(exercise)
        return results


class ProductCatalog(Catalog[ProductEntry]):

    def __init__(self, entries: Dict[str, ProductEntry]):
        super().__init__("product", entries, lambda p: p.label)

    @classmethod
    def from_file(cls, path: PathLike, seed: int = 0) -> "ProductCatalog":
        return cls(load_all(
            path,
            lambda record: ProductEntry.model_validate(synthesize_product_fields(record, seed)),
            lambda p: p.key,
        ))

    def search(self, text: Optional[str] = None) -> List[ProductEntry]:
        """Products whose label contains `text` (case-insensitive); all products when empty."""
        if not text:
            return list(self)
        text_lower = text.lower()
        return [product for product in self if text_lower in product.label.lower()]


class CatalogStore:
    """Both catalogs, loaded together at startup."""

    def __init__(self, exercises: ExerciseCatalog, products: ProductCatalog):
        self.exercises = exercises
        self.products = products

    @classmethod
    def from_paths(
        cls,
        exercises_path: PathLike,
        products_path: PathLike,
        seed: int = 0,
    ) -> "CatalogStore":
        """
        Load both catalogs.

        Raises:
            CatalogLoadError: If either file cannot be loaded.
        """
        logger.info("Loading catalogs...")
        exercises = ExerciseCatalog.from_file(exercises_path)
        logger.info(f"Loaded {len(exercises)} exercises from {exercises_path}")
        products = ProductCatalog.from_file(products_path, seed=seed)
        logger.info(f"Loaded {len(products)} products from {products_path}")
        return cls(exercises, products)

    def stats(self) -> Dict[str, int]:
        return {
            "exercises_loaded": len(self.exercises),
            "products_loaded": len(self.products),
        }
