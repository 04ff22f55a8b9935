"""
Fuzzy string matching used to map LLM answers back onto catalog names.

The model is told to copy names exactly, but it regularly drops a hyphen,
changes a plural or translates a word. Edit distance against the closed
candidate list recovers most of those answers.
"""

from typing import Iterable, NamedTuple, Optional


def normalize_key(name: str) -> str:
    """Lookup key for a catalog name: surrounding whitespace dropped, lowercased."""
    return name.strip().lower()


class ClosestMatch(NamedTuple):
    """Result of find_closest_match. `match` is None when nothing is within tolerance."""
    match: Optional[str]
    distance: Optional[int]


def levenshtein_distance(first: str, second: str) -> int:
    """
    Case-insensitive Levenshtein edit distance.

    Standard dynamic-programming table with unit cost for insertion,
    deletion and substitution. Only two rows are kept in memory.
    """
    s1 = first.lower()
    s2 = second.lower()

    if s1 == s2:
        return 0
    if not s1:
        return len(s2)
    if not s2:
        return len(s1)

    previous = list(range(len(s2) + 1))
    for i, c1 in enumerate(s1, start=1):
        current = [i]
        for j, c2 in enumerate(s2, start=1):
            cost = 0 if c1 == c2 else 1
            current.append(min(
                previous[j] + 1,         # deletion
                current[j - 1] + 1,      # insertion
                previous[j - 1] + cost,  # substitution
            ))
        previous = current

    return previous[-1]


def find_closest_match(
    target: str,
    candidates: Iterable[str],
    max_distance: int,
) -> ClosestMatch:
    """
    Find the candidate closest to `target` by edit distance.

    Scans every candidate and keeps the first one with the smallest
    distance, stopping as soon as an exact (distance 0) hit is found.

    Args:
        target: Name returned by the LLM
        candidates: Canonical catalog names
        max_distance: Largest distance accepted as a match

    Returns:
        ClosestMatch(match, distance). When the best distance exceeds
        max_distance, match is None and distance is the best one seen
        (None if there were no candidates at all).
    """
    best_match: Optional[str] = None
    best_distance: Optional[int] = None

    for candidate in candidates:
        distance = levenshtein_distance(target, candidate)

        if best_distance is None or distance < best_distance:
            best_distance = distance
            best_match = candidate

        if distance == 0:
            break

    if best_distance is not None and best_distance <= max_distance:
        return ClosestMatch(match=best_match, distance=best_distance)

    return ClosestMatch(match=None, distance=best_distance)
