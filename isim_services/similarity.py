# similarity.py
# Edit-distance lookups between a candidate name and the catalogue

# Used by the classification flow to answer from the catalogue instead of
# calling the model: an exact (case-insensitive) hit returns the stored
# record, and a near miss (1-2 edits) is reported back as a likely typo.

# @see: isim_api/routers/classify.py - Short-circuits before the model call
# @note: O(names x len^2); the catalogue is capped at 5000 rows when loaded

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional

from rapidfuzz.distance import Levenshtein

from isim_services.turkish import tr_lower

MIN_TYPO_DISTANCE = 1
MAX_TYPO_DISTANCE = 2
MAX_LENGTH_DIFFERENCE = 2


@dataclass(frozen=True)
class SimilarMatch:
    """Closest catalogue name within the typo thresholds."""

    match: str
    distance: int


def edit_distance(left: str, right: str, score_cutoff: Optional[int] = None) -> int:
    """Levenshtein distance between two names, compared in Turkish lowercase.

    With score_cutoff set, any distance above it comes back as cutoff + 1.
    """
    return Levenshtein.distance(tr_lower(left), tr_lower(right), score_cutoff=score_cutoff)


def nearest_match(
    candidate: str,
    existing_names: Iterable[str],
) -> Optional[SimilarMatch]:
    """
    Find the catalogue name the candidate most likely misspells.

    A name qualifies when it is 1 to 2 edits away and its length differs
    from the candidate's by at most 2. The globally nearest qualifying name
    wins; ties keep the earliest name in input order.

    Args:
        candidate: Sanitized user input
        existing_names: Catalogue names to compare against

    Returns:
        SimilarMatch for the nearest qualifying name, or None
    """
    best: Optional[SimilarMatch] = None

    for name in existing_names:
        if abs(len(name) - len(candidate)) > MAX_LENGTH_DIFFERENCE:
            continue
        distance = edit_distance(candidate, name, score_cutoff=MAX_TYPO_DISTANCE)
        if not MIN_TYPO_DISTANCE <= distance <= MAX_TYPO_DISTANCE:
            continue
        if best is None or distance < best.distance:
            best = SimilarMatch(match=name, distance=distance)
            if distance == MIN_TYPO_DISTANCE:
                break

    return best


def exact_match(
    candidate: str,
    records: Iterable[Dict[str, Any]],
) -> Optional[Dict[str, Any]]:
    """Return the record whose name equals the candidate ignoring Turkish case."""
    needle = tr_lower(candidate)
    for record in records:
        if tr_lower(record.get("name", "")) == needle:
            return record
    return None
