"""
Diversity selector: picks a type/size/color-diverse top-N from scored flies.

Usage flow
----------
1. rank_candidates(candidates)
   -> candidates sorted by raw score desc, fly id asc on ties.

2. select_diverse(candidates, count)
   Pass 1: the best candidate of every fly type, in ranked order, until
           ``count`` is reached.
   Pass 2: remaining candidates in ranked order.  Each gets a diversity
           bonus added to its confidence (re-capped):
               +20  type not yet selected
               +10  size not yet selected
               +5   color not yet selected
           and is appended until ``count`` is reached or the pool runs out.

The output is in selection order (group-then-fill), not a pure score sort.
Every fly id appears at most once.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Optional, Sequence

from fly_advisor.models.recommendation import ScoredCandidate, Suggestion

NEW_TYPE_BONUS = 20
NEW_SIZE_BONUS = 10
NEW_COLOR_BONUS = 5


def rank_candidates(candidates: Sequence[ScoredCandidate]) -> list[ScoredCandidate]:
    return sorted(candidates, key=lambda c: (-c.score, c.fly.id))


def select_diverse(
    candidates: Sequence[ScoredCandidate],
    count: int,
    confidence_cap: int = 95,
) -> list[Suggestion]:
    """Select up to ``count`` diverse suggestions.

    Args:
        candidates:     Scored and calibrated candidates, any order.
        count:          Maximum number of suggestions.
        confidence_cap: Upper bound re-applied after the diversity bonus.

    Returns:
        At most ``min(count, len(unique candidates))`` suggestions.
    """
    if count <= 0:
        return []

    ranked = _unique_by_id(rank_candidates(candidates))

    best_by_type: dict[str, ScoredCandidate] = {}
    for candidate in ranked:
        best_by_type.setdefault(candidate.fly.type, candidate)

    selected: list[Suggestion] = []
    selected_ids: set[str] = set()
    used: dict[str, set[str]] = defaultdict(set)

    def _mark(candidate: ScoredCandidate) -> None:
        selected_ids.add(candidate.fly.id)
        used["type"].add(candidate.fly.type)
        used["size"].add(candidate.fly.primary_size)
        used["color"].add(candidate.fly.color)

    # Pass 1: best of each type, in ranked order.
    for candidate in ranked:
        if len(selected) >= count:
            break
        if best_by_type.get(candidate.fly.type) is not candidate:
            continue
        selected.append(candidate.to_suggestion())
        _mark(candidate)

    # Pass 2: fill with diversity-adjusted confidence.
    for candidate in ranked:
        if len(selected) >= count:
            break
        if candidate.fly.id in selected_ids:
            continue
        bonus = 0
        if candidate.fly.type not in used["type"]:
            bonus += NEW_TYPE_BONUS
        if candidate.fly.primary_size not in used["size"]:
            bonus += NEW_SIZE_BONUS
        if candidate.fly.color not in used["color"]:
            bonus += NEW_COLOR_BONUS
        adjusted = min(candidate.confidence + bonus, confidence_cap)
        selected.append(candidate.to_suggestion(confidence=adjusted))
        _mark(candidate)

    return selected


def _unique_by_id(ranked: list[ScoredCandidate]) -> list[ScoredCandidate]:
    seen: set[str] = set()
    unique: list[ScoredCandidate] = []
    for candidate in ranked:
        if candidate.fly.id in seen:
            continue
        seen.add(candidate.fly.id)
        unique.append(candidate)
    return unique


def requested_count(
    max_suggestions: int,
    free_suggestions: int,
    limits_enabled: bool,
    is_premium: bool,
    limit: Optional[int] = None,
) -> int:
    """How many suggestions a caller gets.

    ``max_suggestions`` when limits are off or the caller is premium,
    ``free_suggestions`` otherwise.  A caller ``limit`` can only lower it.
    """
    count = max_suggestions if (not limits_enabled or is_premium) else free_suggestions
    if limit is not None:
        count = min(count, max(0, limit))
    return count
