"""
Confidence calibration: raw hierarchical score → bounded integer percentage.

Formula
-------
    confidence = clamp(round(score / 2) + reason_bonus, floor, cap)

    reason_bonus = 10  if more than 5 non-empty reasons
                    5  if more than 3
                    0  otherwise

Bounds default to [10, 95] (``ScoringConfig.confidence_floor`` /
``confidence_cap``).  Raw scores regularly exceed 100, so halving keeps
strong and very strong matches distinguishable below the cap.
"""

from __future__ import annotations

from typing import Optional, Sequence

from fly_advisor.config import ScoringConfig


def reason_bonus(reasons: Sequence[str]) -> int:
    count = sum(1 for r in reasons if r)
    if count > 5:
        return 10
    if count > 3:
        return 5
    return 0


def calibrate_confidence(
    score: float,
    reasons: Sequence[str],
    settings: Optional[ScoringConfig] = None,
) -> int:
    """Map a raw score and its reason trail to a confidence percentage.

    Args:
        score:    Floored raw score from the hierarchical scorer.
        reasons:  Reason trail for the same fly.
        settings: Supplies the confidence bounds; defaults to ``ScoringConfig()``.

    Returns:
        Integer confidence within ``[confidence_floor, confidence_cap]``.
    """
    settings = settings or ScoringConfig()
    raw = round(score / 2) + reason_bonus(reasons)
    return int(_clamp(raw, settings.confidence_floor, settings.confidence_cap))


def _clamp(value: float, lo: float, hi: float) -> float:
    """Clamp ``value`` to ``[lo, hi]``."""
    return max(lo, min(hi, value))
