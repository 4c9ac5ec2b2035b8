"""
Recommendation output models.

``ScoredCandidate`` is the engine's internal per-fly record (raw score,
reason trail, per-tier breakdown, calibrated confidence).  ``Suggestion`` is
what leaves the service: the fly, a bounded integer confidence and the joined
reason text.  ``RecommendationResult`` wraps the suggestion list with usage
metadata and an optional error message.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

from fly_advisor.models.fly import FlyPattern

REASON_SEPARATOR = "; "


class ScoredCandidate(BaseModel):
    """One fly after scoring and calibration.

    Attributes:
        fly: The catalog pattern.
        score: Raw hierarchical score (already floored).
        reasons: Ordered reason trail, one entry per rule that fired.
        tiers: Tier name → score delta.
        confidence: Calibrated confidence percentage.
    """

    model_config = ConfigDict(frozen=True)

    fly: FlyPattern
    score: float
    reasons: list[str] = []
    tiers: dict[str, float] = {}
    confidence: int = 0

    def to_suggestion(self, confidence: Optional[int] = None) -> "Suggestion":
        """Build the outgoing ``Suggestion``, optionally overriding confidence."""
        return Suggestion(
            fly=self.fly,
            confidence=self.confidence if confidence is None else confidence,
            reason=REASON_SEPARATOR.join(r for r in self.reasons if r),
        )


class Suggestion(BaseModel):
    """A recommended fly with confidence and human-readable reasoning."""

    model_config = ConfigDict(frozen=True)

    fly: FlyPattern
    confidence: int
    reason: str = ""

    @field_validator("confidence")
    @classmethod
    def validate_confidence(cls, v: int) -> int:
        if not 0 <= v <= 100:
            raise ValueError(f"confidence must be in [0, 100], got {v}.")
        return v


class UsageInfo(BaseModel):
    """Per-user quota state for one action.

    Attributes:
        used: Actions already performed in the current window.
        limit: Allowed actions per window; ``-1`` means unlimited.
        is_premium: Whether the user is on a paid plan.
        can_perform: Whether one more action is allowed.
    """

    model_config = ConfigDict(frozen=True)

    used: int = 0
    limit: int = -1
    is_premium: bool = False
    can_perform: bool = True

    @property
    def is_unlimited(self) -> bool:
        return self.limit < 0

    @property
    def remaining(self) -> Optional[int]:
        """Actions left in the window; ``None`` when unlimited."""
        if self.is_unlimited:
            return None
        return max(0, self.limit - self.used)


class RecommendationResult(BaseModel):
    """Service response.

    ``can_perform=False`` with an ``error`` means the request could not be
    served; ``can_perform=False`` without one means the quota is exhausted.
    """

    model_config = ConfigDict(frozen=True)

    suggestions: list[Suggestion] = []
    usage_info: Optional[UsageInfo] = None
    can_perform: bool = True
    error: Optional[str] = None

    @classmethod
    def failure(cls, error: str, usage_info: Optional[UsageInfo] = None) -> "RecommendationResult":
        return cls(suggestions=[], usage_info=usage_info, can_perform=False, error=error)
