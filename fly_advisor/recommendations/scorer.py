"""
Hierarchical fly scorer: runs an ordered tier pipeline over one fly.

Score formula
-------------
    score = max(score_floor, sum(tier.delta for tier in tiers))

The default pipeline is ``fly_advisor.recommendations.tiers.DEFAULT_TIERS``
(location → weather → water → season → lunar → versatility → uniqueness →
realtime).  A custom pipeline is any sequence of ``(name, tier)`` pairs, so
tests and experiments can score with a subset of tiers.

Raw scores are unbounded above (a perfect match can clear 200) and are
mapped to a percentage by ``fly_advisor.recommendations.calibration``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Sequence

from fly_advisor.config import ScoringConfig
from fly_advisor.models.conditions import FishingConditions
from fly_advisor.models.fly import FlyPattern
from fly_advisor.recommendations.tiers import DEFAULT_TIERS, Tier


@dataclass
class FlyScore:
    """Result of scoring one fly.

    Attributes:
        score:   Floored total of all tier deltas.
        reasons: Reason trail in tier order.
        tiers:   Tier name → delta (before flooring).
    """

    score: float
    reasons: list[str] = field(default_factory=list)
    tiers: dict[str, float] = field(default_factory=dict)

    @property
    def raw_total(self) -> float:
        """Sum of tier deltas before the floor is applied."""
        return sum(self.tiers.values())


class HierarchicalScorer:
    """Ordered, additive tier pipeline.

    Args:
        tiers:    ``(name, tier)`` pairs, applied in order.
        settings: Scoring thresholds and floor; defaults to ``ScoringConfig()``.
    """

    def __init__(
        self,
        tiers: Sequence[tuple[str, Tier]] = DEFAULT_TIERS,
        settings: Optional[ScoringConfig] = None,
    ) -> None:
        self.tiers = tuple(tiers)
        self.settings = settings or ScoringConfig()

    @property
    def tier_names(self) -> list[str]:
        return [name for name, _ in self.tiers]

    def score_fly(self, fly: FlyPattern, conditions: FishingConditions) -> FlyScore:
        reasons: list[str] = []
        breakdown: dict[str, float] = {}
        for name, tier in self.tiers:
            outcome = tier(fly, conditions, self.settings)
            breakdown[name] = outcome.delta
            reasons.extend(outcome.reasons)

        total = sum(breakdown.values())
        return FlyScore(
            score=max(self.settings.score_floor, total),
            reasons=reasons,
            tiers=breakdown,
        )

    def score_all(
        self,
        flies: Sequence[FlyPattern],
        conditions: FishingConditions,
    ) -> list[tuple[FlyPattern, FlyScore]]:
        return [(fly, self.score_fly(fly, conditions)) for fly in flies]


def score_fly(fly: FlyPattern, conditions: FishingConditions) -> FlyScore:
    """Score ``fly`` with the default tier pipeline and settings."""
    return HierarchicalScorer().score_fly(fly, conditions)
