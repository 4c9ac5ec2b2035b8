"""
Lunar and solunar result models.

These are the outputs of ``fly_advisor.astro.lunar``.  They live in the
models package because ``FishingConditions`` embeds them: a normalized
conditions object carries the lunar state computed for its evaluation
instant so the scorer never has to recompute it.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict

from fly_advisor.taxonomy.condition_taxonomy import (
    FeedingActivity,
    FishingQuality,
    MoonPhase,
    SolunarPeriodType,
    SolunarRating,
)


class MoonPhaseData(BaseModel):
    """Moon phase snapshot for one instant.

    Attributes:
        phase: One of eight phase bands.
        illumination: Illuminated fraction of the disc, 0–100 %.
        age: Days since the most recent new moon, ``[0, 29.53)``.
        fishing_quality: Coarse fishing rating for the phase.
        feeding_activity: Lunar-driven feeding activity rating.
    """

    model_config = ConfigDict(frozen=True)

    phase: MoonPhase
    illumination: float
    age: float
    fishing_quality: FishingQuality
    feeding_activity: FeedingActivity


class SolunarWindow(BaseModel):
    """A closed time window of elevated feeding activity."""

    model_config = ConfigDict(frozen=True)

    start: datetime
    end: datetime

    @property
    def peak(self) -> datetime:
        return self.start + (self.end - self.start) / 2

    @property
    def duration_minutes(self) -> float:
        return (self.end - self.start).total_seconds() / 60.0

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment <= self.end


class SolunarPeriods(BaseModel):
    """Solunar windows and overall rating for one day.

    Attributes:
        date: Instant the periods were computed for.
        sunrise: Approximate sunrise (UTC).
        sunset: Approximate sunset (UTC).
        major: Two-hour windows centered on sunrise and sunset.
        minor: One-hour windows centered on solar noon and solar midnight.
        rating: Blend of moon quality and whether ``date`` is in a major window.
    """

    model_config = ConfigDict(frozen=True)

    date: datetime
    sunrise: datetime
    sunset: datetime
    major: list[SolunarWindow]
    minor: list[SolunarWindow]
    rating: SolunarRating


class SolunarState(BaseModel):
    """Whether an instant falls inside a solunar window.

    Attributes:
        in_period: ``True`` when inside any major or minor window.
        period_type: ``"major"`` or ``"minor"``; ``None`` outside windows.
        minutes_remaining: Minutes until the active window closes (0 outside).
    """

    model_config = ConfigDict(frozen=True)

    in_period: bool = False
    period_type: Optional[SolunarPeriodType] = None
    minutes_remaining: float = 0.0
