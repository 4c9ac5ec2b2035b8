"""
Moon phase and solunar period calculator.

Pure functions of ``(instant, latitude, longitude)`` — no I/O, no clock
reads.  The moon model is a mean synodic month anchored on a known new moon,
and the sun model is a sinusoidal seasonal offset around 06:00 / 18:00.
Both are deliberately approximate: they are accurate to within an hour or so,
which is plenty for ranking flies, and they never need an ephemeris.

Sunrise and sunset are expressed as hours after UTC midnight of the given
day, shifted west by ``longitude / 15``.  For western longitudes the result
can roll past 24 h into the next UTC day; that is expected.

Solunar windows:
  - Major: ±60 min around sunrise and sunset.
  - Minor: ±30 min around local solar noon and solar midnight.

Rating points:
  moon quality   excellent 40 / good 30 / fair 20 / poor 10
  time of day    in a major window 60; solar hour 10–14 → 30; otherwise 15
  total          ≥80 excellent, ≥60 good, ≥40 average, else poor
"""

from __future__ import annotations

import math
from datetime import date, datetime, timedelta, timezone
from typing import Optional

from fly_advisor.models.lunar import MoonPhaseData, SolunarPeriods, SolunarState, SolunarWindow
from fly_advisor.taxonomy.condition_taxonomy import (
    FeedingActivity,
    FishingQuality,
    MoonPhase,
    SolunarPeriodType,
    SolunarRating,
)
from fly_advisor.utils.time_utils import (
    at_hours,
    day_of_year,
    ensure_utc,
    minutes_between,
    solar_hour,
)

# ── Constants ─────────────────────────────────────────────────────────────────

SYNODIC_MONTH_DAYS = 29.530588853
REFERENCE_NEW_MOON = datetime(2000, 1, 6, 18, 14, tzinfo=timezone.utc)

# Upper age bound (days) of each phase band, in cycle order.
_PHASE_BANDS: list[tuple[float, MoonPhase]] = [
    (1.84566, MoonPhase.NEW),
    (7.38264, MoonPhase.WAXING_CRESCENT),
    (9.22830, MoonPhase.FIRST_QUARTER),
    (14.76528, MoonPhase.WAXING_GIBBOUS),
    (16.61094, MoonPhase.FULL),
    (22.14792, MoonPhase.WANING_GIBBOUS),
    (23.99358, MoonPhase.LAST_QUARTER),
    (29.53059, MoonPhase.WANING_CRESCENT),
]

MAJOR_HALF_WIDTH = timedelta(minutes=60)
MINOR_HALF_WIDTH = timedelta(minutes=30)

_QUALITY_POINTS: dict[FishingQuality, int] = {
    FishingQuality.EXCELLENT: 40,
    FishingQuality.GOOD: 30,
    FishingQuality.FAIR: 20,
    FishingQuality.POOR: 10,
}

UPCOMING_MAJOR_MINUTES = 120.0


# ── Moon ──────────────────────────────────────────────────────────────────────


def moon_age(when: datetime | date) -> float:
    """Days since the most recent new moon, in ``[0, SYNODIC_MONTH_DAYS)``."""
    elapsed = (ensure_utc(when) - REFERENCE_NEW_MOON).total_seconds() / 86400.0
    return elapsed % SYNODIC_MONTH_DAYS


def phase_for_age(age: float) -> MoonPhase:
    for upper, phase in _PHASE_BANDS:
        if age < upper:
            return phase
    return MoonPhase.NEW


def feeding_activity_for_age(age: float) -> FeedingActivity:
    """Lunar feeding activity: peaks around new and full moon, then quarters."""
    if 0 <= age <= 2 or 14 <= age <= 16:
        return FeedingActivity.VERY_HIGH
    if 6 <= age <= 9 or 21 <= age <= 24:
        return FeedingActivity.HIGH
    if 2 <= age <= 14:
        return FeedingActivity.MODERATE
    return FeedingActivity.LOW


def fishing_quality_for_phase(phase: MoonPhase) -> FishingQuality:
    if phase in (MoonPhase.NEW, MoonPhase.FULL):
        return FishingQuality.EXCELLENT
    if phase in (
        MoonPhase.FIRST_QUARTER,
        MoonPhase.LAST_QUARTER,
        MoonPhase.WAXING_CRESCENT,
        MoonPhase.WAXING_GIBBOUS,
    ):
        return FishingQuality.GOOD
    return FishingQuality.FAIR


def get_moon_phase(when: datetime | date) -> MoonPhaseData:
    """Compute the moon phase snapshot for ``when``.

    Args:
        when: Instant to evaluate.  A bare date means midnight UTC.

    Returns:
        ``MoonPhaseData`` with phase band, illumination (0–100 %), age in days,
        fishing quality and feeding activity.
    """
    age = moon_age(when)
    illumination = (1 - math.cos(2 * math.pi * age / SYNODIC_MONTH_DAYS)) / 2 * 100
    phase = phase_for_age(age)
    return MoonPhaseData(
        phase=phase,
        illumination=illumination,
        age=age,
        fishing_quality=fishing_quality_for_phase(phase),
        feeding_activity=feeding_activity_for_age(age),
    )


# ── Sun ───────────────────────────────────────────────────────────────────────


def _seasonal_offset_hours(day: datetime | date, latitude: float, longitude: float) -> float:
    seasonal = 2 * math.sin(2 * math.pi * (day_of_year(day) - 80) / 365)
    return seasonal + (latitude - 40) * 0.1 - longitude / 15.0


def get_sunrise(day: datetime | date, latitude: float, longitude: float) -> datetime:
    """Approximate sunrise (UTC) for the UTC calendar day containing ``day``."""
    return at_hours(day, 6.0 + _seasonal_offset_hours(day, latitude, longitude))


def get_sunset(day: datetime | date, latitude: float, longitude: float) -> datetime:
    """Approximate sunset (UTC) for the UTC calendar day containing ``day``."""
    return at_hours(day, 18.0 + _seasonal_offset_hours(day, latitude, longitude))


# ── Solunar ───────────────────────────────────────────────────────────────────


def _window(center: datetime, half_width: timedelta) -> SolunarWindow:
    return SolunarWindow(start=center - half_width, end=center + half_width)


def _rating(
    moon: MoonPhaseData,
    moment: datetime,
    longitude: float,
    major: list[SolunarWindow],
) -> SolunarRating:
    points = _QUALITY_POINTS[moon.fishing_quality]
    hour = solar_hour(moment, longitude)
    if any(w.contains(moment) for w in major):
        points += 60
    elif 10 <= hour <= 14:
        points += 30
    else:
        points += 15

    if points >= 80:
        return SolunarRating.EXCELLENT
    if points >= 60:
        return SolunarRating.GOOD
    if points >= 40:
        return SolunarRating.AVERAGE
    return SolunarRating.POOR


def get_solunar_periods(when: datetime | date, latitude: float, longitude: float) -> SolunarPeriods:
    """Compute major/minor solunar windows and the rating for ``when``.

    Windows are built for the UTC calendar day containing ``when``.  The
    rating uses ``when`` itself, so the same day rates higher at dawn than
    at mid-afternoon.
    """
    moment = ensure_utc(when)
    sunrise = get_sunrise(moment, latitude, longitude)
    sunset = get_sunset(moment, latitude, longitude)

    major = [_window(sunrise, MAJOR_HALF_WIDTH), _window(sunset, MAJOR_HALF_WIDTH)]
    minor = [
        _window(at_hours(moment, 12.0 - longitude / 15.0), MINOR_HALF_WIDTH),
        _window(at_hours(moment, 0.0 - longitude / 15.0), MINOR_HALF_WIDTH),
    ]

    return SolunarPeriods(
        date=moment,
        sunrise=sunrise,
        sunset=sunset,
        major=major,
        minor=minor,
        rating=_rating(get_moon_phase(moment), moment, longitude, major),
    )


def _candidate_days(moment: datetime) -> list[datetime]:
    """Previous, same and next UTC day.

    Longitude shifts can push a day's windows across a UTC date boundary, so
    the window containing ``moment`` may belong to an adjacent day.
    """
    return [moment - timedelta(days=1), moment, moment + timedelta(days=1)]


def is_in_solunar_period(now: datetime, latitude: float, longitude: float) -> SolunarState:
    """Report whether ``now`` lies in a solunar window.

    Major windows are checked before minor ones across all candidate days,
    so an overlap reports ``major``.

    Returns:
        ``SolunarState`` with ``in_period``, ``period_type`` and the minutes
        remaining in the active window (``0`` outside any window).
    """
    moment = ensure_utc(now)
    days = [get_solunar_periods(day, latitude, longitude) for day in _candidate_days(moment)]

    for period_type, attr in ((SolunarPeriodType.MAJOR, "major"), (SolunarPeriodType.MINOR, "minor")):
        for periods in days:
            for window in getattr(periods, attr):
                if window.contains(moment):
                    return SolunarState(
                        in_period=True,
                        period_type=period_type,
                        minutes_remaining=minutes_between(moment, window.end),
                    )

    return SolunarState()


def next_major_period(now: datetime, latitude: float, longitude: float) -> Optional[SolunarWindow]:
    """Earliest major window starting strictly after ``now``, if any within two days."""
    moment = ensure_utc(now)
    upcoming = [
        window
        for day in _candidate_days(moment)
        for window in get_solunar_periods(day, latitude, longitude).major
        if window.start > moment
    ]
    return min(upcoming, key=lambda w: w.start, default=None)


# ── Insights ──────────────────────────────────────────────────────────────────


def get_lunar_insights(now: datetime, latitude: float, longitude: float) -> list[str]:
    """Short human-readable lunar fishing hints for ``now``."""
    moment = ensure_utc(now)
    insights: list[str] = []

    moon = get_moon_phase(moment)
    if moon.phase == MoonPhase.NEW:
        insights.append("New moon: excellent night fishing with mouse patterns")
    elif moon.phase == MoonPhase.FULL:
        insights.append("Full moon: fish feed actively through the night")
    elif moon.phase in (MoonPhase.FIRST_QUARTER, MoonPhase.LAST_QUARTER):
        insights.append("Quarter moon: good feeding activity at dawn and dusk")

    state = is_in_solunar_period(moment, latitude, longitude)
    if state.in_period:
        label = "Major" if state.period_type == SolunarPeriodType.MAJOR else "Minor"
        insights.append(
            f"{label} feeding period now, {round(state.minutes_remaining)} min remaining"
        )
    else:
        upcoming = next_major_period(moment, latitude, longitude)
        if upcoming is not None:
            minutes_until = minutes_between(moment, upcoming.start)
            if minutes_until < UPCOMING_MAJOR_MINUTES:
                insights.append(f"Major feeding period in {round(minutes_until)} minutes")

    rating = get_solunar_periods(moment, latitude, longitude).rating
    if rating == SolunarRating.EXCELLENT:
        insights.append("Excellent solunar rating today")
    elif rating == SolunarRating.POOR:
        insights.append("Below average solunar rating, may need extra effort")

    return insights
