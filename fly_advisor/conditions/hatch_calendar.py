"""
Regional aquatic and terrestrial insect hatch calendar.

A fixed table of Intermountain West hatches compiled from public state
wildlife and USGS aquatic insect surveys.  Each ``HatchPattern`` carries an
emergence window (start / peak / end as month-day), the water temperature
range the hatch needs, the day-parts it is usually on the water, and the
fly patterns that imitate it.

``active_hatches(day, water_temp_f, time_of_day)`` returns the hatches that
are on right now:
  - the day falls inside the emergence window (windows may wrap the new
    year, e.g. winter midges run November → March),
  - the water temperature is inside the hatch's range,
  - the time of day is one of the hatch's optimal day-parts.

Intensity is ``heavy`` within 7 days of peak, ``moderate`` within 14,
otherwise ``light``.  Results sort peak hatches first, then by importance.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date

from fly_advisor.models.conditions import ActiveHatch
from fly_advisor.taxonomy.condition_taxonomy import (
    HatchImportance,
    HatchIntensity,
    HatchStage,
    TimeOfDay,
)

HEAVY_WITHIN_DAYS = 7
PEAK_WITHIN_DAYS = 14

_IMPORTANCE_ORDER: dict[HatchImportance, int] = {
    HatchImportance.CRITICAL: 0,
    HatchImportance.MAJOR: 1,
    HatchImportance.MODERATE: 2,
    HatchImportance.MINOR: 3,
}

# Non-leap reference year; only month/day ordering matters.
_REFERENCE_YEAR = 2001
_DAYS_IN_YEAR = 365


@dataclass(frozen=True)
class HatchPattern:
    """One calendar entry.

    ``start``, ``peak`` and ``end`` are ``(month, day)`` tuples.
    """

    key: str
    name: str
    scientific: str
    start: tuple[int, int]
    peak: tuple[int, int]
    end: tuple[int, int]
    water_temp_range: tuple[float, float]
    optimal_times: tuple[TimeOfDay, ...]
    fly_patterns: tuple[str, ...]
    size: str
    importance: HatchImportance
    stages: tuple[HatchStage, ...] = field(default=(HatchStage.DUN,))

    @property
    def primary_stage(self) -> HatchStage:
        return self.stages[0]


_AFTERNOON_EVENING = (TimeOfDay.AFTERNOON, TimeOfDay.DUSK)

HATCH_CALENDAR: tuple[HatchPattern, ...] = (
    HatchPattern(
        key="bwo_spring",
        name="Blue Winged Olive (Spring)",
        scientific="Baetis spp.",
        start=(3, 1), peak=(4, 15), end=(5, 31),
        water_temp_range=(45, 58),
        optimal_times=(TimeOfDay.MIDDAY, TimeOfDay.AFTERNOON),
        fly_patterns=("BWO", "Baetis", "RS2", "Pheasant Tail", "Zebra Midge"),
        size="#18-22",
        importance=HatchImportance.CRITICAL,
        stages=(HatchStage.NYMPH, HatchStage.EMERGER, HatchStage.DUN, HatchStage.SPINNER),
    ),
    HatchPattern(
        key="midge_year_round",
        name="Midges (Year-Round)",
        scientific="Chironomidae",
        start=(1, 1), peak=(3, 15), end=(12, 31),
        water_temp_range=(32, 70),
        optimal_times=(TimeOfDay.MORNING, TimeOfDay.MIDDAY, TimeOfDay.AFTERNOON),
        fly_patterns=("Zebra Midge", "RS2", "Disco Midge", "Griffiths Gnat"),
        size="#18-24",
        importance=HatchImportance.CRITICAL,
        stages=(HatchStage.NYMPH, HatchStage.EMERGER),
    ),
    HatchPattern(
        key="early_black_stone",
        name="Early Black Stonefly",
        scientific="Capnia spp.",
        start=(2, 15), peak=(3, 15), end=(4, 15),
        water_temp_range=(38, 50),
        optimal_times=(TimeOfDay.MIDDAY, TimeOfDay.AFTERNOON),
        fly_patterns=("Black Stonefly", "Pats Rubber Legs", "Prince Nymph"),
        size="#14-16",
        importance=HatchImportance.MAJOR,
        stages=(HatchStage.NYMPH, HatchStage.DUN),
    ),
    HatchPattern(
        key="pmd",
        name="Pale Morning Dun",
        scientific="Ephemerella infrequens/inermis",
        start=(5, 15), peak=(6, 20), end=(7, 31),
        water_temp_range=(55, 65),
        optimal_times=(TimeOfDay.MORNING, TimeOfDay.AFTERNOON, TimeOfDay.DUSK),
        fly_patterns=("PMD", "Comparadun", "Sparkle Dun", "Pheasant Tail", "Barr Emerger"),
        size="#16-18",
        importance=HatchImportance.CRITICAL,
        stages=(HatchStage.DUN, HatchStage.EMERGER, HatchStage.NYMPH, HatchStage.SPINNER),
    ),
    HatchPattern(
        key="golden_stone",
        name="Golden Stonefly",
        scientific="Hesperoperla pacifica",
        start=(6, 1), peak=(7, 1), end=(8, 15),
        water_temp_range=(55, 68),
        optimal_times=_AFTERNOON_EVENING,
        fly_patterns=("Stimulator", "Pats Rubber Legs", "Golden Stone"),
        size="#6-10",
        importance=HatchImportance.MAJOR,
        stages=(HatchStage.DUN, HatchStage.NYMPH),
    ),
    HatchPattern(
        key="salmonfly",
        name="Salmonfly",
        scientific="Pteronarcys californica",
        start=(5, 20), peak=(6, 10), end=(7, 1),
        water_temp_range=(50, 60),
        optimal_times=_AFTERNOON_EVENING,
        fly_patterns=("Chubby Chernobyl", "Salmonfly Adult", "Pats Rubber Legs"),
        size="#4-8",
        importance=HatchImportance.MAJOR,
        stages=(HatchStage.DUN, HatchStage.NYMPH),
    ),
    HatchPattern(
        key="caddis",
        name="Caddisfly",
        scientific="Trichoptera spp.",
        start=(4, 15), peak=(6, 15), end=(10, 15),
        water_temp_range=(50, 70),
        optimal_times=_AFTERNOON_EVENING,
        fly_patterns=("Elk Hair Caddis", "X-Caddis", "LaFontaine Sparkle Pupa", "Caddis Emerger"),
        size="#14-18",
        importance=HatchImportance.CRITICAL,
        stages=(HatchStage.DUN, HatchStage.EMERGER, HatchStage.NYMPH),
    ),
    HatchPattern(
        key="hopper",
        name="Grasshoppers",
        scientific="Acrididae",
        start=(7, 1), peak=(8, 15), end=(9, 30),
        water_temp_range=(60, 75),
        optimal_times=(TimeOfDay.MIDDAY, TimeOfDay.AFTERNOON),
        fly_patterns=("Daves Hopper", "Parachute Hopper", "Club Sandwich", "Hopper"),
        size="#8-12",
        importance=HatchImportance.CRITICAL,
    ),
    HatchPattern(
        key="ants_beetles",
        name="Ants & Beetles",
        scientific="Terrestrial insects",
        start=(6, 1), peak=(8, 1), end=(9, 30),
        water_temp_range=(60, 75),
        optimal_times=(TimeOfDay.MIDDAY, TimeOfDay.AFTERNOON),
        fly_patterns=("Parachute Ant", "Foam Beetle", "Cinnamon Ant"),
        size="#14-18",
        importance=HatchImportance.MAJOR,
    ),
    HatchPattern(
        key="trico",
        name="Trico",
        scientific="Tricorythodes spp.",
        start=(7, 15), peak=(8, 15), end=(9, 15),
        water_temp_range=(60, 70),
        optimal_times=(TimeOfDay.DAWN, TimeOfDay.MORNING),
        fly_patterns=("Trico Spinner", "Trico Parachute", "Black Beauty"),
        size="#20-24",
        importance=HatchImportance.MODERATE,
        stages=(HatchStage.SPINNER, HatchStage.DUN),
    ),
    HatchPattern(
        key="bwo_fall",
        name="Blue Winged Olive (Fall)",
        scientific="Baetis spp.",
        start=(9, 1), peak=(10, 15), end=(11, 30),
        water_temp_range=(45, 58),
        optimal_times=(TimeOfDay.MIDDAY, TimeOfDay.AFTERNOON),
        fly_patterns=("BWO", "Baetis", "RS2", "Pheasant Tail"),
        size="#18-22",
        importance=HatchImportance.CRITICAL,
        stages=(HatchStage.NYMPH, HatchStage.EMERGER, HatchStage.DUN, HatchStage.SPINNER),
    ),
    HatchPattern(
        key="october_caddis",
        name="October Caddis",
        scientific="Dicosmoecus spp.",
        start=(9, 15), peak=(10, 15), end=(11, 15),
        water_temp_range=(45, 55),
        optimal_times=_AFTERNOON_EVENING,
        fly_patterns=("Orange Stimulator", "October Caddis Adult", "Rubber Leg Stone"),
        size="#8-12",
        importance=HatchImportance.MAJOR,
    ),
    HatchPattern(
        key="winter_midge",
        name="Winter Midge",
        scientific="Chironomidae",
        start=(11, 1), peak=(1, 15), end=(3, 1),
        water_temp_range=(32, 45),
        optimal_times=(TimeOfDay.MIDDAY, TimeOfDay.AFTERNOON),
        fly_patterns=("Zebra Midge", "RS2", "Ju-Ju Baetis", "San Juan Worm"),
        size="#20-24",
        importance=HatchImportance.CRITICAL,
        stages=(HatchStage.NYMPH, HatchStage.EMERGER),
    ),
)


# ── Date helpers ──────────────────────────────────────────────────────────────


def _ordinal(month: int, day: int) -> int:
    """Day of year for ``month``/``day`` in a non-leap year (Feb 29 → Feb 28)."""
    if month == 2 and day == 29:
        day = 28
    return date(_REFERENCE_YEAR, month, day).timetuple().tm_yday


def _in_window(day: date, hatch: HatchPattern) -> bool:
    today = _ordinal(day.month, day.day)
    start = _ordinal(*hatch.start)
    end = _ordinal(*hatch.end)
    if start <= end:
        return start <= today <= end
    return today >= start or today <= end


def days_from_peak(day: date, hatch: HatchPattern) -> int:
    """Circular distance in days between ``day`` and the hatch peak."""
    diff = abs(_ordinal(day.month, day.day) - _ordinal(*hatch.peak))
    return min(diff, _DAYS_IN_YEAR - diff)


def intensity_for(day: date, hatch: HatchPattern) -> HatchIntensity:
    distance = days_from_peak(day, hatch)
    if distance <= HEAVY_WITHIN_DAYS:
        return HatchIntensity.HEAVY
    if distance <= PEAK_WITHIN_DAYS:
        return HatchIntensity.MODERATE
    return HatchIntensity.LIGHT


def is_hatch_active(
    day: date,
    water_temp_f: float,
    time_of_day: TimeOfDay,
    hatch: HatchPattern,
) -> bool:
    low, high = hatch.water_temp_range
    return (
        _in_window(day, hatch)
        and low <= water_temp_f <= high
        and time_of_day in hatch.optimal_times
    )


# ── Public API ────────────────────────────────────────────────────────────────


def active_hatch_patterns(
    day: date,
    water_temp_f: float,
    time_of_day: TimeOfDay,
    calendar: tuple[HatchPattern, ...] = HATCH_CALENDAR,
) -> list[HatchPattern]:
    """Calendar entries active at ``day`` / ``water_temp_f`` / ``time_of_day``.

    Sorted with hatches within 14 days of peak first, then by importance.
    """
    active = [h for h in calendar if is_hatch_active(day, water_temp_f, time_of_day, h)]
    return sorted(
        active,
        key=lambda h: (
            days_from_peak(day, h) > PEAK_WITHIN_DAYS,
            _IMPORTANCE_ORDER[h.importance],
        ),
    )


def active_hatches(
    day: date,
    water_temp_f: float,
    time_of_day: TimeOfDay,
    calendar: tuple[HatchPattern, ...] = HATCH_CALENDAR,
) -> list[ActiveHatch]:
    """``ActiveHatch`` records for every hatch on the water right now."""
    return [
        ActiveHatch(
            insect=h.name,
            stage=h.primary_stage,
            intensity=intensity_for(day, h),
            size=h.size,
            patterns=list(h.fly_patterns),
        )
        for h in active_hatch_patterns(day, water_temp_f, time_of_day, calendar)
    ]
