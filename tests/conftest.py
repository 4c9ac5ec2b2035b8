"""
Shared pytest fixtures for the Fly Advisor test suite.

Provides:
  - ``fixed_now``: a deterministic aware UTC instant (mid-July afternoon).
  - ``sample_records``: raw catalog dicts covering every fly type.
  - ``sample_flies``: the same records after ``filter_catalog``.
  - ``make_conditions``: factory for fully-normalized ``FishingConditions``
    with neutral defaults, so scorer tests control every field explicitly.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any, Callable

import pytest

from fly_advisor.models.conditions import FishingConditions
from fly_advisor.models.fly import FlyPattern
from fly_advisor.recommendations.catalog import filter_catalog
from fly_advisor.taxonomy.condition_taxonomy import (
    FeedingActivity,
    MoonPhase,
    TimeOfDay,
    TimeOfYear,
    WaterClarity,
    WaterFlow,
    WaterLevel,
    WeatherCategory,
    WindSpeed,
)


# ── Clock ─────────────────────────────────────────────────────────────────────

@pytest.fixture
def fixed_now() -> datetime:
    """2024-07-15 20:00 UTC (early afternoon solar time in the Mountain West)."""
    return datetime(2024, 7, 15, 20, 0, 0, tzinfo=timezone.utc)


# ── Catalog ───────────────────────────────────────────────────────────────────

@pytest.fixture
def sample_records() -> list[dict[str, Any]]:
    """Raw catalog records spanning all six fly types."""
    return [
        {"id": "zebra-midge", "name": "Zebra Midge", "type": "nymph",
         "primary_size": "20", "color": "Black"},
        {"id": "pheasant-tail", "name": "Pheasant Tail Nymph", "type": "nymph",
         "primary_size": "16", "color": "Brown"},
        {"id": "elk-hair-caddis", "name": "Elk Hair Caddis", "type": "dry",
         "primary_size": "14", "color": "Tan"},
        {"id": "parachute-adams", "name": "Parachute Adams", "type": "dry",
         "primary_size": "16", "color": "Gray"},
        {"id": "woolly-bugger", "name": "Woolly Bugger", "type": "streamer",
         "primary_size": "8", "color": "Olive"},
        {"id": "daves-hopper", "name": "Dave's Hopper", "type": "terrestrial",
         "primary_size": "10", "color": "Yellow"},
        {"id": "rs2", "name": "RS2", "type": "emerger",
         "primary_size": "20", "color": "Gray"},
        {"id": "soft-hackle", "name": "Partridge and Orange Soft Hackle", "type": "wet",
         "primary_size": "14", "color": "Orange"},
    ]


@pytest.fixture
def sample_flies(sample_records: list[dict[str, Any]]) -> list[FlyPattern]:
    return filter_catalog(sample_records)


# ── Conditions ────────────────────────────────────────────────────────────────

@pytest.fixture
def make_conditions() -> Callable[..., FishingConditions]:
    """Return a factory building ``FishingConditions`` with neutral defaults.

    Defaults: unnamed water (neither river nor lake), clear / normal /
    moderate water at 55°F, summer midday, sunny, light wind, waxing
    crescent moon with moderate feeding, no hatches, no live data.
    """

    def _make(**overrides: Any) -> FishingConditions:
        fields: dict[str, Any] = {
            "date": date(2024, 7, 15),
            "observed_at": datetime(2024, 7, 15, 20, 0, 0, tzinfo=timezone.utc),
            "location": "Test Water",
            "latitude": 40.5,
            "longitude": -111.5,
            "weather": WeatherCategory.SUNNY,
            "wind_speed": WindSpeed.LIGHT,
            "water_clarity": WaterClarity.CLEAR,
            "water_level": WaterLevel.NORMAL,
            "water_flow": WaterFlow.MODERATE,
            "water_temperature": 55.0,
            "time_of_day": TimeOfDay.MIDDAY,
            "time_of_year": TimeOfYear.SUMMER,
            "moon_phase": MoonPhase.WAXING_CRESCENT,
            "feeding_activity": FeedingActivity.MODERATE,
            "active_hatches": [],
        }
        fields.update(overrides)
        return FishingConditions(**fields)

    return _make
