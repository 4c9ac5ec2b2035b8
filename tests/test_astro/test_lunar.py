"""
Tests for fly_advisor/astro/lunar.py.

What we test
------------
get_moon_phase():
  - Reference new moon → NEW, ~0 % illumination, age 0.
  - Age 15 days → FULL, ~100 % illumination, very high feeding, excellent.
  - Quarter and crescent bands map to the documented feeding activity.
  - Naive and aware inputs agree; a bare date means midnight UTC.
get_sunrise() / get_sunset():
  - Equinox (day 80) at lat 40, lon 0 → 06:00 / 18:00 UTC.
  - Western longitude shifts later by lon / 15 hours.
get_solunar_periods():
  - Two majors of 120 min around sunrise/sunset, two minors of 60 min.
  - Rating is higher inside a major window than mid-morning.
is_in_solunar_period():
  - Inside a major window → major, minutes remaining.
  - Inside a minor window → minor.
  - Outside every window → in_period False, 0 minutes.
next_major_period() / get_lunar_insights():
  - Next major after mid-morning is the sunset window.
  - One hour before a major window an "in 60 minutes" hint is produced.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest

from fly_advisor.astro.lunar import (
    REFERENCE_NEW_MOON,
    get_lunar_insights,
    get_moon_phase,
    get_solunar_periods,
    get_sunrise,
    get_sunset,
    is_in_solunar_period,
    next_major_period,
)
from fly_advisor.taxonomy.condition_taxonomy import (
    FeedingActivity,
    FishingQuality,
    MoonPhase,
    SolunarPeriodType,
    SolunarRating,
)

# 2023-03-21 is day-of-year 80, where the seasonal sun offset is exactly zero.
EQUINOX = date(2023, 3, 21)

_RATING_ORDER = {
    SolunarRating.POOR: 0,
    SolunarRating.AVERAGE: 1,
    SolunarRating.GOOD: 2,
    SolunarRating.EXCELLENT: 3,
}


def _at(hour: int, minute: int = 0) -> datetime:
    return datetime(2023, 3, 21, hour, minute, tzinfo=timezone.utc)


# ── Moon phase ────────────────────────────────────────────────────────────────

class TestMoonPhase:
    def test_reference_new_moon(self):
        moon = get_moon_phase(REFERENCE_NEW_MOON)
        assert moon.phase == MoonPhase.NEW
        assert moon.age == pytest.approx(0.0, abs=1e-6)
        assert moon.illumination == pytest.approx(0.0, abs=1e-6)
        assert moon.fishing_quality == FishingQuality.EXCELLENT
        assert moon.feeding_activity == FeedingActivity.VERY_HIGH

    def test_full_moon(self):
        moon = get_moon_phase(REFERENCE_NEW_MOON + timedelta(days=15))
        assert moon.phase == MoonPhase.FULL
        assert moon.illumination > 99.0
        assert moon.feeding_activity == FeedingActivity.VERY_HIGH
        assert moon.fishing_quality == FishingQuality.EXCELLENT

    def test_first_quarter(self):
        moon = get_moon_phase(REFERENCE_NEW_MOON + timedelta(days=8))
        assert moon.phase == MoonPhase.FIRST_QUARTER
        assert moon.feeding_activity == FeedingActivity.HIGH
        assert moon.fishing_quality == FishingQuality.GOOD

    def test_waxing_crescent_is_moderate(self):
        moon = get_moon_phase(REFERENCE_NEW_MOON + timedelta(days=4))
        assert moon.phase == MoonPhase.WAXING_CRESCENT
        assert moon.feeding_activity == FeedingActivity.MODERATE

    def test_waning_crescent_is_low(self):
        moon = get_moon_phase(REFERENCE_NEW_MOON + timedelta(days=26))
        assert moon.phase == MoonPhase.WANING_CRESCENT
        assert moon.feeding_activity == FeedingActivity.LOW
        assert moon.fishing_quality == FishingQuality.FAIR

    def test_age_wraps_after_synodic_month(self):
        moon = get_moon_phase(REFERENCE_NEW_MOON + timedelta(days=29.530588853 * 3 + 1))
        assert moon.age == pytest.approx(1.0, abs=1e-3)
        assert moon.phase == MoonPhase.NEW

    def test_before_reference_is_in_range(self):
        moon = get_moon_phase(datetime(1990, 5, 1, tzinfo=timezone.utc))
        assert 0.0 <= moon.age < 29.54
        assert 0.0 <= moon.illumination <= 100.0

    def test_naive_datetime_is_utc(self):
        naive = datetime(2024, 6, 22, 12, 0)
        aware = naive.replace(tzinfo=timezone.utc)
        assert get_moon_phase(naive) == get_moon_phase(aware)

    def test_bare_date_is_midnight(self):
        assert get_moon_phase(date(2024, 6, 22)) == get_moon_phase(
            datetime(2024, 6, 22, tzinfo=timezone.utc)
        )


# ── Sun ───────────────────────────────────────────────────────────────────────

class TestSunTimes:
    def test_equinox_greenwich(self):
        assert get_sunrise(EQUINOX, 40.0, 0.0) == _at(6)
        assert get_sunset(EQUINOX, 40.0, 0.0) == _at(18)

    def test_western_longitude_shifts_later(self):
        assert get_sunrise(EQUINOX, 40.0, -105.0) == _at(13)
        assert get_sunset(EQUINOX, 40.0, -105.0) == _at(18) + timedelta(hours=7)

    def test_latitude_shift(self):
        assert get_sunrise(EQUINOX, 50.0, 0.0) == _at(7)


# ── Solunar periods ───────────────────────────────────────────────────────────

class TestSolunarPeriods:
    def test_window_shapes(self):
        periods = get_solunar_periods(_at(9), 40.0, 0.0)
        assert [w.duration_minutes for w in periods.major] == [120.0, 120.0]
        assert [w.duration_minutes for w in periods.minor] == [60.0, 60.0]
        assert periods.major[0].peak == periods.sunrise
        assert periods.major[1].peak == periods.sunset
        assert periods.minor[0].peak == _at(12)
        assert periods.minor[1].peak == _at(0)

    def test_rating_higher_in_major_window(self):
        in_major = get_solunar_periods(_at(6, 30), 40.0, 0.0).rating
        mid_morning = get_solunar_periods(_at(9), 40.0, 0.0).rating
        assert _RATING_ORDER[in_major] > _RATING_ORDER[mid_morning]

    def test_deterministic(self):
        assert get_solunar_periods(_at(9), 44.6, -111.1) == get_solunar_periods(_at(9), 44.6, -111.1)


class TestIsInSolunarPeriod:
    def test_major_window(self):
        state = is_in_solunar_period(_at(6, 30), 40.0, 0.0)
        assert state.in_period is True
        assert state.period_type == SolunarPeriodType.MAJOR
        assert state.minutes_remaining == pytest.approx(30.0)

    def test_minor_window(self):
        state = is_in_solunar_period(_at(12, 10), 40.0, 0.0)
        assert state.in_period is True
        assert state.period_type == SolunarPeriodType.MINOR
        assert state.minutes_remaining == pytest.approx(20.0)

    def test_outside_windows(self):
        state = is_in_solunar_period(_at(9), 40.0, 0.0)
        assert state.in_period is False
        assert state.period_type is None
        assert state.minutes_remaining == 0.0

    def test_window_from_previous_utc_day(self):
        # At lon -105 the sunset major of 2023-03-21 runs 00:00–02:00 UTC on the 22nd.
        moment = datetime(2023, 3, 22, 0, 30, tzinfo=timezone.utc)
        state = is_in_solunar_period(moment, 40.0, -105.0)
        assert state.in_period is True
        assert state.period_type == SolunarPeriodType.MAJOR


class TestInsights:
    def test_next_major_is_sunset(self):
        upcoming = next_major_period(_at(9), 40.0, 0.0)
        assert upcoming is not None
        assert upcoming.start == _at(17)

    def test_upcoming_major_hint(self):
        insights = get_lunar_insights(_at(16), 40.0, 0.0)
        assert "Major feeding period in 60 minutes" in insights

    def test_in_period_hint(self):
        insights = get_lunar_insights(_at(6, 30), 40.0, 0.0)
        assert "Major feeding period now, 30 min remaining" in insights

    def test_new_moon_hint(self):
        insights = get_lunar_insights(REFERENCE_NEW_MOON, 40.0, 0.0)
        assert insights[0].startswith("New moon")
