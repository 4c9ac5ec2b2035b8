"""
Tests for fly_advisor/recommendations/scorer.py.

Scenario scores are computed with ``jitter_amplitude=0`` so every tier
contribution is exact; the jitter itself is covered in test_tiers.py.

What we test
------------
HierarchicalScorer.score_fly():
  - Cold spring river: Zebra Midge scores 135, far above a large red
    attractor dry (33).
  - Windy warm summer river: a hopper with matching declared conditions
    (189) outranks every sample fly.
  - Full-moon night: a mouse pattern (242) beats a small dry (76) and the
    dry carries the "ineffective at night" reason.
  - Reasons are collected in tier order.
  - The floor applies to strongly negative totals; raw_total keeps the sum.
  - Custom tier subsets score only the named tiers.
  - Determinism: identical inputs give identical results.
score_fly():
  - Module-level helper matches the default scorer.
"""

from __future__ import annotations

import pytest

from fly_advisor.config import ScoringConfig
from fly_advisor.models.fly import FlyPattern
from fly_advisor.recommendations.scorer import FlyScore, HierarchicalScorer, score_fly
from fly_advisor.recommendations.tiers import score_weather
from fly_advisor.taxonomy.condition_taxonomy import (
    FeedingActivity,
    MoonPhase,
    TimeOfDay,
    TimeOfYear,
    WeatherCategory,
    WindSpeed,
)

EXACT = ScoringConfig(jitter_amplitude=0)


def _fly(fly_id: str, name: str, fly_type: str, size: str, color: str, **best) -> FlyPattern:
    return FlyPattern(
        id=fly_id, name=name, type=fly_type, primary_size=size, color=color, best_conditions=best
    )


@pytest.fixture
def cold_spring_river(make_conditions):
    return make_conditions(
        location="Provo River",
        latitude=40.3,
        longitude=-111.6,
        water_temperature=42.0,
        time_of_year=TimeOfYear.SPRING,
        time_of_day=TimeOfDay.MORNING,
        weather=WeatherCategory.CLOUDY,
    )


@pytest.fixture
def windy_summer_river(make_conditions):
    return make_conditions(
        location="Weber River",
        latitude=41.2,
        longitude=-111.9,
        water_temperature=68.0,
        time_of_year=TimeOfYear.SUMMER,
        time_of_day=TimeOfDay.AFTERNOON,
        weather=WeatherCategory.SUNNY,
        wind_speed=WindSpeed.MODERATE,
    )


@pytest.fixture
def full_moon_night(make_conditions):
    return make_conditions(
        location="Green River",
        latitude=40.9,
        longitude=-109.4,
        water_temperature=55.0,
        time_of_year=TimeOfYear.SUMMER,
        time_of_day=TimeOfDay.NIGHT,
        weather=WeatherCategory.CLOUDY,
        moon_phase=MoonPhase.FULL,
        feeding_activity=FeedingActivity.VERY_HIGH,
    )


class TestScenarios:
    def test_cold_spring_river(self, cold_spring_river):
        scorer = HierarchicalScorer(settings=EXACT)
        midge = scorer.score_fly(_fly("zm", "Zebra Midge", "nymph", "22", "Black"), cold_spring_river)
        wulff = scorer.score_fly(_fly("rw", "Royal Wulff Attractor", "dry", "8", "Red"), cold_spring_river)

        assert midge.score == 135
        assert wulff.score == 33
        assert midge.tiers["water"] == 60
        assert "Cold water: midges and tiny flies are essential" in midge.reasons
        assert "Large dry flies are ineffective in cold water" in wulff.reasons

    def test_windy_summer_hopper_wins(self, windy_summer_river, sample_flies):
        hopper = _fly(
            "hopper-best",
            "Dave's Hopper",
            "terrestrial",
            "10",
            "Yellow",
            weather=["sunny"],
            time_of_day=["midday", "afternoon"],
            time_of_year=["summer", "late_summer", "early_fall"],
            water_clarity=["clear"],
            water_temperature_range={"min": 58, "max": 72},
        )
        scorer = HierarchicalScorer(settings=EXACT)
        scored = scorer.score_all(sample_flies + [hopper], windy_summer_river)
        best_fly, best = max(scored, key=lambda pair: pair[1].score)

        assert best_fly.id == "hopper-best"
        assert best.score == 189
        assert best.tiers["weather"] > 0
        assert "Windy: terrestrials get blown into the water" in best.reasons
        others = [s.score for f, s in scored if f.id != "hopper-best"]
        assert max(others) < 150

    def test_full_moon_night(self, full_moon_night):
        scorer = HierarchicalScorer(settings=EXACT)
        mouse = scorer.score_fly(_fly("mm", "Morrish Mouse", "streamer", "2", "Brown"), full_moon_night)
        adams = scorer.score_fly(_fly("pa", "Parachute Adams", "dry", "16", "Gray"), full_moon_night)

        assert mouse.score == 242
        assert adams.score == 76
        assert "Dry flies are ineffective at night" in adams.reasons
        assert "Night and lunar activity: large dark patterns" in mouse.reasons


class TestScorerMechanics:
    def test_reasons_in_tier_order(self, cold_spring_river):
        result = HierarchicalScorer(settings=EXACT).score_fly(
            _fly("zm", "Zebra Midge", "nymph", "22", "Black"), cold_spring_river
        )
        assert result.reasons[0] == "River fishing: nymphs excel in current"
        assert result.reasons[-1] == "Nymphs are always effective"
        assert list(result.tiers) == [
            "location", "weather", "water", "season", "lunar", "versatility", "uniqueness", "realtime",
        ]

    def test_floor(self, make_conditions):
        # Sunny +10, night dry -30 with only the weather tier.
        scorer = HierarchicalScorer(tiers=[("weather", score_weather)], settings=EXACT)
        result = scorer.score_fly(
            _fly("pa", "Parachute Adams", "dry", "16", "Gray"),
            make_conditions(time_of_day=TimeOfDay.NIGHT),
        )
        assert result.score == EXACT.score_floor
        assert result.raw_total == -20

    def test_custom_subset(self, make_conditions):
        scorer = HierarchicalScorer(tiers=[("weather", score_weather)], settings=EXACT)
        assert scorer.tier_names == ["weather"]
        result = scorer.score_fly(_fly("zm", "Zebra Midge", "nymph", "20", "Black"), make_conditions())
        assert result.tiers == {"weather": 25}
        assert result.score == 25

    def test_deterministic(self, windy_summer_river, sample_flies):
        scorer = HierarchicalScorer()
        first = [s for _, s in scorer.score_all(sample_flies, windy_summer_river)]
        second = [s for _, s in scorer.score_all(sample_flies, windy_summer_river)]
        assert first == second

    def test_jitter_stays_near_exact_score(self, cold_spring_river):
        fly = _fly("zm", "Zebra Midge", "nymph", "22", "Black")
        jittered = HierarchicalScorer().score_fly(fly, cold_spring_river)
        assert 125 <= jittered.score <= 145

    def test_module_helper(self, cold_spring_river):
        fly = _fly("zm", "Zebra Midge", "nymph", "22", "Black")
        assert score_fly(fly, cold_spring_river) == HierarchicalScorer().score_fly(fly, cold_spring_river)

    def test_flyscore_raw_total(self):
        assert FlyScore(score=5.0, tiers={"a": 10.0, "b": -30.0}).raw_total == -20.0
