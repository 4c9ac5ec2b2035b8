"""
Scoring tiers for the hierarchical fly scorer.

Each tier is a pure function ``tier(fly, conditions, settings) -> TierResult``
returning an additive score delta and the reasons behind it.  Tiers mirror
the order a fishing guide reasons in:

  1. location   — river vs lake vs unknown water, plus regional fit.
  2. weather    — light, wind and time of day.
  3. water      — clarity, flow, temperature, level, live gauge quality.
  4. season     — seasonal named patterns and active hatch matches.
  5. lunar      — feeding activity, moon phase, night + moon, solunar window.
  6. versatility — breadth of declared conditions and fly-type base weight.
  7. uniqueness — deterministic per-location jitter plus local pattern bonuses.
  8. realtime   — bonuses that only fire on live sensor readings.

Fly name matching is case-insensitive substring matching, except ``ant``
which must be a whole word so that "Pheasant" does not read as a terrestrial.

Tiers never raise for valid models.
"""

from __future__ import annotations

import hashlib
import re
from dataclasses import dataclass, field
from typing import Callable, Optional

from fly_advisor.config import ScoringConfig
from fly_advisor.models.conditions import ActiveHatch, FishingConditions, WaterSnapshot
from fly_advisor.models.fly import FlyPattern
from fly_advisor.taxonomy.condition_taxonomy import (
    SEASON_OF_BAND,
    DataQuality,
    FeedingActivity,
    FlyType,
    HatchIntensity,
    MoonPhase,
    Region,
    SolunarPeriodType,
    TimeOfDay,
    WaterClarity,
    WaterFlow,
    WaterLevel,
    WeatherCategory,
    WindSpeed,
)


@dataclass
class TierResult:
    """Score delta and reason trail produced by one tier."""

    delta: float = 0.0
    reasons: list[str] = field(default_factory=list)

    def add(self, points: float, reason: str = "") -> None:
        self.delta += points
        if reason:
            self.reasons.append(reason)


Tier = Callable[[FlyPattern, FishingConditions, ScoringConfig], TierResult]

RIVER_KEYWORDS: tuple[str, ...] = ("river", "creek", "stream", "fork", "branch", "canyon", "gorge")
LAKE_KEYWORDS: tuple[str, ...] = ("lake", "pond", "reservoir", "impoundment")

_NATURAL_COLORS: tuple[str, ...] = ("natural", "olive", "brown")
_ATTRACTOR_COLORS: tuple[str, ...] = ("bright", "chartreuse")
_MURKY_COLORS: tuple[str, ...] = ("bright", "chartreuse", "orange")
_WINDY: frozenset[WindSpeed] = frozenset({WindSpeed.MODERATE, WindSpeed.STRONG, WindSpeed.VERY_STRONG})
_ANT = re.compile(r"\bants?\b")


# ── Helpers ───────────────────────────────────────────────────────────────────


def _name_has(fly: FlyPattern, *keywords: str) -> bool:
    name = fly.name_lower
    for keyword in keywords:
        if keyword == "ant":
            if _ANT.search(name):
                return True
        elif keyword in name:
            return True
    return False


def _color_has(fly: FlyPattern, words: tuple[str, ...]) -> bool:
    color = fly.color_lower
    return any(word in color for word in words)


def _live_gauge(conditions: FishingConditions) -> Optional[WaterSnapshot]:
    """The gauge reading, only when the station is online and reporting."""
    gauge = conditions.water_data
    if gauge is None or not gauge.is_active or not gauge.has_reading:
        return None
    return gauge


def _is_terrestrial(fly: FlyPattern) -> bool:
    return fly.type == FlyType.TERRESTRIAL or _name_has(fly, "hopper", "ant")


def _is_large_streamer(fly: FlyPattern, max_size: int) -> bool:
    return fly.type == FlyType.STREAMER and fly.size_number <= max_size


def is_river_location(conditions: FishingConditions) -> bool:
    place = conditions.place_text
    return any(keyword in place for keyword in RIVER_KEYWORDS)


def is_lake_location(conditions: FishingConditions) -> bool:
    place = conditions.place_text
    return any(keyword in place for keyword in LAKE_KEYWORDS)


def region_for(latitude: float, longitude: float) -> Region:
    """Coarse North American region from coordinates."""
    if latitude > 40 and longitude < -100:
        return Region.WESTERN
    if latitude > 40 and longitude > -100:
        return Region.EASTERN
    if latitude < 40:
        return Region.SOUTHERN
    return Region.MOUNTAIN


def location_jitter(latitude: float, longitude: float, fly_id: str, amplitude: int) -> int:
    """Deterministic integer in ``[-amplitude, +amplitude]``.

    Seeded by SHA-256 of the rounded coordinates and fly id so nearby
    requests for the same spot rank identically, while different spots
    break near-ties differently.
    """
    if amplitude <= 0:
        return 0
    seed = f"{latitude:.4f}:{longitude:.4f}:{fly_id}".encode("utf-8")
    value = int(hashlib.sha256(seed).hexdigest()[:8], 16)
    return value % (2 * amplitude + 1) - amplitude


def hatch_matches(fly: FlyPattern, hatch: ActiveHatch) -> bool:
    """Whether ``fly`` imitates ``hatch`` by name, listed pattern or declared insect."""
    name = fly.name_lower
    insect = hatch.insect.lower()
    if name in insect or insect in name:
        return True
    for pattern in hatch.patterns:
        lowered = pattern.lower()
        if lowered in name or name in lowered:
            return True
    return any(declared in insect for declared in fly.best_conditions.hatch_insects)


def count_matching_conditions(fly: FlyPattern, conditions: FishingConditions) -> int:
    """Number of declared best-condition dimensions the current conditions hit."""
    best = fly.best_conditions
    count = sum(
        (
            conditions.weather in best.weather,
            conditions.time_of_day in best.time_of_day,
            conditions.time_of_year in best.time_of_year,
            conditions.water_clarity in best.water_clarity,
            conditions.water_level in best.water_level,
        )
    )
    if best.water_temperature_range is not None and best.water_temperature_range.contains(
        conditions.water_temperature
    ):
        count += 1
    return count


def versatility_bonus(fly: FlyPattern) -> int:
    entries = fly.best_conditions.declared_entry_count
    if entries > 15:
        return 20
    if entries > 10:
        return 15
    if entries > 6:
        return 10
    if entries > 3:
        return 5
    return 0


# ── 1. Location ───────────────────────────────────────────────────────────────


def score_location(fly: FlyPattern, conditions: FishingConditions, settings: ScoringConfig) -> TierResult:
    result = TierResult()

    if is_river_location(conditions):
        if fly.type == FlyType.NYMPH:
            result.add(40, "River fishing: nymphs excel in current")
        elif fly.type == FlyType.STREAMER:
            result.add(35, "River fishing: streamers work well in current")
        elif fly.type == FlyType.EMERGER:
            result.add(30, "River fishing: emergers match river hatches")
        elif _name_has(fly, "stone"):
            result.add(35, "Stoneflies are river specialists")
        elif _name_has(fly, "caddis"):
            result.add(25, "Caddisflies thrive in rivers")
        else:
            result.add(10)
    elif is_lake_location(conditions):
        if _name_has(fly, "midge", "chironomid"):
            result.add(45, "Lake fishing: midges are stillwater staples")
        elif _name_has(fly, "leech"):
            result.add(40, "Lake fishing: leeches excel in stillwater")
        elif _name_has(fly, "damsel"):
            result.add(35, "Lake fishing: damselflies are lake insects")
        elif _name_has(fly, "callibaetis"):
            result.add(30, "Lake fishing: callibaetis are lake mayflies")
        elif fly.type == FlyType.DRY and _name_has(fly, "hopper"):
            result.add(25, "Lake fishing: hoppers work along the banks")
        else:
            result.add(15)
    else:
        result.add(20, "General water type: balanced approach")

    region = region_for(conditions.latitude, conditions.longitude)
    if region in fly.best_conditions.regions:
        result.add(15, f"Effective in the {region} region")

    return result


# ── 2. Weather & light ────────────────────────────────────────────────────────


def score_weather(fly: FlyPattern, conditions: FishingConditions, settings: ScoringConfig) -> TierResult:
    result = TierResult()
    size = fly.size_number
    weather = conditions.weather

    if weather == WeatherCategory.SUNNY:
        if size >= 18:
            result.add(25, "Bright sun: small flies look natural")
        elif _color_has(fly, _NATURAL_COLORS):
            result.add(20, "Natural colors work well in bright light")
        else:
            result.add(10, "Bright conditions call for subtle presentations")
    elif weather in (WeatherCategory.CLOUDY, WeatherCategory.OVERCAST, WeatherCategory.RAINY):
        if size <= 14:
            result.add(30, "Low light: larger flies are more visible")
        elif _name_has(fly, "attractor") or _color_has(fly, _ATTRACTOR_COLORS):
            result.add(25, "Bright attractors excel in low light")
        else:
            result.add(20, "Overcast conditions favor visible patterns")

    if conditions.wind_speed in _WINDY:
        if _is_terrestrial(fly):
            result.add(35, "Windy: terrestrials get blown into the water")
        elif fly.type == FlyType.STREAMER or size <= 10:
            result.add(25, "Windy: heavy flies cut through wind")
        elif fly.type == FlyType.DRY:
            result.add(-15, "Wind makes dry fly presentation difficult")
        else:
            result.add(10, "Wind affects fly presentation")

    if conditions.time_of_day in (TimeOfDay.DAWN, TimeOfDay.DUSK):
        if _name_has(fly, "spinner", "fall"):
            result.add(30, "Dawn and dusk: spinner falls are common")
        elif fly.type == FlyType.DRY and size <= 14:
            result.add(20, "Low light: larger dries are easier to see")
    elif conditions.time_of_day == TimeOfDay.NIGHT:
        if _name_has(fly, "mouse") or _is_large_streamer(fly, 6):
            result.add(40, "Night fishing: large dark patterns")
        elif fly.type == FlyType.DRY:
            result.add(-30, "Dry flies are ineffective at night")

    best = fly.best_conditions
    if weather in best.weather:
        result.add(10, f"Pattern suited to {weather} weather")
    if conditions.time_of_day in best.time_of_day:
        result.add(5, f"Pattern suited to {conditions.time_of_day} fishing")

    return result


# ── 3. Water conditions ───────────────────────────────────────────────────────


def score_water(fly: FlyPattern, conditions: FishingConditions, settings: ScoringConfig) -> TierResult:
    result = TierResult()
    size = fly.size_number

    clarity = conditions.water_clarity
    if clarity == WaterClarity.CLEAR:
        if _color_has(fly, _NATURAL_COLORS):
            result.add(25, "Clear water: natural colors are essential")
        elif size >= 18:
            result.add(20, "Clear water: small flies spook fewer fish")
        else:
            result.add(10, "Clear water requires subtle presentations")
    elif clarity in (WaterClarity.MURKY, WaterClarity.VERY_MURKY):
        if _color_has(fly, _MURKY_COLORS):
            result.add(30, "Murky water: bright flies stand out")
        elif size <= 12:
            result.add(25, "Murky water: larger flies push more water")
        else:
            result.add(15, "Murky water: visibility is key")

    flow = conditions.water_flow
    if flow in (WaterFlow.FAST, WaterFlow.RAPID):
        if fly.type == FlyType.STREAMER or _name_has(fly, "weighted", "heavy"):
            result.add(35, "Fast water: weighted flies cut through current")
        elif fly.type == FlyType.NYMPH and size <= 14:
            result.add(25, "Fast water: heavy nymphs get down")
        elif fly.type == FlyType.DRY:
            result.add(-20, "Fast water makes dry fly drifts difficult")
    elif flow in (WaterFlow.SLOW, WaterFlow.STILL):
        if fly.type in (FlyType.DRY, FlyType.EMERGER):
            result.add(30, "Slow water: dries and emergers excel")
        elif fly.type == FlyType.NYMPH and size >= 18:
            result.add(25, "Slow water: small nymphs work well")
        else:
            result.add(15, "Slow water: delicate presentations work")

    temp = conditions.water_temperature
    if temp < settings.cold_water_f:
        if _name_has(fly, "midge") or size >= 20:
            result.add(40, "Cold water: midges and tiny flies are essential")
        elif _name_has(fly, "worm", "san juan"):
            result.add(35, "Cold water: worms are go-to patterns")
        elif fly.type == FlyType.STREAMER and _name_has(fly, "bugger"):
            result.add(25, "Cold water: slow streamer retrieves")
        elif fly.type == FlyType.DRY and size <= 12:
            result.add(-30, "Large dry flies are ineffective in cold water")
    elif temp > settings.warm_water_f:
        if _is_terrestrial(fly):
            result.add(35, "Warm water: terrestrials are active")
        elif fly.type == FlyType.DRY and size <= 14:
            result.add(25, "Warm water: surface feeding is active")
        else:
            result.add(15, "Warm water: fish are more active")
    else:
        result.add(20, "Moderate water temperature: most flies work")

    level = conditions.water_level
    if level in (WaterLevel.HIGH, WaterLevel.FLOODING):
        if fly.type == FlyType.STREAMER or size <= 10:
            result.add(25, "High water: large flies and streamers")
        elif fly.type == FlyType.DRY:
            result.add(-15, "High water: dry flies are less effective")
    elif level == WaterLevel.LOW:
        if fly.type == FlyType.DRY and size >= 18:
            result.add(30, "Low water: small dries spook fewer fish")
        elif fly.type == FlyType.NYMPH and size >= 18:
            result.add(25, "Low water: small nymphs are essential")

    gauge = _live_gauge(conditions)
    if gauge is not None and gauge.data_quality == DataQuality.GOOD:
        station = gauge.station_name or "monitoring station"
        result.add(15, f"Real-time gauge data from {station}")

    temp_range = fly.best_conditions.water_temperature_range
    if temp_range is not None and temp_range.contains(temp):
        result.add(10, f"Water temperature {temp:.0f}°F is in this pattern's range")

    return result


# ── 4. Season & hatch ─────────────────────────────────────────────────────────


def score_season(fly: FlyPattern, conditions: FishingConditions, settings: ScoringConfig) -> TierResult:
    result = TierResult()
    size = fly.size_number
    season = SEASON_OF_BAND[conditions.time_of_year]

    if season == "spring":
        if _name_has(fly, "bwo", "blue wing"):
            result.add(40, "Spring: BWO hatches are critical")
        elif _name_has(fly, "stone"):
            result.add(35, "Spring: stonefly hatches begin")
        elif _name_has(fly, "caddis"):
            result.add(25, "Spring: early caddis activity")
        elif _name_has(fly, "leech"):
            result.add(20, "Spring: leeches become active")
    elif season == "summer":
        if _name_has(fly, "pmd", "pale morning"):
            result.add(40, "Summer: PMD hatches peak")
        elif _is_terrestrial(fly):
            result.add(35, "Summer: terrestrial season")
        elif _name_has(fly, "caddis"):
            result.add(30, "Summer: heavy caddis hatches")
        elif _name_has(fly, "attractor"):
            result.add(25, "Summer: attractor patterns work")
    elif season == "fall":
        if _name_has(fly, "october", "caddis"):
            result.add(40, "Fall: October caddis season")
        elif _is_large_streamer(fly, 8):
            result.add(35, "Fall: large streamers for aggressive fish")
        elif _name_has(fly, "midge"):
            result.add(25, "Fall: midge activity increases")
        elif _name_has(fly, "bwo", "blue wing"):
            result.add(30, "Fall: fall BWO hatches")
    else:
        if _name_has(fly, "midge") or size >= 20:
            result.add(45, "Winter: midges are the main food source")
        elif _name_has(fly, "worm", "san juan"):
            result.add(40, "Winter: worms are essential")
        elif fly.type == FlyType.STREAMER and size >= 16:
            result.add(25, "Winter: small streamers work")
        elif fly.type == FlyType.DRY:
            result.add(-30, "Winter: dry flies rarely work")

    for hatch in conditions.active_hatches:
        if not hatch_matches(fly, hatch):
            continue
        bonus = 20
        if hatch.intensity == HatchIntensity.HEAVY:
            bonus += 15
        elif hatch.intensity == HatchIntensity.MODERATE:
            bonus += 10
        result.add(bonus, f"Matches active {hatch.intensity} {hatch.insect} hatch")

    return result


# ── 5. Lunar / solunar ────────────────────────────────────────────────────────


def score_lunar(fly: FlyPattern, conditions: FishingConditions, settings: ScoringConfig) -> TierResult:
    result = TierResult()
    activity = conditions.feeding_activity
    phase = conditions.moon_phase
    is_mouse = _name_has(fly, "mouse")

    if activity == FeedingActivity.VERY_HIGH:
        result.add(20, "Very high lunar feeding activity")
        if is_mouse:
            result.add(25, "Mouse patterns excel during peak lunar activity")
        elif _is_large_streamer(fly, 8):
            result.add(15, "Large streamers for peak lunar feeding")
    elif activity == FeedingActivity.HIGH:
        result.add(12, "High lunar feeding activity")
    elif activity == FeedingActivity.MODERATE:
        result.add(5, "Moderate lunar feeding activity")

    if phase in (MoonPhase.FULL, MoonPhase.NEW):
        result.add(10, f"{phase.capitalize()} moon: excellent fishing")
        if phase == MoonPhase.FULL and fly.type == FlyType.DRY:
            result.add(8, "Full moon: dry flies work well")
        elif phase == MoonPhase.NEW and is_mouse:
            result.add(15, "New moon: perfect for mouse patterns")

    lunar_night = phase == MoonPhase.FULL or activity in (FeedingActivity.HIGH, FeedingActivity.VERY_HIGH)
    if conditions.time_of_day == TimeOfDay.NIGHT and lunar_night:
        if is_mouse or _is_large_streamer(fly, 6):
            result.add(30, "Night and lunar activity: large dark patterns")

    solunar = conditions.solunar
    if solunar.in_period:
        remaining = round(solunar.minutes_remaining)
        if solunar.period_type == SolunarPeriodType.MAJOR:
            result.add(15, f"Major solunar period active ({remaining} min remaining)")
        elif solunar.period_type == SolunarPeriodType.MINOR:
            result.add(8, f"Minor solunar period active ({remaining} min remaining)")

    return result


# ── 6. Versatility & diversity weighting ──────────────────────────────────────

_TYPE_BASE: dict[FlyType, tuple[int, str]] = {
    FlyType.NYMPH:       (10, "Nymphs are always effective"),
    FlyType.EMERGER:     (9,  "Emergers match natural insect stages"),
    FlyType.DRY:         (8,  "Dry fly fishing is exciting"),
    FlyType.STREAMER:    (7,  "Streamers for aggressive fish"),
    FlyType.TERRESTRIAL: (6,  "Terrestrials match natural food"),
}


def score_versatility(fly: FlyPattern, conditions: FishingConditions, settings: ScoringConfig) -> TierResult:
    result = TierResult()

    bonus = versatility_bonus(fly)
    if bonus > 15:
        result.add(bonus, "Highly versatile pattern")
    elif bonus > 8:
        result.add(bonus, "Versatile pattern")
    else:
        result.add(bonus)

    base, reason = _TYPE_BASE.get(fly.type, (5, ""))
    result.add(base, reason)

    matched = count_matching_conditions(fly, conditions)
    if matched > 5:
        result.add(12, f"Works in {matched} of today's conditions")
    elif matched > 3:
        result.add(8, f"Adaptable to {matched} of today's conditions")

    return result


# ── 7. Uniqueness ─────────────────────────────────────────────────────────────


def score_uniqueness(fly: FlyPattern, conditions: FishingConditions, settings: ScoringConfig) -> TierResult:
    result = TierResult()

    jitter = location_jitter(conditions.latitude, conditions.longitude, fly.id, settings.jitter_amplitude)
    result.add(jitter, "Location-specific uniqueness bonus" if jitter > 5 else "")

    if is_river_location(conditions) and _name_has(fly, "stonefly", "caddis"):
        result.add(8, "River-specific pattern match")
    if is_lake_location(conditions) and _name_has(fly, "midge", "leech"):
        result.add(8, "Lake-specific pattern match")
    if conditions.latitude > 41 and _name_has(fly, "midge"):
        result.add(6, "High elevation midge bonus")
    if conditions.latitude < 40 and _name_has(fly, "hopper"):
        result.add(6, "Low elevation terrestrial bonus")

    return result


# ── 8. Real-time data ─────────────────────────────────────────────────────────


def score_realtime(fly: FlyPattern, conditions: FishingConditions, settings: ScoringConfig) -> TierResult:
    result = TierResult()
    gauge = _live_gauge(conditions)
    weather = conditions.weather_data

    if gauge is not None and gauge.water_temperature_f is not None:
        temp = gauge.water_temperature_f
        if temp < settings.cold_water_f and _name_has(fly, "midge"):
            result.add(12, f"Live cold water ({temp:.0f}°F): midges are perfect")
        if temp > settings.warm_water_f and (fly.type == FlyType.TERRESTRIAL or _name_has(fly, "hopper")):
            result.add(10, f"Live warm water ({temp:.0f}°F): terrestrials are active")

    if gauge is not None and gauge.flow_cfs is not None:
        flow = gauge.flow_cfs
        if flow > settings.high_flow_cfs and fly.type == FlyType.STREAMER:
            result.add(15, f"Live high flow ({flow:.0f} cfs): streamer time")
        if flow < settings.low_flow_cfs and fly.type == FlyType.DRY:
            result.add(10, f"Live low flow ({flow:.0f} cfs): dry fly water")

    if weather is not None and weather.temperature_f is not None:
        if weather.temperature_f > settings.hot_air_f and _name_has(fly, "ant"):
            result.add(8, f"Live hot weather ({weather.temperature_f:.0f}°F): ants are active")

    if gauge is not None and gauge.data_quality == DataQuality.GOOD:
        result.add(5, "High-quality real-time data")

    return result


# ── Default pipeline ──────────────────────────────────────────────────────────

DEFAULT_TIERS: tuple[tuple[str, Tier], ...] = (
    ("location", score_location),
    ("weather", score_weather),
    ("water", score_water),
    ("season", score_season),
    ("lunar", score_lunar),
    ("versatility", score_versatility),
    ("uniqueness", score_uniqueness),
    ("realtime", score_realtime),
)
