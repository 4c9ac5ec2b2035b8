"""
Condition normalizer: PartialFishingConditions → FishingConditions.

Fills every field the scorer reads with a concrete value.  Caller-supplied
values always win; missing values are derived in this order:

  1. Evaluation instant and calendar buckets
     - ``observed_at`` is ``now``, moved onto ``partial.date`` when the caller
       asked about a different day (time of day is preserved).
     - time of day from the local solar hour (UTC + longitude / 15).
     - time of year from the calendar month (10 bands).
  2. Weather, from the live ``WeatherSnapshot`` when present:
     condition text / cloud cover → category, mph → wind band,
     degrees → compass sector, °F → air temperature band.
  3. Water, when there is no live gauge reading: heuristics driven by
     weather, wind and season (runoff, winter low water, wind chop).
     A live reading contributes its temperature and a flow band from cfs.
  4. Water temperature: live reading → caller value → estimate from air
     temperature → 50 °F.
  5. Lunar and solunar state from ``fly_advisor.astro.lunar``.
  6. Active hatches from the hatch calendar (unless ``derive_hatches`` is off
     or the caller passed an explicit list).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from fly_advisor.astro.lunar import get_moon_phase, get_solunar_periods, is_in_solunar_period
from fly_advisor.conditions.hatch_calendar import active_hatches
from fly_advisor.models.conditions import (
    FishingConditions,
    PartialFishingConditions,
    WaterSnapshot,
    WeatherSnapshot,
)
from fly_advisor.taxonomy.condition_taxonomy import (
    TemperatureBand,
    TimeOfDay,
    TimeOfYear,
    WaterClarity,
    WaterFlow,
    WaterLevel,
    WeatherCategory,
    WindDirection,
    WindSpeed,
)
from fly_advisor.utils.time_utils import ensure_utc, solar_hour

logger = logging.getLogger(__name__)

DEFAULT_WATER_TEMP_F = 50.0

# ── Calendar buckets ──────────────────────────────────────────────────────────

# (start hour inclusive, end hour exclusive, bucket); anything else is night.
_TIME_OF_DAY_BANDS: list[tuple[float, float, TimeOfDay]] = [
    (5, 8, TimeOfDay.DAWN),
    (8, 12, TimeOfDay.MORNING),
    (12, 17, TimeOfDay.MIDDAY),
    (17, 20, TimeOfDay.AFTERNOON),
    (20, 22, TimeOfDay.DUSK),
]

_TIME_OF_YEAR_BY_MONTH: dict[int, TimeOfYear] = {
    12: TimeOfYear.WINTER,
    1: TimeOfYear.WINTER,
    2: TimeOfYear.WINTER,
    3: TimeOfYear.EARLY_SPRING,
    4: TimeOfYear.SPRING,
    5: TimeOfYear.LATE_SPRING,
    6: TimeOfYear.EARLY_SUMMER,
    7: TimeOfYear.SUMMER,
    8: TimeOfYear.LATE_SUMMER,
    9: TimeOfYear.EARLY_FALL,
    10: TimeOfYear.FALL,
    11: TimeOfYear.LATE_FALL,
}


def time_of_day_for_hour(hour: float) -> TimeOfDay:
    for start, end, bucket in _TIME_OF_DAY_BANDS:
        if start <= hour < end:
            return bucket
    return TimeOfDay.NIGHT


def time_of_year_for_month(month: int) -> TimeOfYear:
    return _TIME_OF_YEAR_BY_MONTH[month]


# ── Weather mapping ───────────────────────────────────────────────────────────


def weather_category_from_snapshot(snapshot: WeatherSnapshot) -> WeatherCategory:
    """Map a live weather reading onto the six-way sky category."""
    text = snapshot.condition.lower()
    if "storm" in text or "thunder" in text:
        return WeatherCategory.STORMY
    if "rain" in text or "drizzle" in text or "shower" in text:
        return WeatherCategory.RAINY
    if "fog" in text or "mist" in text:
        return WeatherCategory.FOGGY
    if snapshot.cloud_cover is not None:
        if snapshot.cloud_cover > 75:
            return WeatherCategory.OVERCAST
        if snapshot.cloud_cover > 25:
            return WeatherCategory.CLOUDY
        return WeatherCategory.SUNNY
    if "overcast" in text:
        return WeatherCategory.OVERCAST
    if "cloud" in text:
        return WeatherCategory.CLOUDY
    return WeatherCategory.SUNNY


def wind_speed_category(mph: float) -> WindSpeed:
    if mph < 3:
        return WindSpeed.NONE
    if mph < 7:
        return WindSpeed.LIGHT
    if mph < 12:
        return WindSpeed.MODERATE
    if mph < 18:
        return WindSpeed.STRONG
    return WindSpeed.VERY_STRONG


_COMPASS = [
    WindDirection.NORTH,
    WindDirection.NORTHEAST,
    WindDirection.EAST,
    WindDirection.SOUTHEAST,
    WindDirection.SOUTH,
    WindDirection.SOUTHWEST,
    WindDirection.WEST,
    WindDirection.NORTHWEST,
]


def wind_direction_category(degrees: float) -> WindDirection:
    """45° compass sectors centred on each of the eight points."""
    return _COMPASS[int(((degrees % 360) + 22.5) // 45) % 8]


def temperature_band(fahrenheit: float) -> TemperatureBand:
    if fahrenheit < 32:
        return TemperatureBand.VERY_COLD
    if fahrenheit < 50:
        return TemperatureBand.COLD
    if fahrenheit < 65:
        return TemperatureBand.COOL
    if fahrenheit < 80:
        return TemperatureBand.MODERATE
    if fahrenheit < 90:
        return TemperatureBand.WARM
    return TemperatureBand.HOT


# ── Water estimation ──────────────────────────────────────────────────────────


@dataclass
class WaterEstimate:
    """Heuristic water state used when no gauge reading is available."""

    clarity: WaterClarity = WaterClarity.CLEAR
    level: WaterLevel = WaterLevel.NORMAL
    flow: WaterFlow = WaterFlow.MODERATE


def flow_category_from_cfs(cfs: float, low_cfs: float = 50.0, high_cfs: float = 200.0) -> WaterFlow:
    if cfs < low_cfs:
        return WaterFlow.SLOW
    if cfs <= high_cfs:
        return WaterFlow.MODERATE
    return WaterFlow.FAST


def estimate_water_conditions(
    weather: WeatherCategory,
    time_of_year: TimeOfYear,
    time_of_day: TimeOfDay,
    wind_mph: Optional[float] = None,
    wind: Optional[WindSpeed] = None,
) -> WaterEstimate:
    """Estimate clarity, level and flow from weather, wind and season.

    Rules apply in order and later rules override earlier ones: weather,
    then wind, then season.  When only a wind band is known, ``none`` counts
    as calm (<2 mph) and ``strong`` or above as gusty (>10 mph).
    """
    estimate = WaterEstimate()

    if weather in (WeatherCategory.RAINY, WeatherCategory.STORMY):
        estimate.clarity = WaterClarity.MURKY
        estimate.level = WaterLevel.HIGH
        estimate.flow = WaterFlow.FAST
    elif weather == WeatherCategory.SUNNY and time_of_day == TimeOfDay.MORNING:
        estimate.clarity = WaterClarity.CLEAR
        estimate.flow = WaterFlow.MODERATE
    elif weather in (WeatherCategory.CLOUDY, WeatherCategory.OVERCAST):
        estimate.clarity = WaterClarity.SLIGHTLY_MURKY
        estimate.flow = WaterFlow.MODERATE

    if wind_mph is not None:
        gusty, calm = wind_mph > 10, wind_mph < 2
    else:
        gusty = wind in (WindSpeed.STRONG, WindSpeed.VERY_STRONG)
        calm = wind == WindSpeed.NONE
    if gusty:
        estimate.clarity = WaterClarity.SLIGHTLY_MURKY
        estimate.flow = WaterFlow.FAST
    elif calm:
        estimate.flow = WaterFlow.SLOW

    if time_of_year in (TimeOfYear.WINTER, TimeOfYear.EARLY_SPRING):
        estimate.level = WaterLevel.LOW
        estimate.flow = WaterFlow.SLOW
    elif time_of_year in (TimeOfYear.SPRING, TimeOfYear.LATE_SPRING):
        estimate.level = WaterLevel.HIGH
        estimate.flow = WaterFlow.FAST
        estimate.clarity = WaterClarity.SLIGHTLY_MURKY

    return estimate


def estimate_water_temperature(air_temp_f: float, time_of_year: TimeOfYear) -> float:
    """Water runs cooler than air; more so in summer."""
    if time_of_year in (TimeOfYear.WINTER, TimeOfYear.EARLY_SPRING):
        return max(32.0, air_temp_f - 8)
    if time_of_year in (TimeOfYear.SUMMER, TimeOfYear.LATE_SUMMER):
        return max(50.0, air_temp_f - 12)
    return max(40.0, air_temp_f - 8)


def _live_water(snapshot: Optional[WaterSnapshot]) -> Optional[WaterSnapshot]:
    if snapshot is None or not snapshot.is_active or not snapshot.has_reading:
        return None
    return snapshot


# ── Public API ────────────────────────────────────────────────────────────────


def resolve_observed_at(partial: PartialFishingConditions, now: datetime) -> datetime:
    """Evaluation instant: ``now``, moved onto ``partial.date`` if it differs."""
    moment = ensure_utc(now)
    if partial.date is None or partial.date == moment.date():
        return moment
    return moment.replace(year=partial.date.year, month=partial.date.month, day=partial.date.day)


def normalize_conditions(
    partial: PartialFishingConditions,
    now: datetime,
    derive_hatches: bool = True,
    low_flow_cfs: float = 50.0,
    high_flow_cfs: float = 200.0,
) -> FishingConditions:
    """Fill every missing condition field with a concrete value.

    Args:
        partial: Caller-supplied conditions.  Location name and coordinates
            are required.
        now: Aware current instant from the injected clock.
        derive_hatches: Derive ``active_hatches`` from the hatch calendar
            when the caller did not pass a list.
        low_flow_cfs: Live flow below this is ``slow``.
        high_flow_cfs: Live flow above this is ``fast``.

    Returns:
        A frozen ``FishingConditions``.

    Raises:
        ValueError: If location name or coordinates are missing.
    """
    if not partial.has_location:
        raise ValueError("Location name, latitude and longitude are required.")

    latitude = float(partial.latitude)  # type: ignore[arg-type]
    longitude = float(partial.longitude)  # type: ignore[arg-type]
    observed_at = resolve_observed_at(partial, now)
    day = observed_at.date()

    time_of_day = partial.time_of_day or time_of_day_for_hour(solar_hour(observed_at, longitude))
    time_of_year = partial.time_of_year or time_of_year_for_month(day.month)

    # Weather
    snapshot = partial.weather_data
    weather = partial.weather
    wind_speed = partial.wind_speed
    wind_direction = partial.wind_direction
    air_temperature = partial.air_temperature
    if snapshot is not None:
        weather = weather or weather_category_from_snapshot(snapshot)
        if wind_speed is None and snapshot.wind_speed_mph is not None:
            wind_speed = wind_speed_category(snapshot.wind_speed_mph)
        if wind_direction is None and snapshot.wind_direction_deg is not None:
            wind_direction = wind_direction_category(snapshot.wind_direction_deg)
        if air_temperature is None and snapshot.temperature_f is not None:
            air_temperature = temperature_band(snapshot.temperature_f)
    weather = weather or WeatherCategory.SUNNY
    wind_speed = wind_speed or WindSpeed.LIGHT
    wind_direction = wind_direction or WindDirection.VARIABLE
    air_temperature = air_temperature or TemperatureBand.MODERATE

    # Water
    live = _live_water(partial.water_data)
    if live is None:
        estimate = estimate_water_conditions(
            weather,
            time_of_year,
            time_of_day,
            wind_mph=snapshot.wind_speed_mph if snapshot is not None else None,
            wind=wind_speed,
        )
    else:
        estimate = WaterEstimate()
        if live.flow_cfs is not None:
            estimate.flow = flow_category_from_cfs(live.flow_cfs, low_flow_cfs, high_flow_cfs)

    water_temperature_estimated = False
    if live is not None and live.water_temperature_f is not None:
        water_temperature = live.water_temperature_f
    elif partial.water_temperature is not None:
        water_temperature = partial.water_temperature
    elif snapshot is not None and snapshot.temperature_f is not None:
        water_temperature = estimate_water_temperature(snapshot.temperature_f, time_of_year)
        water_temperature_estimated = True
    else:
        water_temperature = DEFAULT_WATER_TEMP_F
        water_temperature_estimated = True

    # Lunar / solunar
    moon = get_moon_phase(observed_at)
    solunar = partial.solunar or is_in_solunar_period(observed_at, latitude, longitude)
    solunar_periods = partial.solunar_periods or get_solunar_periods(observed_at, latitude, longitude)

    # Hatches
    if partial.active_hatches is not None:
        hatches = list(partial.active_hatches)
    elif derive_hatches:
        hatches = active_hatches(day, water_temperature, time_of_day)
    else:
        hatches = []

    conditions = FishingConditions(
        date=day,
        observed_at=observed_at,
        location=partial.location.strip(),  # type: ignore[union-attr]
        latitude=latitude,
        longitude=longitude,
        location_address=partial.location_address or "",
        weather=weather,
        wind_speed=wind_speed,
        wind_direction=wind_direction,
        air_temperature=air_temperature,
        water_clarity=partial.water_clarity or estimate.clarity,
        water_level=partial.water_level or estimate.level,
        water_flow=partial.water_flow or estimate.flow,
        water_temperature=water_temperature,
        water_temperature_estimated=water_temperature_estimated,
        water_depth=partial.water_depth,
        water_ph=partial.water_ph,
        dissolved_oxygen=partial.dissolved_oxygen,
        time_of_day=time_of_day,
        time_of_year=time_of_year,
        moon_phase=partial.moon_phase or moon.phase,
        moon_illumination=(
            partial.moon_illumination if partial.moon_illumination is not None else moon.illumination
        ),
        feeding_activity=partial.feeding_activity or moon.feeding_activity,
        solunar=solunar,
        solunar_periods=solunar_periods,
        active_hatches=hatches,
        weather_data=snapshot,
        water_data=live,
        notes=partial.notes,
    )
    logger.debug(
        "Normalized conditions for %s: %s/%s, water %.1f°F (%s), %d hatches",
        conditions.location,
        conditions.time_of_year,
        conditions.time_of_day,
        conditions.water_temperature,
        "estimated" if water_temperature_estimated else "measured",
        len(hatches),
    )
    return conditions
