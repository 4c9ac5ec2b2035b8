"""
Fishing condition models.

``PartialFishingConditions`` is what a caller hands to the recommendation
service: every field optional, exactly as observed or typed in the field.
``FishingConditions`` is the normalized form produced by
``fly_advisor.conditions.normalizer.normalize_conditions``.  Every field the
scorer reads carries a concrete value, so scoring tiers never branch on
"unknown".

Live sensor payloads (``WeatherSnapshot``, ``WaterSnapshot``) are kept on the
normalized object so the real-time scoring tier can reward fresh readings.
"""

from __future__ import annotations

import datetime as dt
from typing import Annotated, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict

from fly_advisor.models.lunar import SolunarPeriods, SolunarState
from fly_advisor.taxonomy.condition_taxonomy import (
    DataQuality,
    FeedingActivity,
    HatchIntensity,
    HatchStage,
    MoonPhase,
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


def _validate_latitude(v: float) -> float:
    if not -90.0 <= v <= 90.0:
        raise ValueError(f"latitude must be in [-90, 90], got {v}.")
    return v


def _validate_longitude(v: float) -> float:
    if not -180.0 <= v <= 180.0:
        raise ValueError(f"longitude must be in [-180, 180], got {v}.")
    return v


Latitude = Annotated[float, AfterValidator(_validate_latitude)]
Longitude = Annotated[float, AfterValidator(_validate_longitude)]


class WeatherSnapshot(BaseModel):
    """Current weather reading from a live provider.

    Attributes:
        temperature_f: Air temperature (°F).
        humidity: Relative humidity (%).
        pressure_hpa: Surface pressure (hPa).
        wind_speed_mph: Wind speed (mph).
        wind_direction_deg: Meteorological wind direction (degrees, 0 = N).
        cloud_cover: Cloud cover (%).
        condition: Short text description, e.g. ``"light rain"``.
        observed_at: Provider timestamp, if given.
        source: Provider tag, e.g. ``"open-meteo"``.
    """

    model_config = ConfigDict(frozen=True)

    temperature_f: Optional[float] = None
    humidity: Optional[float] = None
    pressure_hpa: Optional[float] = None
    wind_speed_mph: Optional[float] = None
    wind_direction_deg: Optional[float] = None
    cloud_cover: Optional[float] = None
    condition: str = ""
    observed_at: Optional[dt.datetime] = None
    source: str = "unknown"


class WaterSnapshot(BaseModel):
    """Instantaneous water reading from a gauge station.

    Attributes:
        station_id: Gauge identifier (USGS site number).
        station_name: Human-readable station name.
        flow_cfs: Discharge (cubic feet per second).
        water_temperature_f: Water temperature (°F).
        gauge_height_ft: Gauge height (ft).
        data_source: Source tag: ``"USGS"``, ``"NOAA"`` or ``"CUSTOM"``.
        data_quality: Reading quality grade.
        is_active: ``False`` when the station reports but is flagged offline.
        last_updated: Timestamp of the newest value in the reading.
    """

    model_config = ConfigDict(frozen=True)

    station_id: str = ""
    station_name: str = ""
    flow_cfs: Optional[float] = None
    water_temperature_f: Optional[float] = None
    gauge_height_ft: Optional[float] = None
    data_source: str = "USGS"
    data_quality: DataQuality = DataQuality.UNKNOWN
    is_active: bool = True
    last_updated: Optional[dt.datetime] = None

    @property
    def has_reading(self) -> bool:
        return self.flow_cfs is not None or self.water_temperature_f is not None


class ActiveHatch(BaseModel):
    """An insect hatch expected to be on the water right now.

    Attributes:
        insect: Hatch name, e.g. ``"Pale Morning Dun"``.
        stage: Life stage anglers should imitate.
        intensity: Hatch density; ``heavy`` close to peak.
        size: Typical natural size, e.g. ``"#16-18"``.
        patterns: Fly pattern names that imitate this hatch.
    """

    model_config = ConfigDict(frozen=True)

    insect: str
    stage: HatchStage = HatchStage.DUN
    intensity: HatchIntensity = HatchIntensity.LIGHT
    size: str = ""
    patterns: list[str] = []


class PartialFishingConditions(BaseModel):
    """Caller-supplied conditions.  Every field is optional.

    ``active_hatches=None`` means "derive from the hatch calendar"; an
    explicit empty list means "no hatches".
    """

    model_config = ConfigDict(frozen=True)

    date: Optional[dt.date] = None
    location: Optional[str] = None
    latitude: Optional[Latitude] = None
    longitude: Optional[Longitude] = None
    location_address: Optional[str] = None

    weather: Optional[WeatherCategory] = None
    wind_speed: Optional[WindSpeed] = None
    wind_direction: Optional[WindDirection] = None
    air_temperature: Optional[TemperatureBand] = None

    water_clarity: Optional[WaterClarity] = None
    water_level: Optional[WaterLevel] = None
    water_flow: Optional[WaterFlow] = None
    water_temperature: Optional[float] = None
    water_depth: Optional[float] = None
    water_ph: Optional[float] = None
    dissolved_oxygen: Optional[float] = None

    time_of_day: Optional[TimeOfDay] = None
    time_of_year: Optional[TimeOfYear] = None

    moon_phase: Optional[MoonPhase] = None
    moon_illumination: Optional[float] = None
    feeding_activity: Optional[FeedingActivity] = None
    solunar: Optional[SolunarState] = None
    solunar_periods: Optional[SolunarPeriods] = None

    active_hatches: Optional[list[ActiveHatch]] = None

    weather_data: Optional[WeatherSnapshot] = None
    water_data: Optional[WaterSnapshot] = None
    notes: Optional[str] = None

    @property
    def has_location(self) -> bool:
        return (
            bool(self.location and self.location.strip())
            and self.latitude is not None
            and self.longitude is not None
        )


class FishingConditions(BaseModel):
    """Fully normalized conditions for one evaluation instant.

    Built fresh per request by the normalizer and never persisted.
    ``observed_at`` is the timezone-aware UTC instant every time-dependent
    field (time of day, lunar state, solunar state) was computed for.
    """

    model_config = ConfigDict(frozen=True)

    date: dt.date
    observed_at: dt.datetime
    location: str
    latitude: Latitude
    longitude: Longitude
    location_address: str = ""

    weather: WeatherCategory = WeatherCategory.SUNNY
    wind_speed: WindSpeed = WindSpeed.LIGHT
    wind_direction: WindDirection = WindDirection.VARIABLE
    air_temperature: TemperatureBand = TemperatureBand.MODERATE

    water_clarity: WaterClarity = WaterClarity.CLEAR
    water_level: WaterLevel = WaterLevel.NORMAL
    water_flow: WaterFlow = WaterFlow.MODERATE
    water_temperature: float = 50.0
    water_temperature_estimated: bool = True
    water_depth: Optional[float] = None
    water_ph: Optional[float] = None
    dissolved_oxygen: Optional[float] = None

    time_of_day: TimeOfDay = TimeOfDay.MORNING
    time_of_year: TimeOfYear = TimeOfYear.SUMMER

    moon_phase: MoonPhase = MoonPhase.NEW
    moon_illumination: float = 0.0
    feeding_activity: FeedingActivity = FeedingActivity.MODERATE
    solunar: SolunarState = SolunarState()
    solunar_periods: Optional[SolunarPeriods] = None

    active_hatches: list[ActiveHatch] = []

    weather_data: Optional[WeatherSnapshot] = None
    water_data: Optional[WaterSnapshot] = None
    notes: Optional[str] = None

    @property
    def place_text(self) -> str:
        """Lowercased location name and address, for keyword matching."""
        return f"{self.location} {self.location_address}".lower()
