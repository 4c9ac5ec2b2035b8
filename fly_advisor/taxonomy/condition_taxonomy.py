"""
Condition and fly taxonomy for the recommendation engine.

Every categorical value that flows through the engine has one ``StrEnum``
here.  Values are the lowercase slugs used by the fly catalog's
``best_conditions`` lists, so a catalog entry can be compared against a
normalized condition with plain string equality.

Dimensions
----------
  - Weather / wind / air temperature  — sky and air state.
  - Water clarity / level / flow      — river or lake state.
  - Time of day / time of year        — when the angler is fishing.
  - Moon phase / feeding activity     — lunar state.
  - Fly type / hatch stage / intensity — what the fly imitates.

This module has NO imports from any other ``fly_advisor`` package.
"""

from enum import StrEnum


class WeatherCategory(StrEnum):
    """Coarse sky condition."""

    SUNNY = "sunny"
    CLOUDY = "cloudy"
    OVERCAST = "overcast"
    RAINY = "rainy"
    STORMY = "stormy"
    FOGGY = "foggy"


class WindSpeed(StrEnum):
    """Wind speed band (mph thresholds live in the normalizer)."""

    NONE = "none"
    LIGHT = "light"
    MODERATE = "moderate"
    STRONG = "strong"
    VERY_STRONG = "very_strong"


class WindDirection(StrEnum):
    NORTH = "north"
    NORTHEAST = "northeast"
    EAST = "east"
    SOUTHEAST = "southeast"
    SOUTH = "south"
    SOUTHWEST = "southwest"
    WEST = "west"
    NORTHWEST = "northwest"
    VARIABLE = "variable"


class TemperatureBand(StrEnum):
    """Air temperature band (°F thresholds live in the normalizer)."""

    VERY_COLD = "very_cold"
    COLD = "cold"
    COOL = "cool"
    MODERATE = "moderate"
    WARM = "warm"
    HOT = "hot"


class WaterClarity(StrEnum):
    CLEAR = "clear"
    SLIGHTLY_MURKY = "slightly_murky"
    MURKY = "murky"
    VERY_MURKY = "very_murky"


class WaterLevel(StrEnum):
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"
    FLOODING = "flooding"


class WaterFlow(StrEnum):
    STILL = "still"
    SLOW = "slow"
    MODERATE = "moderate"
    FAST = "fast"
    RAPID = "rapid"


class TimeOfDay(StrEnum):
    """Six fishing day-parts."""

    DAWN = "dawn"
    MORNING = "morning"
    MIDDAY = "midday"
    AFTERNOON = "afternoon"
    DUSK = "dusk"
    NIGHT = "night"


class TimeOfYear(StrEnum):
    """Ten seasonal bands, one per calendar month outside winter."""

    WINTER = "winter"
    EARLY_SPRING = "early_spring"
    SPRING = "spring"
    LATE_SPRING = "late_spring"
    EARLY_SUMMER = "early_summer"
    SUMMER = "summer"
    LATE_SUMMER = "late_summer"
    EARLY_FALL = "early_fall"
    FALL = "fall"
    LATE_FALL = "late_fall"


class MoonPhase(StrEnum):
    NEW = "new"
    WAXING_CRESCENT = "waxing_crescent"
    FIRST_QUARTER = "first_quarter"
    WAXING_GIBBOUS = "waxing_gibbous"
    FULL = "full"
    WANING_GIBBOUS = "waning_gibbous"
    LAST_QUARTER = "last_quarter"
    WANING_CRESCENT = "waning_crescent"


class FeedingActivity(StrEnum):
    """Lunar-driven fish feeding activity."""

    VERY_HIGH = "very_high"
    HIGH = "high"
    MODERATE = "moderate"
    LOW = "low"


class FishingQuality(StrEnum):
    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"


class SolunarRating(StrEnum):
    EXCELLENT = "excellent"
    GOOD = "good"
    AVERAGE = "average"
    POOR = "poor"


class SolunarPeriodType(StrEnum):
    MAJOR = "major"
    MINOR = "minor"


class FlyType(StrEnum):
    """Catalog fly families."""

    DRY = "dry"
    WET = "wet"
    NYMPH = "nymph"
    STREAMER = "streamer"
    TERRESTRIAL = "terrestrial"
    EMERGER = "emerger"


class HatchStage(StrEnum):
    NYMPH = "nymph"
    EMERGER = "emerger"
    DUN = "dun"
    SPINNER = "spinner"


class HatchIntensity(StrEnum):
    LIGHT = "light"
    MODERATE = "moderate"
    HEAVY = "heavy"


class HatchImportance(StrEnum):
    CRITICAL = "critical"
    MAJOR = "major"
    MODERATE = "moderate"
    MINOR = "minor"


class DataQuality(StrEnum):
    """Quality tag attached to a live water-gauge reading."""

    GOOD = "GOOD"
    FAIR = "FAIR"
    POOR = "POOR"
    UNKNOWN = "UNKNOWN"


class Region(StrEnum):
    """Coarse North American region derived from coordinates."""

    WESTERN = "western"
    EASTERN = "eastern"
    SOUTHERN = "southern"
    MOUNTAIN = "mountain"


# Collapses the ten seasonal bands into the four seasons the hatch rules use.
SEASON_OF_BAND: dict[TimeOfYear, str] = {
    TimeOfYear.WINTER:       "winter",
    TimeOfYear.EARLY_SPRING: "spring",
    TimeOfYear.SPRING:       "spring",
    TimeOfYear.LATE_SPRING:  "spring",
    TimeOfYear.EARLY_SUMMER: "summer",
    TimeOfYear.SUMMER:       "summer",
    TimeOfYear.LATE_SUMMER:  "summer",
    TimeOfYear.EARLY_FALL:   "fall",
    TimeOfYear.FALL:         "fall",
    TimeOfYear.LATE_FALL:    "fall",
}
