"""
Fly pattern catalog models.

``FlyPattern`` is one catalog entry: what the fly is (type, size, color) and
the conditions it is known to fish well in (``BestConditions``).  Catalog
records are owned by an external store and are read-only inputs to the
engine.  Both models are frozen, and the catalog filter builds new,
defaulted instances instead of patching fetched records in place.

Condition lists inside ``BestConditions`` hold plain lowercase slugs that
match the ``StrEnum`` values in ``fly_advisor.taxonomy.condition_taxonomy``.
Unknown slugs are kept rather than rejected: a catalog written against a
richer vocabulary still loads, the extra values simply never match.
"""

from __future__ import annotations

import re
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from fly_advisor.taxonomy.condition_taxonomy import FlyType

DEFAULT_FLY_SIZE = 16
_LEADING_DIGITS = re.compile(r"\d+")


class TemperatureRange(BaseModel):
    """Inclusive water temperature range in °F."""

    model_config = ConfigDict(frozen=True)

    min: float
    max: float

    @model_validator(mode="after")
    def validate_order(self) -> "TemperatureRange":
        if self.min > self.max:
            raise ValueError(f"min ({self.min}) must be <= max ({self.max}).")
        return self

    def contains(self, value: float) -> bool:
        return self.min <= value <= self.max


class BestConditions(BaseModel):
    """Conditions a pattern is known to fish well in.

    Attributes:
        weather: Favorable weather categories.
        water_clarity: Favorable clarity categories.
        water_level: Favorable level categories.
        water_flow: Favorable flow categories.
        time_of_day: Favorable day-parts.
        time_of_year: Favorable seasonal bands.
        water_temperature_range: Favorable water temperature (°F), if known.
        regions: Regions where the pattern is effective.
        hatch_insects: Insects this pattern imitates (for hatch matching).
    """

    model_config = ConfigDict(frozen=True)

    weather: list[str] = []
    water_clarity: list[str] = []
    water_level: list[str] = []
    water_flow: list[str] = []
    time_of_day: list[str] = []
    time_of_year: list[str] = []
    water_temperature_range: Optional[TemperatureRange] = None
    regions: list[str] = []
    hatch_insects: list[str] = []

    @field_validator(
        "weather", "water_clarity", "water_level", "water_flow",
        "time_of_day", "time_of_year", "regions", "hatch_insects",
        mode="before",
    )
    @classmethod
    def normalize_slugs(cls, v: object) -> list[str]:
        if v is None:
            return []
        if isinstance(v, str):
            v = [v]
        return [str(item).strip().lower() for item in v if str(item).strip()]

    @property
    def declared_entry_count(self) -> int:
        """Total entries across the five breadth lists used for versatility."""
        return (
            len(self.weather)
            + len(self.time_of_day)
            + len(self.time_of_year)
            + len(self.water_clarity)
            + len(self.water_level)
        )


class FlyPattern(BaseModel):
    """One catalog fly pattern.

    Attributes:
        id: Stable catalog identifier.
        name: Display name, e.g. ``"Zebra Midge"``.
        type: Fly family.
        primary_size: Hook size as written in the catalog (``"18"``, ``"#18"``).
        color: Dominant color description.
        description: Free-text description.
        best_conditions: Favorable conditions.
        success_rate: Aggregate success rate in ``[0, 1]``.
        total_uses: Total logged uses.
        successful_uses: Logged uses that caught fish.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    type: FlyType
    primary_size: str = str(DEFAULT_FLY_SIZE)
    color: str = "Natural"
    description: Optional[str] = None
    best_conditions: BestConditions = BestConditions()
    success_rate: float = 0.0
    total_uses: int = 0
    successful_uses: int = 0

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: object) -> str:
        if v is None or not str(v).strip():
            raise ValueError("id must not be empty.")
        return str(v).strip()

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("name must not be empty.")
        return v.strip()

    @field_validator("type", mode="before")
    @classmethod
    def lowercase_type(cls, v: object) -> object:
        return v.strip().lower() if isinstance(v, str) else v

    @field_validator("primary_size", mode="before")
    @classmethod
    def coerce_size(cls, v: object) -> str:
        if v is None or not str(v).strip():
            return str(DEFAULT_FLY_SIZE)
        return str(v).strip()

    @field_validator("color", mode="before")
    @classmethod
    def default_color(cls, v: object) -> str:
        if v is None or not str(v).strip():
            return "Natural"
        return str(v).strip()

    @field_validator("success_rate", "total_uses", "successful_uses", mode="before")
    @classmethod
    def default_counter(cls, v: object) -> object:
        return 0 if v is None else v

    @property
    def size_number(self) -> int:
        """Numeric hook size; larger numbers are smaller flies.

        The first run of digits in ``primary_size`` is used, so ``"#18"``
        and ``"18-22"`` both read as 18.  Unparseable sizes fall back to 16.
        """
        match = _LEADING_DIGITS.search(self.primary_size)
        if match is None:
            return DEFAULT_FLY_SIZE
        return int(match.group()) or DEFAULT_FLY_SIZE

    @property
    def name_lower(self) -> str:
        return self.name.lower()

    @property
    def color_lower(self) -> str:
        return self.color.lower()
