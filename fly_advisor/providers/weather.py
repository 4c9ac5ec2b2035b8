"""
Current-weather provider backed by the Open-Meteo forecast API.

API:   https://api.open-meteo.com/v1/forecast
Docs:  https://open-meteo.com/en/docs

No API key is required.  One request per call::

    GET /v1/forecast?latitude=..&longitude=..
        &current=temperature_2m,relative_humidity_2m,surface_pressure,
                 weather_code,cloud_cover,wind_speed_10m,wind_direction_10m
        &temperature_unit=fahrenheit&wind_speed_unit=mph&timezone=UTC

``weather_code`` is a WMO code; it is translated to a short text condition
(``"light rain"``, ``"thunderstorm"``) so the normalizer can categorise it.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Optional, Protocol

import httpx

from fly_advisor.models.conditions import WeatherSnapshot

logger = logging.getLogger(__name__)

OPEN_METEO_URL = "https://api.open-meteo.com/v1/forecast"

_CURRENT_FIELDS = (
    "temperature_2m,relative_humidity_2m,surface_pressure,weather_code,"
    "cloud_cover,wind_speed_10m,wind_direction_10m"
)

# WMO weather interpretation codes → short description.
_WMO_CODES: dict[int, str] = {
    0: "clear sky",
    1: "mainly clear",
    2: "partly cloudy",
    3: "overcast",
    45: "fog",
    48: "depositing rime fog",
    51: "light drizzle",
    53: "drizzle",
    55: "dense drizzle",
    56: "freezing drizzle",
    57: "dense freezing drizzle",
    61: "light rain",
    63: "rain",
    65: "heavy rain",
    66: "freezing rain",
    67: "heavy freezing rain",
    71: "light snow",
    73: "snow",
    75: "heavy snow",
    77: "snow grains",
    80: "light rain showers",
    81: "rain showers",
    82: "violent rain showers",
    85: "snow showers",
    86: "heavy snow showers",
    95: "thunderstorm",
    96: "thunderstorm with hail",
    99: "thunderstorm with heavy hail",
}


class WeatherProvider(Protocol):
    """Anything that can report current weather at a coordinate."""

    async def fetch_current(self, latitude: float, longitude: float) -> Optional[WeatherSnapshot]:
        ...


def describe_weather_code(code: Optional[int]) -> str:
    if code is None:
        return ""
    return _WMO_CODES.get(int(code), "")


class OpenMeteoWeatherClient:
    """Async Open-Meteo client.

    Args:
        base_url: Forecast endpoint; override for tests or a self-hosted mirror.
        timeout:  Per-request timeout in seconds.
        client:   Optional shared ``httpx.AsyncClient``.  When omitted, a
                  short-lived client is opened per call.
    """

    def __init__(
        self,
        base_url: str = OPEN_METEO_URL,
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.base_url = base_url
        self.timeout = timeout
        self._client = client

    async def fetch_current(self, latitude: float, longitude: float) -> Optional[WeatherSnapshot]:
        """Fetch current conditions at ``latitude`` / ``longitude``.

        Returns:
            ``WeatherSnapshot``, or ``None`` if the response has no current block.

        Raises:
            httpx.HTTPError: On transport failure or non-2xx response.
        """
        params: dict[str, Any] = {
            "latitude": latitude,
            "longitude": longitude,
            "current": _CURRENT_FIELDS,
            "temperature_unit": "fahrenheit",
            "wind_speed_unit": "mph",
            "timezone": "UTC",
        }
        if self._client is not None:
            payload = await self._get(self._client, params)
        else:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                payload = await self._get(client, params)
        return parse_open_meteo(payload)

    async def _get(self, client: httpx.AsyncClient, params: dict[str, Any]) -> dict:
        resp = await client.get(self.base_url, params=params, timeout=self.timeout)
        resp.raise_for_status()
        return resp.json()


def parse_open_meteo(payload: dict) -> Optional[WeatherSnapshot]:
    """Convert an Open-Meteo JSON payload into a ``WeatherSnapshot``."""
    current = payload.get("current")
    if not current:
        logger.debug("Open-Meteo payload has no 'current' block")
        return None

    observed_at: Optional[datetime] = None
    if current.get("time"):
        try:
            observed_at = datetime.fromisoformat(current["time"]).replace(tzinfo=timezone.utc)
        except ValueError:
            logger.debug("Unparseable Open-Meteo time %r", current["time"])

    return WeatherSnapshot(
        temperature_f=current.get("temperature_2m"),
        humidity=current.get("relative_humidity_2m"),
        pressure_hpa=current.get("surface_pressure"),
        wind_speed_mph=current.get("wind_speed_10m"),
        wind_direction_deg=current.get("wind_direction_10m"),
        cloud_cover=current.get("cloud_cover"),
        condition=describe_weather_code(current.get("weather_code")),
        observed_at=observed_at,
        source="open-meteo",
    )
