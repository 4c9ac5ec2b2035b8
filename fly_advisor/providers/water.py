"""
Water-gauge provider backed by USGS instantaneous values (IV).

API:   https://waterservices.usgs.gov/nwis/iv/
Docs:  https://waterservices.usgs.gov/docs/instantaneous-values/

Parameter codes requested:
  00060  discharge, cubic feet per second
  00065  gauge height, feet
  00010  water temperature, °C (converted to °F)

Nearest-station lookup uses the IV endpoint's ``bBox`` filter
(``west,south,east,north`` in decimal degrees) around the coordinate, groups
the returned time series by site and picks the closest site with a reading.
USGS encodes missing values as ``-999999``.
"""

from __future__ import annotations

import logging
import math
from datetime import datetime
from typing import Any, Optional, Protocol

import httpx

from fly_advisor.models.conditions import WaterSnapshot
from fly_advisor.taxonomy.condition_taxonomy import DataQuality

logger = logging.getLogger(__name__)

USGS_IV_URL = "https://waterservices.usgs.gov/nwis/iv/"

PARAM_FLOW_CFS = "00060"
PARAM_GAUGE_HEIGHT_FT = "00065"
PARAM_WATER_TEMP_C = "00010"
_PARAMETER_CODES = ",".join((PARAM_FLOW_CFS, PARAM_GAUGE_HEIGHT_FT, PARAM_WATER_TEMP_C))

NO_DATA_VALUE = -999999.0
MILES_PER_DEGREE_LAT = 69.0
EARTH_RADIUS_MILES = 3958.8


class WaterGaugeProvider(Protocol):
    """Anything that can report the nearest gauge reading to a coordinate."""

    async def fetch_nearest(
        self, latitude: float, longitude: float, radius_miles: float
    ) -> Optional[WaterSnapshot]:
        ...


def celsius_to_fahrenheit(celsius: float) -> float:
    return celsius * 9.0 / 5.0 + 32.0


def haversine_miles(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in miles."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlmb = math.radians(lon2 - lon1)
    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlmb / 2) ** 2
    return 2 * EARTH_RADIUS_MILES * math.asin(math.sqrt(a))


def bounding_box(latitude: float, longitude: float, radius_miles: float) -> str:
    """USGS ``bBox`` string covering ``radius_miles`` around the point."""
    dlat = radius_miles / MILES_PER_DEGREE_LAT
    dlon = radius_miles / (MILES_PER_DEGREE_LAT * max(math.cos(math.radians(latitude)), 0.01))
    west, east = longitude - dlon, longitude + dlon
    south, north = latitude - dlat, latitude + dlat
    return f"{west:.6f},{south:.6f},{east:.6f},{north:.6f}"


class UsgsWaterClient:
    """Async USGS IV client.

    Args:
        base_url: IV endpoint; override for tests.
        timeout:  Per-request timeout in seconds.
        client:   Optional shared ``httpx.AsyncClient``.
    """

    def __init__(
        self,
        base_url: str = USGS_IV_URL,
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.base_url = base_url
        self.timeout = timeout
        self._client = client

    async def fetch_nearest(
        self, latitude: float, longitude: float, radius_miles: float = 25.0
    ) -> Optional[WaterSnapshot]:
        """Latest reading from the nearest active gauge within ``radius_miles``.

        Returns:
            ``WaterSnapshot``, or ``None`` when no site in range has a reading.

        Raises:
            httpx.HTTPError: On transport failure or non-2xx response.
        """
        params = {
            "format": "json",
            "bBox": bounding_box(latitude, longitude, radius_miles),
            "parameterCd": _PARAMETER_CODES,
            "siteStatus": "active",
        }
        payload = await self._request(params)
        sites = parse_usgs_sites(payload)

        in_range = [
            (haversine_miles(latitude, longitude, site["latitude"], site["longitude"]), site)
            for site in sites
            if site.get("latitude") is not None and site.get("longitude") is not None
        ]
        in_range = [(d, s) for d, s in in_range if d <= radius_miles and s["snapshot"].has_reading]
        if not in_range:
            logger.debug("No USGS gauge with data within %.0f mi of %.4f,%.4f", radius_miles, latitude, longitude)
            return None

        distance, nearest = min(in_range, key=lambda pair: pair[0])
        logger.debug("Nearest USGS gauge %s (%.1f mi)", nearest["snapshot"].station_name, distance)
        return nearest["snapshot"]

    async def fetch_site(self, site_code: str) -> Optional[WaterSnapshot]:
        """Latest reading for one USGS site number."""
        params = {"format": "json", "sites": site_code, "parameterCd": _PARAMETER_CODES}
        sites = parse_usgs_sites(await self._request(params))
        return sites[0]["snapshot"] if sites else None

    async def _request(self, params: dict[str, Any]) -> dict:
        if self._client is not None:
            return await self._get(self._client, params)
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await self._get(client, params)

    async def _get(self, client: httpx.AsyncClient, params: dict[str, Any]) -> dict:
        resp = await client.get(self.base_url, params=params, timeout=self.timeout)
        resp.raise_for_status()
        return resp.json()


# ── Parsing ───────────────────────────────────────────────────────────────────


def _latest_value(series: dict) -> tuple[Optional[float], Optional[datetime]]:
    values = (series.get("values") or [{}])[0].get("value") or []
    for entry in reversed(values):
        try:
            value = float(entry.get("value"))
        except (TypeError, ValueError):
            continue
        if value == NO_DATA_VALUE:
            continue
        stamp: Optional[datetime] = None
        if entry.get("dateTime"):
            try:
                stamp = datetime.fromisoformat(entry["dateTime"])
            except ValueError:
                stamp = None
        return value, stamp
    return None, None


def parse_usgs_sites(payload: dict) -> list[dict[str, Any]]:
    """Group IV time series by site.

    Returns:
        One dict per site, in first-seen order, with keys ``site_code``,
        ``latitude``, ``longitude`` and ``snapshot`` (a ``WaterSnapshot``).
    """
    grouped: dict[str, dict[str, Any]] = {}

    for series in (payload.get("value") or {}).get("timeSeries") or []:
        info = series.get("sourceInfo") or {}
        codes = info.get("siteCode") or []
        if not codes or not codes[0].get("value"):
            continue
        site_code = str(codes[0]["value"])
        site = grouped.setdefault(
            site_code,
            {"site_code": site_code, "name": info.get("siteName", ""), "latitude": None,
             "longitude": None, "readings": {}, "updated": None},
        )
        geo = (info.get("geoLocation") or {}).get("geogLocation") or {}
        try:
            site["latitude"] = float(geo["latitude"])
            site["longitude"] = float(geo["longitude"])
        except (KeyError, TypeError, ValueError):
            pass

        variable_codes = (series.get("variable") or {}).get("variableCode") or [{}]
        parameter = variable_codes[0].get("value")
        value, stamp = _latest_value(series)
        if parameter and value is not None:
            site["readings"][parameter] = value
            if stamp is not None and (site["updated"] is None or stamp > site["updated"]):
                site["updated"] = stamp

    results: list[dict[str, Any]] = []
    for site in grouped.values():
        readings = site["readings"]
        temp_c = readings.get(PARAM_WATER_TEMP_C)
        snapshot = WaterSnapshot(
            station_id=site["site_code"],
            station_name=site["name"],
            flow_cfs=readings.get(PARAM_FLOW_CFS),
            water_temperature_f=round(celsius_to_fahrenheit(temp_c), 1) if temp_c is not None else None,
            gauge_height_ft=readings.get(PARAM_GAUGE_HEIGHT_FT),
            data_source="USGS",
            data_quality=(
                DataQuality.GOOD
                if PARAM_FLOW_CFS in readings or PARAM_WATER_TEMP_C in readings
                else DataQuality.FAIR
            ),
            is_active=True,
            last_updated=site["updated"],
        )
        results.append(
            {
                "site_code": site["site_code"],
                "latitude": site["latitude"],
                "longitude": site["longitude"],
                "snapshot": snapshot,
            }
        )
    return results
