"""
fly-advisor — CLI entry point.

All commands follow this pattern:
  1. Load ``AppConfig`` via ``load_config()``.
  2. Configure logging.
  3. Validate inputs.
  4. Execute action (recommendation run, moon phase, solunar table).
  5. Report result to stdout.

Install and run::

    pip install -e .
    fly-advisor --help
    fly-advisor validate-config
    fly-advisor recommend --location "Madison River" --lat 44.65 --lon -111.07
    fly-advisor moon --date 2024-06-22
    fly-advisor solunar --lat 44.65 --lon -111.07
"""

from __future__ import annotations

import asyncio
import json
from datetime import date, datetime
from pathlib import Path
from typing import Optional

import typer

from fly_advisor.taxonomy.condition_taxonomy import (
    TimeOfDay,
    TimeOfYear,
    WaterClarity,
    WaterFlow,
    WaterLevel,
    WeatherCategory,
    WindSpeed,
)

app = typer.Typer(
    name="fly-advisor",
    help="Fly-fishing fly recommendations from conditions, lunar state and hatches.",
    add_completion=False,
)


# ── Helpers ───────────────────────────────────────────────────────────────────

def _load_config_or_exit(config_path: Optional[str] = None):
    """Load AppConfig, printing a friendly error and exiting on failure."""
    from fly_advisor.config import load_config

    try:
        cfg_path = Path(config_path) if config_path else None
        return load_config(cfg_path)
    except FileNotFoundError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)
    except Exception as exc:
        typer.echo(f"[ERROR] Config validation failed: {exc}", err=True)
        raise typer.Exit(code=1)


def _configure_logging(config):
    """Set up logging from config."""
    from fly_advisor.utils.logging import configure_logging
    configure_logging(config.logging, debug=config.debug)


def _parse_date_or_exit(value: Optional[str]) -> Optional[date]:
    if value is None:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        typer.echo(f"[ERROR] Invalid date '{value}'. Use YYYY-MM-DD.", err=True)
        raise typer.Exit(code=1)


def _parse_instant_or_exit(value: Optional[str]) -> datetime:
    from fly_advisor.utils.time_utils import ensure_utc, utcnow

    if value is None:
        return utcnow()
    try:
        return ensure_utc(datetime.fromisoformat(value))
    except ValueError:
        typer.echo(f"[ERROR] Invalid timestamp '{value}'. Use ISO 8601.", err=True)
        raise typer.Exit(code=1)


def _fetch_site_or_exit(config, site: str):
    """Latest reading for one USGS gauge; exits when it cannot be read."""
    import httpx

    from fly_advisor.providers.water import UsgsWaterClient

    providers = config.providers
    client = UsgsWaterClient(providers.water_base_url, providers.timeout_seconds)
    try:
        gauge = asyncio.run(client.fetch_site(site))
    except httpx.HTTPError as exc:
        typer.echo(f"[ERROR] Could not read USGS site {site}: {exc}", err=True)
        raise typer.Exit(code=1)
    if gauge is None:
        typer.echo(f"[ERROR] USGS site {site} returned no readings.", err=True)
        raise typer.Exit(code=1)
    return gauge


def _fmt_time(moment: datetime) -> str:
    return moment.strftime("%Y-%m-%d %H:%M UTC")


# ── Commands ──────────────────────────────────────────────────────────────────

@app.command("validate-config")
def validate_config(
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file (default: config/default.toml).",
    ),
    show_full: bool = typer.Option(
        False,
        "--full",
        help="Print full config including all fields.",
    ),
) -> None:
    """Validate the configuration file and print parsed values.

    Exits with code 1 if the config fails validation.
    """
    config = _load_config_or_exit(config_path)

    typer.echo("Configuration validated successfully.")
    typer.echo("")
    typer.echo(f"  Catalog path:     {config.catalog.path}")
    typer.echo(f"  Max suggestions:  {config.selection.max_suggestions}")
    typer.echo(f"  Free suggestions: {config.selection.free_suggestions}")
    typer.echo(f"  Confidence range: [{config.scoring.confidence_floor}, {config.scoring.confidence_cap}]")
    typer.echo(f"  Live weather:     {config.providers.weather_enabled}")
    typer.echo(f"  Live water:       {config.providers.water_enabled}")
    typer.echo(f"  Usage limits:     {config.usage.enable_limits}")
    typer.echo(f"  Log level:        {config.logging.level}")
    typer.echo(f"  Debug mode:       {config.debug}")

    if show_full:
        typer.echo("")
        typer.echo("Full config (JSON):")
        typer.echo(json.dumps(config.model_dump(), indent=2, default=str))

    typer.echo("")
    typer.echo("[OK] Config valid.")


@app.command("recommend")
def recommend(
    location: str = typer.Option(..., "--location", help="Water name, e.g. 'Madison River'."),
    latitude: float = typer.Option(..., "--lat", help="Latitude in decimal degrees."),
    longitude: float = typer.Option(..., "--lon", help="Longitude in decimal degrees."),
    on_date: Optional[str] = typer.Option(None, "--date", help="Fishing date (YYYY-MM-DD)."),
    address: Optional[str] = typer.Option(None, "--address", help="Optional address text."),
    weather: Optional[WeatherCategory] = typer.Option(None, "--weather"),
    wind: Optional[WindSpeed] = typer.Option(None, "--wind"),
    clarity: Optional[WaterClarity] = typer.Option(None, "--clarity"),
    level: Optional[WaterLevel] = typer.Option(None, "--level"),
    flow: Optional[WaterFlow] = typer.Option(None, "--flow"),
    water_temp: Optional[float] = typer.Option(None, "--water-temp", help="Water temperature (°F)."),
    site: Optional[str] = typer.Option(
        None,
        "--site",
        help="USGS site number to read live water data from instead of the nearest gauge.",
    ),
    time_of_day: Optional[TimeOfDay] = typer.Option(None, "--time-of-day"),
    time_of_year: Optional[TimeOfYear] = typer.Option(None, "--time-of-year"),
    catalog_path: Optional[str] = typer.Option(
        None,
        "--catalog",
        help="Fly catalog JSON file (default: catalog.path from config).",
    ),
    limit: Optional[int] = typer.Option(None, "--limit", min=1, help="Return at most N flies."),
    offline: bool = typer.Option(
        False,
        "--offline",
        help="Skip live weather and water lookups.",
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the result as JSON."),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file.",
    ),
) -> None:
    """Recommend flies for a location and the given conditions.

    Unspecified conditions are filled from live weather/water data (unless
    --offline) and from seasonal defaults.  --site pins the water reading to
    one USGS gauge.
    """
    if site and offline:
        typer.echo("[ERROR] --site reads live gauge data; drop --offline to use it.", err=True)
        raise typer.Exit(code=1)

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    from pydantic import ValidationError

    from fly_advisor.models.conditions import PartialFishingConditions
    from fly_advisor.providers.catalog import JsonFileCatalogStore
    from fly_advisor.recommendations.service import RecommendationService

    try:
        partial = PartialFishingConditions(
            date=_parse_date_or_exit(on_date),
            location=location,
            latitude=latitude,
            longitude=longitude,
            location_address=address,
            weather=weather,
            wind_speed=wind,
            water_clarity=clarity,
            water_level=level,
            water_flow=flow,
            water_temperature=water_temp,
            time_of_day=time_of_day,
            time_of_year=time_of_year,
        )
    except ValidationError as exc:
        typer.echo(f"[ERROR] Invalid conditions:\n{exc}", err=True)
        raise typer.Exit(code=1)

    if site:
        gauge = _fetch_site_or_exit(config, site)
        partial = partial.model_copy(update={"water_data": gauge})

    service = RecommendationService.from_config(config)
    if catalog_path:
        service.catalog_store = JsonFileCatalogStore(catalog_path)
    if offline:
        service.weather_provider = None
        service.water_provider = None

    result = asyncio.run(service.get_recommendations(partial, limit=limit))

    if result.error:
        typer.echo(f"[ERROR] {result.error}", err=True)
        raise typer.Exit(code=1)

    if as_json:
        typer.echo(json.dumps(result.model_dump(mode="json"), indent=2))
        return

    typer.echo(f"Fly recommendations for {location} ({latitude:.4f}, {longitude:.4f})")
    typer.echo("")
    for rank, suggestion in enumerate(result.suggestions, start=1):
        fly = suggestion.fly
        typer.echo(
            f"  {rank}. {fly.name:<28} {fly.type:<12} #{fly.primary_size:<4} "
            f"{suggestion.confidence:>3}%"
        )
        if suggestion.reason:
            typer.echo(f"       {suggestion.reason}")
    typer.echo("")
    typer.echo(f"[OK] {len(result.suggestions)} fly suggestion(s).")


@app.command("moon")
def moon(
    on_date: Optional[str] = typer.Option(None, "--date", help="Date (YYYY-MM-DD); default today (UTC)."),
    as_json: bool = typer.Option(False, "--json", help="Print the result as JSON."),
) -> None:
    """Show moon phase, illumination and lunar fishing quality for a date."""
    from fly_advisor.astro.lunar import get_moon_phase
    from fly_advisor.utils.time_utils import utcnow

    day = _parse_date_or_exit(on_date) or utcnow().date()
    data = get_moon_phase(day)

    if as_json:
        typer.echo(json.dumps({"date": day.isoformat(), **data.model_dump(mode="json")}, indent=2))
        return

    typer.echo(f"Moon for {day.isoformat()}")
    typer.echo(f"  Phase:            {data.phase}")
    typer.echo(f"  Illumination:     {data.illumination:.1f}%")
    typer.echo(f"  Age:              {data.age:.1f} days")
    typer.echo(f"  Fishing quality:  {data.fishing_quality}")
    typer.echo(f"  Feeding activity: {data.feeding_activity}")


@app.command("solunar")
def solunar(
    latitude: float = typer.Option(..., "--lat", help="Latitude in decimal degrees."),
    longitude: float = typer.Option(..., "--lon", help="Longitude in decimal degrees."),
    at: Optional[str] = typer.Option(
        None,
        "--at",
        help="Instant to evaluate (ISO 8601; naive means UTC). Default: now.",
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the result as JSON."),
) -> None:
    """Show solunar windows, the current period and lunar insights."""
    from fly_advisor.astro.lunar import get_lunar_insights, get_solunar_periods, is_in_solunar_period

    moment = _parse_instant_or_exit(at)
    periods = get_solunar_periods(moment, latitude, longitude)
    state = is_in_solunar_period(moment, latitude, longitude)
    insights = get_lunar_insights(moment, latitude, longitude)

    if as_json:
        payload = {
            "periods": periods.model_dump(mode="json"),
            "current": state.model_dump(mode="json"),
            "insights": insights,
        }
        typer.echo(json.dumps(payload, indent=2))
        return

    typer.echo(f"Solunar for ({latitude:.4f}, {longitude:.4f}) at {_fmt_time(moment)}")
    typer.echo(f"  Sunrise: {_fmt_time(periods.sunrise)}")
    typer.echo(f"  Sunset:  {_fmt_time(periods.sunset)}")
    for window in periods.major:
        typer.echo(f"  Major:   {_fmt_time(window.start)} → {_fmt_time(window.end)}")
    for window in periods.minor:
        typer.echo(f"  Minor:   {_fmt_time(window.start)} → {_fmt_time(window.end)}")
    typer.echo(f"  Rating:  {periods.rating}")
    if state.in_period:
        typer.echo(f"  Now:     {state.period_type} period, {state.minutes_remaining:.0f} min remaining")
    else:
        typer.echo("  Now:     outside solunar periods")
    for line in insights:
        typer.echo(f"  - {line}")


if __name__ == "__main__":
    app()
