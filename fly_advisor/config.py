"""
Application configuration management.

Load order (each layer overrides the previous):
  1. ``config/default.toml``      — committed static defaults
  2. ``config/local.toml``        — optional local overrides (gitignored)
  3. ``.env``                     — local secrets and env overrides (gitignored)
  4. Environment variables        — ``FLY_ADVISOR_*`` prefix

Entry point: ``load_config(config_path=None) -> AppConfig``

The recommendation service and CLI commands receive an ``AppConfig``
instance — never raw dicts or individual env var lookups scattered through
the codebase.  ``AppConfig()`` with no arguments is a complete, valid
configuration, which is what the test suite uses.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any, Callable, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, field_validator, model_validator

# ── Sub-config models ─────────────────────────────────────────────────────────


class ScoringConfig(BaseModel):
    """Hierarchical scorer and confidence calibration parameters."""

    model_config = ConfigDict(frozen=True)

    score_floor: float = 5.0
    confidence_floor: int = 10
    confidence_cap: int = 95
    jitter_amplitude: int = 10
    cold_water_f: float = 45.0
    warm_water_f: float = 65.0
    high_flow_cfs: float = 200.0
    low_flow_cfs: float = 50.0
    hot_air_f: float = 80.0
    derive_hatches: bool = True

    @field_validator("jitter_amplitude")
    @classmethod
    def validate_jitter(cls, v: int) -> int:
        if not 0 <= v <= 25:
            raise ValueError(f"jitter_amplitude must be in [0, 25], got {v}.")
        return v

    @model_validator(mode="after")
    def validate_bounds(self) -> "ScoringConfig":
        if not 0 < self.confidence_floor < self.confidence_cap <= 100:
            raise ValueError(
                "confidence bounds must satisfy 0 < confidence_floor < "
                f"confidence_cap <= 100, got [{self.confidence_floor}, "
                f"{self.confidence_cap}]."
            )
        if self.cold_water_f >= self.warm_water_f:
            raise ValueError("cold_water_f must be below warm_water_f.")
        return self


class SelectionConfig(BaseModel):
    """Diversity selector output sizes."""

    model_config = ConfigDict(frozen=True)

    max_suggestions: int = 8
    free_suggestions: int = 3

    @model_validator(mode="after")
    def validate_counts(self) -> "SelectionConfig":
        if self.free_suggestions < 1 or self.max_suggestions < self.free_suggestions:
            raise ValueError(
                "selection counts must satisfy 1 <= free_suggestions <= max_suggestions."
            )
        return self


class ProvidersConfig(BaseModel):
    """Live data provider endpoints and timeouts."""

    model_config = ConfigDict(frozen=True)

    timeout_seconds: float = 10.0
    weather_enabled: bool = True
    water_enabled: bool = True
    weather_base_url: str = "https://api.open-meteo.com/v1/forecast"
    water_base_url: str = "https://waterservices.usgs.gov/nwis/iv/"
    water_search_radius_miles: float = 25.0

    @field_validator("timeout_seconds")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"timeout_seconds must be positive, got {v}.")
        return v


class UsageConfig(BaseModel):
    """Free-tier usage limits."""

    model_config = ConfigDict(frozen=True)

    enable_limits: bool = False
    free_daily_suggestions: int = 3


class CatalogConfig(BaseModel):
    """Fly catalog location."""

    model_config = ConfigDict(frozen=True)

    path: str = "data/flies.json"


class LoggingConfig(BaseModel):
    """Logging output settings."""

    model_config = ConfigDict(frozen=True)

    level: str = "INFO"
    log_file: str = ""
    json_format: bool = False

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid:
            raise ValueError(f"Log level must be one of {sorted(valid)}, got '{v}'.")
        return v.upper()


class AppConfig(BaseModel):
    """Complete application configuration — the single source of truth.

    Constructed by ``load_config()`` which merges TOML + .env + environment.
    """

    model_config = ConfigDict(frozen=True)

    scoring: ScoringConfig = ScoringConfig()
    selection: SelectionConfig = SelectionConfig()
    providers: ProvidersConfig = ProvidersConfig()
    usage: UsageConfig = UsageConfig()
    catalog: CatalogConfig = CatalogConfig()
    logging: LoggingConfig = LoggingConfig()
    debug: bool = False


# ── Loader ────────────────────────────────────────────────────────────────────

ENV_PREFIX = "FLY_ADVISOR_"


def _truthy(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


# Env var suffix → (path into the raw TOML dict, parser).
_ENV_OVERRIDES: dict[str, tuple[tuple[str, ...], Callable[[str], Any]]] = {
    "LOG_LEVEL":           (("logging", "level"), str),
    "CATALOG_PATH":        (("catalog", "path"), str),
    "PROVIDER_TIMEOUT":    (("providers", "timeout_seconds"), float),
    "ENABLE_USAGE_LIMITS": (("usage", "enable_limits"), _truthy),
    "DEBUG":               (("debug",), _truthy),
}

_SECTIONS: dict[str, type[BaseModel]] = {
    "scoring": ScoringConfig,
    "selection": SelectionConfig,
    "providers": ProvidersConfig,
    "usage": UsageConfig,
    "catalog": CatalogConfig,
    "logging": LoggingConfig,
}


def project_root() -> Path:
    """Nearest ancestor of this package holding ``pyproject.toml``.

    Falls back to the package's parent directory for non-editable installs.
    """
    package_dir = Path(__file__).resolve().parent
    for candidate in (package_dir, *package_dir.parents[:4]):
        if (candidate / "pyproject.toml").is_file():
            return candidate
    return package_dir.parent


def load_config(config_path: Optional[Path] = None) -> AppConfig:
    """Load and merge application configuration.

    Args:
        config_path: Explicit path to a TOML config file. Defaults to
            ``<project_root>/config/default.toml``.  A ``local.toml`` next to
            it, if present, is merged on top.

    Returns:
        Fully validated ``AppConfig`` instance.

    Raises:
        FileNotFoundError: If the config file does not exist.
        ValueError: If an environment override cannot be parsed.
        pydantic.ValidationError: If merged config values fail validation.
    """
    root = project_root()
    load_dotenv(dotenv_path=root / ".env", override=False)

    path = Path(config_path) if config_path is not None else root / "config" / "default.toml"
    if not path.is_file():
        raise FileNotFoundError(
            f"Config file not found: {path}\n"
            "Create config/default.toml or pass --config explicitly."
        )

    raw = _read_toml(path)
    local = path.with_name("local.toml")
    if local.is_file():
        raw = _deep_merge(raw, _read_toml(local))

    return _build_app_config(_apply_env_overrides(raw))


def resolve_catalog_path(config: AppConfig) -> Path:
    """``config.catalog.path``, anchored at the project root when relative."""
    path = Path(config.catalog.path).expanduser()
    return path if path.is_absolute() else project_root() / path


def _read_toml(path: Path) -> dict[str, Any]:
    with open(path, "rb") as f:
        return tomllib.load(f)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge ``override`` into a copy of ``base``."""
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = _deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def _apply_env_overrides(raw: dict[str, Any]) -> dict[str, Any]:
    """Overlay ``FLY_ADVISOR_*`` environment variables onto ``raw``.

    Empty variables are ignored.  See ``_ENV_OVERRIDES`` for the supported
    names.
    """
    for suffix, (keys, parse) in _ENV_OVERRIDES.items():
        value = os.environ.get(ENV_PREFIX + suffix)
        if not value:
            continue
        target = raw
        for key in keys[:-1]:
            target = target.setdefault(key, {})
        target[keys[-1]] = parse(value)
    return raw


def _build_app_config(raw: dict[str, Any]) -> AppConfig:
    """Map the merged raw dict onto ``AppConfig``.

    ``debug`` may sit at the top level or under ``[project]``; the top level
    wins.
    """
    project = raw.get("project", {})
    sections = {name: model(**raw.get(name, {})) for name, model in _SECTIONS.items()}
    return AppConfig(**sections, debug=raw.get("debug", project.get("debug", False)))
