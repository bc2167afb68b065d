# src/parkwatch/config/settings.py
"""
Application settings (Pydantic).

Settings are loaded from `src/parkwatch/config/defaults.yaml`, then optionally overridden by:
- environment variables (e.g., `PARKWATCH_USE_STAGING`, `PARKWATCH_LOG_LEVEL`)
- an external YAML file via `PARKWATCH_CONFIG_PATH`

Design rule:
- Endpoints, versions and thresholds live in YAML, not hard-coded in client logic.
"""

from __future__ import annotations

import os
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

from parkwatch.core.env import env_flag, load_dotenv_if_present


def _read_package_yaml(filename: str) -> dict[str, Any]:
    """Read a YAML file packaged inside `parkwatch.config`."""
    text = resources.files("parkwatch.config").joinpath(filename).read_text(encoding="utf-8")
    data = yaml.safe_load(text) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid YAML root object for {filename}; expected a mapping.")
    return data


def _read_yaml_file(path: str | Path) -> dict[str, Any]:
    """Read a YAML file from disk and return its mapping root."""
    data = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid YAML root object for {path}; expected a mapping.")
    return data


class AppSettings(BaseModel):
    name: str = "ParkWatch"
    http_timeout_seconds: float = Field(15, gt=0)
    log_level: str = "INFO"
    user_agent: str = "parkwatch/0.1.0 (+https://local)"
    logger_levels: dict[str, str] = Field(default_factory=dict)


class ApiSettings(BaseModel):
    production_url: str
    staging_url: str
    use_staging: bool = False
    supported_version: str = "1.0"
    forecast_region: str = "Dresden"

    @property
    def base_url(self) -> str:
        """The one active endpoint; production and staging are mutually exclusive."""
        url = self.staging_url if self.use_staging else self.production_url
        return url.rstrip("/")


class LocationSettings(BaseModel):
    movement_threshold_m: float = Field(100.0, ge=0)


class ForecastSettings(BaseModel):
    week_days: int = Field(7, ge=1)


class GeocodingSettings(BaseModel):
    base_url: str = "https://nominatim.openstreetmap.org"
    language: str | None = None
    zoom: int = Field(10, ge=0, le=18)


class Settings(BaseModel):
    app: AppSettings = Field(default_factory=AppSettings)
    api: ApiSettings
    location: LocationSettings = Field(default_factory=LocationSettings)
    forecast: ForecastSettings = Field(default_factory=ForecastSettings)
    geocoding: GeocodingSettings = Field(default_factory=GeocodingSettings)


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    """Overlay selected environment variables onto raw settings payload.

    Note: We intentionally keep this whitelist small.
    """
    data = dict(data)
    log_level = os.getenv("PARKWATCH_LOG_LEVEL")
    if log_level:
        data.setdefault("app", {})["log_level"] = log_level

    use_staging = env_flag("PARKWATCH_USE_STAGING")
    if use_staging is not None:
        data.setdefault("api", {})["use_staging"] = use_staging

    return data


@lru_cache
def get_settings() -> Settings:
    """Load and validate settings (cached)."""
    load_dotenv_if_present()
    config_path = os.getenv("PARKWATCH_CONFIG_PATH")
    raw = _read_yaml_file(config_path) if config_path else _read_package_yaml("defaults.yaml")
    raw = _apply_env_overrides(raw)
    return Settings.model_validate(raw)


@lru_cache
def get_logging_config() -> dict[str, Any]:
    """Load logging configuration (cached)."""
    return _read_package_yaml("logging.yaml")
