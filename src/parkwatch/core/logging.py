"""
Logging configuration.

The handler/formatter layout comes from the packaged `config/logging.yaml`; levels
come from settings:
- `app.log_level` (env `PARKWATCH_LOG_LEVEL`) for the root logger and every handler
- `app.logger_levels` for individual loggers, e.g. keeping `httpx` at WARNING or
  turning `parkwatch.ingestion` up to DEBUG to see every classified request
"""

from __future__ import annotations

import copy
import logging.config

from parkwatch.config.settings import Settings, get_logging_config, get_settings


def build_logging_config(settings: Settings) -> dict:
    """Return a dictConfig payload with the settings' levels applied."""
    config = copy.deepcopy(get_logging_config())

    level = settings.app.log_level.upper()
    config.setdefault("root", {})["level"] = level
    for handler in config.get("handlers", {}).values():
        if isinstance(handler, dict) and "level" in handler:
            handler["level"] = level

    loggers = config.setdefault("loggers", {})
    for name, logger_level in settings.app.logger_levels.items():
        loggers.setdefault(name, {})["level"] = logger_level.upper()
    return config


def configure_logging(settings: Settings | None = None) -> None:
    """Configure the Python logging system from packaged YAML + settings."""
    logging.config.dictConfig(build_logging_config(settings or get_settings()))
