import logging.config

from parkwatch.config.settings import get_logging_config, get_settings
from parkwatch.core import logging as parkwatch_logging


def _settings(**app_updates):
    settings = get_settings()
    return settings.model_copy(update={"app": settings.app.model_copy(update=app_updates)})


def test_logger_levels_come_from_settings():
    settings = _settings(log_level="debug", logger_levels={"httpx": "warning", "parkwatch.ingestion": "error"})

    config = parkwatch_logging.build_logging_config(settings)

    assert config["root"]["level"] == "DEBUG"
    assert config["handlers"]["console"]["level"] == "DEBUG"
    assert config["loggers"]["httpx"]["level"] == "WARNING"
    assert config["loggers"]["parkwatch.ingestion"]["level"] == "ERROR"


def test_packaged_defaults_quiet_http_libraries():
    config = parkwatch_logging.build_logging_config(get_settings())
    assert config["loggers"]["httpcore"]["level"] == "WARNING"
    assert config["loggers"]["parkwatch.ingestion"]["level"] == "INFO"


def test_build_does_not_mutate_the_cached_yaml():
    parkwatch_logging.build_logging_config(_settings(log_level="ERROR", logger_levels={"x": "DEBUG"}))
    assert "x" not in get_logging_config().get("loggers", {})
    assert get_logging_config()["root"]["level"] == "INFO"


def test_configure_logging_applies_the_payload(monkeypatch):
    applied = []
    monkeypatch.setattr(logging.config, "dictConfig", applied.append)

    parkwatch_logging.configure_logging(_settings(logger_levels={"parkwatch": "DEBUG"}))

    assert applied[0]["loggers"]["parkwatch"]["level"] == "DEBUG"
