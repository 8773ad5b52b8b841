"""Tests for application settings."""

from lookthrough.core.config import Settings


def test_defaults():
    settings = Settings()

    assert settings.DEFAULT_PORTFOLIO_NAME == "My Portfolio"
    assert settings.ANALYTICS_DEFAULT_TOP_N == 5


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("ANALYTICS_DEFAULT_TOP_N", "3")
    monkeypatch.setenv("DEFAULT_CURRENCY", "EUR")

    settings = Settings()

    assert settings.ANALYTICS_DEFAULT_TOP_N == 3
    assert settings.DEFAULT_CURRENCY == "EUR"


def test_logging_config_follows_log_level():
    config = Settings(LOG_LEVEL="debug", DB_ECHO=True).LOGGING_CONFIG

    assert config["loggers"]["lookthrough"]["level"] == "DEBUG"
    assert config["loggers"]["sqlalchemy.engine"]["level"] == "INFO"
    assert config["disable_existing_loggers"] is False
