"""Tests for settings and logging configuration."""
import logging

import pytest
import structlog
from pydantic import ValidationError

from equipment_import.config import Settings, configure_logging, get_settings


class TestSettings:

    def test_defaults(self):
        settings = Settings()

        assert settings.log_level == "INFO"
        assert settings.environment == "development"
        assert settings.csv_encoding == "utf-8-sig"
        assert settings.csv_fallback_encoding == "latin-1"
        assert settings.is_production is False

    def test_environment_prefix(self, monkeypatch):
        monkeypatch.setenv("EQUIPMENT_IMPORT_LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("EQUIPMENT_IMPORT_ENVIRONMENT", "production")

        settings = Settings()

        assert settings.log_level == "DEBUG"
        assert settings.is_production is True

    def test_invalid_level_rejected(self, monkeypatch):
        monkeypatch.setenv("EQUIPMENT_IMPORT_LOG_LEVEL", "LOUD")

        with pytest.raises(ValidationError):
            Settings()

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()


class TestConfigureLogging:

    @pytest.fixture(autouse=True)
    def restore_logging(self):
        root = logging.getLogger()
        level = root.level
        yield
        root.setLevel(level)
        structlog.reset_defaults()

    def test_level_override(self):
        configure_logging("warning")

        assert logging.getLogger().level == logging.WARNING

    def test_level_from_settings(self, monkeypatch):
        monkeypatch.setenv("EQUIPMENT_IMPORT_LOG_LEVEL", "ERROR")

        configure_logging()

        assert logging.getLogger().level == logging.ERROR

    def test_production_renders_json(self, monkeypatch):
        monkeypatch.setenv("EQUIPMENT_IMPORT_ENVIRONMENT", "production")

        configure_logging()

        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)

    def test_development_renders_console(self):
        configure_logging()

        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)
