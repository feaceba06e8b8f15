"""
Unit Tests for Settings and Logging Setup
=========================================
"""

from unittest.mock import patch

import pytest
from pydantic import ValidationError

from lasercalc.config import Settings, configure_logging


class TestSettings:
    """Test cases for environment-driven settings."""

    def test_defaults(self):
        settings = Settings()

        assert settings.log_level == "INFO"
        assert settings.locale == "en"
        assert settings.materials_file.name == "materials.yaml"
        assert settings.materials_file.is_file()
        assert settings.locales_dir.is_dir()

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("LASERCALC_LOCALE", "es")
        monkeypatch.setenv("LASERCALC_LOG_LEVEL", "debug")

        settings = Settings()
        assert settings.locale == "es"
        assert settings.log_level == "DEBUG"

    def test_unknown_log_level(self):
        with pytest.raises(ValidationError):
            Settings(log_level="verbose")


class TestConfigureLogging:
    """Test cases for configure_logging."""

    def test_uses_settings(self):
        settings = Settings(log_level="warning", log_format="%(message)s")

        with patch("lasercalc.config.logging.basicConfig") as basic_config:
            configure_logging(settings)

        basic_config.assert_called_once_with(level="WARNING", format="%(message)s")
