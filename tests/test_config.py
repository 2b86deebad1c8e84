"""
Unit tests for settings loading (src/docfill/config.py).
"""

import logging

import pytest
from pydantic import ValidationError

from docfill import config
from docfill.config import FillerSettings, get_settings, load_settings, reset_settings


class TestFillerSettings:
    """Test the settings model."""

    def test_defaults(self):
        settings = FillerSettings()
        assert settings.empty_mode == "emdash"
        assert settings.date_format == "%x"
        assert settings.match_case is False
        assert settings.use_defaults is False
        assert "service_type_" in settings.control_prefixes

    def test_empty_mode_normalized(self):
        assert FillerSettings(empty_mode=" EMPTY ").empty_mode == "empty"

    def test_invalid_empty_mode(self):
        with pytest.raises(ValidationError):
            FillerSettings(empty_mode="blank")

    def test_substitution_options(self):
        options = FillerSettings(control_prefixes=["flag_"], use_defaults=True).substitution_options()
        assert options == {
            "date_format": "%x",
            "empty_mode": "emdash",
            "use_defaults": True,
            "match_case": False,
            "reserved_prefixes": ("flag_",),
        }


class TestLoadSettings:
    """Test reading settings from the environment."""

    def test_environment_values(self, monkeypatch):
        monkeypatch.setenv("DOCFILL_EMPTY_MODE", "empty")
        monkeypatch.setenv("DOCFILL_DATE_FORMAT", "%d.%m.%Y")
        monkeypatch.setenv("DOCFILL_MATCH_CASE", "true")
        monkeypatch.setenv("DOCFILL_USE_DEFAULTS", "1")
        monkeypatch.setenv("DOCFILL_CONTROL_PREFIXES", "flag_, option_ ,")
        monkeypatch.setenv("DOCFILL_LOG_LEVEL", "debug")

        settings = load_settings()
        assert settings.empty_mode == "empty"
        assert settings.date_format == "%d.%m.%Y"
        assert settings.match_case is True
        assert settings.use_defaults is True
        assert settings.control_prefixes == ["flag_", "option_"]
        assert settings.log_level == "DEBUG"

    def test_empty_prefix_list_disables_reserved_prefixes(self, monkeypatch):
        monkeypatch.setenv("DOCFILL_CONTROL_PREFIXES", "")
        assert load_settings().control_prefixes == []

    def test_unrecognized_flag_is_false(self, monkeypatch):
        monkeypatch.setenv("DOCFILL_MATCH_CASE", "maybe")
        assert load_settings().match_case is False

    def test_invalid_environment_value_raises(self, monkeypatch):
        monkeypatch.setenv("DOCFILL_EMPTY_MODE", "nothing")
        with pytest.raises(ValidationError):
            load_settings()

    def test_dotenv_is_loaded(self, monkeypatch):
        calls = []
        monkeypatch.setattr(config, "load_dotenv", lambda *args, **kwargs: calls.append(True))
        load_settings()
        assert calls == [True]


class TestCachedSettings:
    """Test the global settings singleton."""

    def test_cached_until_reset(self, monkeypatch):
        first = get_settings()
        monkeypatch.setenv("DOCFILL_EMPTY_MODE", "empty")
        assert get_settings() is first
        reset_settings()
        assert get_settings().empty_mode == "empty"

    def test_configure_logging_uses_settings_level(self, monkeypatch):
        calls = []
        monkeypatch.setattr(config.logging, "basicConfig", lambda **kwargs: calls.append(kwargs))
        monkeypatch.setenv("DOCFILL_LOG_LEVEL", "warning")
        config.configure_logging()
        config.configure_logging("debug")
        assert calls[0]["level"] == logging.WARNING
        assert calls[1]["level"] == logging.DEBUG
        assert calls[0]["format"] == config.LOG_FORMAT
