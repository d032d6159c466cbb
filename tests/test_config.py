"""
Tests for application and engine configuration.
"""

import dataclasses

import pytest

from redcf.calculations.config import DEFAULT_CONFIG, Bounds
from redcf.config import Settings, get_settings


class TestSettings:
    """Test environment-driven application settings."""

    def test_defaults(self):
        settings = Settings()
        assert settings.api_prefix == "/api"
        assert settings.port == 8000

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("PORT", "9000")
        settings = Settings()
        assert settings.log_level == "DEBUG"
        assert settings.port == 9000

    def test_settings_cached(self):
        assert get_settings() is get_settings()


class TestEngineConfig:
    """Test the frozen numerical configuration."""

    def test_defaults(self):
        assert DEFAULT_CONFIG.eps == 1e-12
        assert DEFAULT_CONFIG.irr.max_iterations == 100
        assert DEFAULT_CONFIG.irr.bounds == Bounds(-0.99, 10.0)
        assert DEFAULT_CONFIG.validation.max_years == 50

    def test_frozen(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            DEFAULT_CONFIG.eps = 1.0

    def test_bounds_inclusive(self):
        bounds = Bounds(0.01, 0.30)
        assert bounds.contains(0.01)
        assert bounds.contains(0.30)
        assert not bounds.contains(0.31)
