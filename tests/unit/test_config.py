"""Configuration tests."""

import pytest
from qrgen.core import get_settings
from qrgen.core.config import Settings


def test_settings_defaults():
    """Test default settings load correctly."""
    settings = Settings(_env_file=None)

    assert settings.port == 8080
    assert settings.environment == "development"
    assert settings.cache_enabled is True
    assert settings.cache_max_keys == 1000
    assert settings.cache_sweep_interval == 300
    assert settings.cache_max_age == 3600
    assert settings.cache_idle_timeout == 1800
    assert settings.general_limit_max == 225
    assert settings.qr_limit_max == 60
    assert settings.max_data_length == 4000
    assert settings.max_batch_size == 50
    assert settings.is_production is False


def test_settings_cached():
    """Test settings instance is shared."""
    assert get_settings() is get_settings()


def test_settings_from_environment(monkeypatch):
    """Test environment overrides with the QRGEN_ prefix."""
    monkeypatch.setenv("QRGEN_PORT", "9090")
    monkeypatch.setenv("QRGEN_ENVIRONMENT", "production")
    monkeypatch.setenv("QRGEN_CACHE_MAX_KEYS", "50")

    settings = Settings(_env_file=None)

    assert settings.port == 9090
    assert settings.is_production is True
    assert settings.cache_max_keys == 50


def test_settings_validation():
    """Test settings validation."""
    settings = Settings(_env_file=None, cache_max_keys=10)
    assert settings.cache_max_keys == 10

    # Capacity must be positive
    with pytest.raises(Exception):
        Settings(_env_file=None, cache_max_keys=0)

    # Port out of range
    with pytest.raises(Exception):
        Settings(_env_file=None, port=70000)
