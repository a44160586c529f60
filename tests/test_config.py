"""Host configuration settings test suite.

Validate defaults, environment overrides and the cached settings singleton
used by the reference host.
"""
import os
from unittest import mock

import pytest
from pydantic import ValidationError

from pulsecheck.config import Settings, get_settings


def test_defaults_without_environment():
    """Verify the host falls back to development defaults."""
    with mock.patch.dict(os.environ, {}, clear=True):
        settings = Settings(_env_file=None)

    assert settings.ENVIRONMENT == "development"
    assert settings.LOG_LEVEL == "info"
    assert "uvicorn.access" in settings.LOGGING_NOISY_MODULES


def test_environment_overrides_defaults():
    """Verify environment variables populate the settings."""
    env_vars = {"ENVIRONMENT": "staging", "LOG_LEVEL": "warning", "PROJECT_NAME": "Billing"}
    with mock.patch.dict(os.environ, env_vars, clear=True):
        settings = Settings(_env_file=None)

    assert settings.ENVIRONMENT == "staging"
    assert settings.LOG_LEVEL == "warning"
    assert settings.PROJECT_NAME == "Billing"


def test_explicit_values_beat_environment():
    """Verify init arguments take precedence over the environment."""
    with mock.patch.dict(os.environ, {"LOG_LEVEL": "error"}, clear=True):
        settings = Settings(LOG_LEVEL="debug", _env_file=None)

    assert settings.LOG_LEVEL == "debug"


def test_unknown_environment_is_rejected():
    """Verify the deployment environment is restricted to known values."""
    with pytest.raises(ValidationError):
        Settings(ENVIRONMENT="qa", _env_file=None)


def test_get_settings_is_cached():
    """Verify the settings dependency returns a singleton."""
    get_settings.cache_clear()
    try:
        assert get_settings() is get_settings()
    finally:
        get_settings.cache_clear()
