"""
Unit tests for configuration management.
"""

import pytest
from unittest.mock import patch
import os


def test_settings_loads_from_environment():
    """Test that settings can be loaded from environment variables."""
    with patch.dict(os.environ, {
        'REDIS_URL': 'redis://localhost:6379/0',
        'LOG_LEVEL': 'DEBUG',
        'CRASH_THRESHOLD': '3',
        'CRASH_WINDOW_MS': '30000',
        'MAX_RECOVERY_ATTEMPTS': '5',
        'PRESERVED_STATE_KEYS': '["authToken"]',
        'BACKEND_HEALTH_URL': 'https://backend.example.com/health',
    }):
        from linkguard.config import Settings
        settings = Settings(_env_file=None)

        assert settings.redis_url == 'redis://localhost:6379/0'
        assert settings.log_level == 'DEBUG'
        assert settings.crash_threshold == 3
        assert settings.crash_window_ms == 30000
        assert settings.max_recovery_attempts == 5
        assert settings.preserved_state_keys == ['authToken']
        assert settings.backend_health_url == 'https://backend.example.com/health'


def test_settings_has_default_values():
    """Test that settings have appropriate default values."""
    with patch.dict(os.environ, {}, clear=True):
        from linkguard.config import Settings
        settings = Settings(_env_file=None)

        assert settings.log_level == 'INFO'
        assert settings.error_log_capacity == 100
        assert settings.crash_threshold == 5
        assert settings.crash_window_ms == 60000
        assert settings.max_recovery_attempts == 3
        assert settings.strategy_delay_seconds == 1.0
        assert settings.preserved_state_keys == ['userPreferences', 'authToken']
        assert settings.crash_check_interval_seconds == 30.0
        assert settings.health_check_interval_seconds == 300.0
        assert settings.memory_threshold == 0.9
        assert settings.slow_operation_ms == 3000
        assert settings.redis_url is None
        assert settings.admin_api_key is None


def test_settings_rejects_invalid_numbers():
    """Test that non-numeric values for numeric settings are rejected."""
    from pydantic import ValidationError

    with patch.dict(os.environ, {'CRASH_THRESHOLD': 'many'}):
        from linkguard.config import Settings

        with pytest.raises(ValidationError):
            Settings(_env_file=None)


def test_settings_case_insensitive():
    """Test that environment variable names are case-insensitive."""
    with patch.dict(os.environ, {'crash_window_ms': '1000'}):
        from linkguard.config import Settings
        settings = Settings(_env_file=None)

        assert settings.crash_window_ms == 1000
