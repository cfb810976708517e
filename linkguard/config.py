"""
Application configuration management.
"""

import sys
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Monitor settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    # Application
    log_level: str = "INFO"
    platform: str = sys.platform
    debug: bool = False

    # Error log
    error_log_capacity: int = 100

    # Crash classification
    crash_threshold: int = 5
    crash_window_ms: int = 60000

    # Recovery
    max_recovery_attempts: int = 3
    strategy_delay_seconds: float = 1.0
    preserved_state_keys: List[str] = ["userPreferences", "authToken"]
    strategies_config: Optional[str] = None

    # Scheduler
    crash_check_interval_seconds: float = 30.0
    health_check_interval_seconds: float = 300.0

    # Health probes
    memory_threshold: float = 0.9
    connectivity_url: Optional[str] = None
    backend_health_url: Optional[str] = None
    probe_timeout_seconds: float = 5.0

    # Performance
    slow_operation_ms: int = 3000

    # Storage
    redis_url: Optional[str] = None
    state_key_prefix: str = "linkguard:state:"
    cache_key_prefix: str = "linkguard:cache:"

    # Admin API
    admin_api_key: Optional[str] = None


# Global settings instance
settings = Settings()
