"""Shared fixtures for the unit tests."""

from datetime import datetime, timedelta, timezone

import pytest

from linkguard.config import Settings


class FakeClock:
    """Controllable time source."""

    def __init__(self, now: datetime = None):
        self.now = now or datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += timedelta(milliseconds=ms)


@pytest.fixture
def clock() -> FakeClock:
    """Fake clock shared by the components under test."""
    return FakeClock()


@pytest.fixture
def fast_settings() -> Settings:
    """Settings without delays, Redis or configured probe URLs."""
    return Settings(
        strategy_delay_seconds=0,
        redis_url=None,
        connectivity_url=None,
        backend_health_url=None,
        strategies_config=None,
        admin_api_key=None,
        platform="test",
    )
