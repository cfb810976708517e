"""
Unit tests for metrics collection utilities.
"""

import pytest
from unittest.mock import patch

from linkguard.services.error_log import ErrorLog
from linkguard.utils.metrics import PerformanceMonitor, SlowOperationError, emit_metric


@pytest.fixture
def error_log(clock) -> ErrorLog:
    return ErrorLog(capacity=10, platform="test", clock=clock)


def test_timer_records_duration():
    """Test start/end records a non-negative duration."""
    monitor = PerformanceMonitor()

    monitor.start_timer("load_links")
    duration = monitor.end_timer("load_links")

    assert duration is not None
    assert duration >= 0
    metrics = monitor.get_metrics()
    assert metrics["load_links"]["duration"] == duration
    assert metrics["load_links"]["end_time"] is not None


def test_end_timer_without_start():
    """Test ending an unknown timer returns None."""
    monitor = PerformanceMonitor()

    assert monitor.end_timer("never_started") is None
    assert monitor.get_metrics() == {}


def test_slow_operation_is_logged(error_log):
    """Test operations over the threshold are reported into the error log."""
    monitor = PerformanceMonitor(error_log, slow_threshold_ms=3000)

    with patch("linkguard.utils.metrics.time") as fake_time:
        fake_time.monotonic.side_effect = [10.0, 14.5]
        monitor.start_timer("sync_links")
        duration = monitor.end_timer("sync_links")

    assert duration == 4500.0
    record = error_log.get_recent_errors(1)[0]
    assert record.context == "Performance"
    assert record.message == "Slow operation detected: sync_links"
    assert record.metadata == {"duration": 4500.0, "operation": "sync_links"}


def test_fast_operation_is_not_logged(error_log):
    """Test operations under the threshold leave the error log alone."""
    monitor = PerformanceMonitor(error_log, slow_threshold_ms=3000)

    with patch("linkguard.utils.metrics.time") as fake_time:
        fake_time.monotonic.side_effect = [10.0, 10.2]
        monitor.start_timer("render")
        monitor.end_timer("render")

    assert len(error_log) == 0


def test_track_times_block_even_on_error(error_log):
    """Test the track context manager ends the timer when the block raises."""
    monitor = PerformanceMonitor(error_log)

    with pytest.raises(ValueError):
        with monitor.track("parse"):
            raise ValueError("bad payload")

    assert monitor.get_metrics()["parse"]["duration"] is not None


def test_get_metrics_returns_copy():
    """Test the returned metrics cannot alter the monitor."""
    monitor = PerformanceMonitor()
    monitor.start_timer("a")

    snapshot = monitor.get_metrics()
    snapshot["a"]["duration"] = 99

    assert monitor.get_metrics()["a"]["duration"] is None


def test_clear_metrics():
    """Test clearing drops every timing."""
    monitor = PerformanceMonitor()
    monitor.start_timer("a")

    monitor.clear_metrics()

    assert monitor.get_metrics() == {}


def test_slow_operation_error_is_exception():
    """Test the slow operation marker is a regular exception."""
    assert issubclass(SlowOperationError, Exception)


def test_emit_metric():
    """Test metric emission doesn't raise errors."""
    emit_metric("recovery_attempt", 1, attempt=1)
    emit_metric("health_check", 0, probes=3)
