"""
Metrics collection and emission for observability.

This module provides:
- PerformanceMonitor for named operation timings
- Slow-operation reporting into the error log
- emit_metric for monitor counters (recovery attempts, health runs)
"""

import time
from contextlib import contextmanager
from typing import Any, Dict, Optional

from linkguard.utils.logging import get_logger

logger = get_logger(__name__)


class SlowOperationError(Exception):
    """Recorded when a timed operation exceeds the slow threshold."""
    pass


class PerformanceMonitor:
    """
    Times named operations.

    Operations slower than ``slow_threshold_ms`` are reported into the
    error log under the "Performance" context so that they show up in
    diagnostics next to ordinary failures.
    """

    def __init__(self, error_log=None, slow_threshold_ms: int = 3000):
        """
        Initialize performance monitor.

        Args:
            error_log: ErrorLog receiving slow-operation reports (optional)
            slow_threshold_ms: Duration above which an operation is slow
        """
        self.error_log = error_log
        self.slow_threshold_ms = slow_threshold_ms
        self.metrics: Dict[str, Dict[str, Optional[float]]] = {}

    def start_timer(self, operation: str) -> None:
        """
        Start timing an operation. Restarting an operation discards the
        previous timing.

        Args:
            operation: Operation name
        """
        self.metrics[operation] = {
            "start_time": time.monotonic() * 1000,
            "end_time": None,
            "duration": None,
        }

    def end_timer(self, operation: str) -> Optional[float]:
        """
        Stop timing an operation.

        Args:
            operation: Operation name

        Returns:
            Duration in milliseconds, or None if the timer was never started
        """
        entry = self.metrics.get(operation)
        if entry is None:
            logger.debug(f"end_timer called for unknown operation '{operation}'")
            return None

        entry["end_time"] = time.monotonic() * 1000
        duration = round(entry["end_time"] - entry["start_time"], 2)
        entry["duration"] = duration

        logger.info(f"[Performance] {operation}: {duration}ms")
        emit_metric("operation_duration_ms", duration, operation=operation)

        if duration > self.slow_threshold_ms and self.error_log is not None:
            self.error_log.log_error(
                SlowOperationError(f"Slow operation detected: {operation}"),
                "Performance",
                {"duration": duration, "operation": operation},
            )

        return duration

    @contextmanager
    def track(self, operation: str):
        """
        Context manager timing the enclosed block.

        Usage:
            with performance_monitor.track("load_links"):
                links = fetch_links()
        """
        self.start_timer(operation)
        try:
            yield
        finally:
            self.end_timer(operation)

    def get_metrics(self) -> Dict[str, Dict[str, Optional[float]]]:
        """Get a copy of all recorded timings."""
        return {name: dict(entry) for name, entry in self.metrics.items()}

    def clear_metrics(self) -> None:
        """Drop all recorded timings."""
        self.metrics = {}


def emit_metric(metric_name: str, value: float, **tags: Any) -> None:
    """
    Emit a metric.

    Metrics are logged; a log shipper forwards them to the monitoring backend.

    Args:
        metric_name: Metric name
        value: Metric value
        **tags: Metric tags/labels
    """
    logger.info(
        f"Metric: {metric_name}",
        extra={
            "metric_name": metric_name,
            "metric_value": value,
            "metric_tags": tags,
        }
    )
