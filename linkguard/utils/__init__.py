"""
Utility modules for the resilience core.
"""

from linkguard.utils.logging import (
    get_logger,
    setup_logging,
    LogContext,
    log_error_record,
    log_recovery_attempt,
    log_health_snapshot,
    log_error_with_context,
)
from linkguard.utils.metrics import (
    PerformanceMonitor,
    emit_metric,
)
from linkguard.utils.resilience import (
    contain_failures,
    run_contained,
)

__all__ = [
    "get_logger",
    "setup_logging",
    "LogContext",
    "log_error_record",
    "log_recovery_attempt",
    "log_health_snapshot",
    "log_error_with_context",
    "PerformanceMonitor",
    "emit_metric",
    "contain_failures",
    "run_contained",
]
