"""Data models for the resilience core."""

from .api_response import ClearResponse, ErrorSummaryResponse, RecoveryResponse
from .error import ErrorRecord, ErrorReport
from .health import HealthCheckResult, HealthSnapshot, HealthStatusReport, ProbeStatus
from .recovery import CrashStatus, FallbackView, SystemStatus

__all__ = [
    # Error models
    "ErrorRecord",
    "ErrorReport",
    # Health models
    "ProbeStatus",
    "HealthCheckResult",
    "HealthSnapshot",
    "HealthStatusReport",
    # Recovery models
    "CrashStatus",
    "SystemStatus",
    "FallbackView",
    # API response models
    "RecoveryResponse",
    "ClearResponse",
    "ErrorSummaryResponse",
]
