"""Crash and recovery status data models."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from .error import ErrorRecord
from .health import HealthStatusReport


class CrashStatus(BaseModel):
    """Crash classification and recovery session state."""

    is_crash_state: bool
    is_recovering: bool
    recovery_attempts: int
    max_recovery_attempts: int
    recent_errors: List[ErrorRecord] = []


class SystemStatus(BaseModel):
    """Diagnostic snapshot for the debug panel."""

    crash: CrashStatus
    health: HealthStatusReport
    errors: List[ErrorRecord] = []
    timestamp: datetime


class FallbackView(BaseModel):
    """What the supervisor shows after catching a rendering failure."""

    kind: str
    title: str
    message: str
    actions: List[str] = []
    error_message: Optional[str] = None
    component_stack: Optional[str] = None
    system_status: Optional[SystemStatus] = None
