"""Health check data models."""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel


class ProbeStatus(str, Enum):
    """Outcome of a single health probe."""

    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"
    ERROR = "error"


class HealthCheckResult(BaseModel):
    """Result of one named probe."""

    status: ProbeStatus
    result: Optional[Any] = None
    error: Optional[str] = None


class HealthSnapshot(BaseModel):
    """Results of one health check run."""

    timestamp: datetime
    results: Dict[str, HealthCheckResult] = {}
    overall_healthy: bool


class HealthStatusReport(BaseModel):
    """Current aggregate health plus the last snapshot."""

    status: str
    last_check: Optional[HealthSnapshot] = None
    timestamp: datetime
