"""API response data models."""

from typing import Dict

from pydantic import BaseModel


class RecoveryResponse(BaseModel):
    """Result of a recovery action."""

    recovered: bool
    recovery_attempts: int
    max_recovery_attempts: int


class ClearResponse(BaseModel):
    """Result of clearing the error log."""

    status: str
    message: str


class ErrorSummaryResponse(BaseModel):
    """Occurrence counts keyed by "context: code-or-message"."""

    total: int
    summary: Dict[str, int] = {}
