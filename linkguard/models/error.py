"""Error tracking data models."""

from datetime import datetime
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator


class ErrorRecord(BaseModel):
    """One observed failure. Immutable once created."""

    model_config = ConfigDict(frozen=True)

    id: str
    timestamp: datetime
    context: str
    message: str
    code: Optional[str] = None
    stack: Optional[str] = None
    platform: str
    metadata: Mapping[str, Any] = Field(default_factory=dict, validate_default=True)

    @field_validator("metadata")
    @classmethod
    def freeze_metadata(cls, value: Mapping[str, Any]) -> Mapping[str, Any]:
        """Store a read-only copy so the caller's dict can't alter the record."""
        return MappingProxyType(dict(value))

    @field_serializer("metadata")
    def serialize_metadata(self, value: Mapping[str, Any]) -> Dict[str, Any]:
        return dict(value)


class ErrorReport(BaseModel):
    """Failure reported by a client screen over HTTP."""

    context: str = "Unknown"
    message: Optional[str] = None
    code: Optional[str] = None
    stack: Optional[str] = None
    metadata: Dict[str, Any] = {}
