"""
Error log component.

Bounded, append-only buffer of structured error records. Every failure the
application observes is reported here; the crash classifier reads it on demand.
"""

import itertools
import sys
import traceback
from collections import deque
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any, Callable, Deque, Dict, List, Optional

from linkguard.models.error import ErrorRecord
from linkguard.utils.logging import get_logger, log_error_record

logger = get_logger(__name__)

UNKNOWN_MESSAGE = "Unknown error"
DEFAULT_CAPACITY = 100


def utc_now() -> datetime:
    """Current UTC instant."""
    return datetime.now(timezone.utc)


class ErrorLog:
    """
    Bounded error log with FIFO eviction.

    Records are kept in insertion order; once ``capacity`` is reached the
    oldest record is dropped for each new one.
    """

    def __init__(
        self,
        capacity: int = DEFAULT_CAPACITY,
        platform: str = sys.platform,
        clock: Callable[[], datetime] = utc_now
    ):
        """
        Initialize the error log.

        Args:
            capacity: Maximum number of retained records
            platform: Platform tag stamped on every record
            clock: Source of record timestamps
        """
        if capacity < 1:
            raise ValueError("capacity must be at least 1")

        self.capacity = capacity
        self.platform = platform
        self._clock = clock
        self._errors: Deque[ErrorRecord] = deque(maxlen=capacity)
        self._sequence = itertools.count(1)

    def __len__(self) -> int:
        return len(self._errors)

    def log_error(
        self,
        error: Any,
        context: str = "Unknown",
        metadata: Optional[Dict[str, Any]] = None
    ) -> ErrorRecord:
        """
        Record a failure.

        Never raises: message, code and stack are extracted defensively and
        fall back to placeholders.

        Args:
            error: Exception, message string, mapping with message/code/stack
                keys, or any other object
            context: Where the failure occurred (e.g. "Login")
            metadata: Additional key/value data from the reporting site

        Returns:
            The stored ErrorRecord
        """
        timestamp = self._now()
        record_id = f"{int(timestamp.timestamp() * 1000)}-{next(self._sequence)}"

        try:
            record = ErrorRecord(
                id=record_id,
                timestamp=timestamp,
                context=str(context) if context else "Unknown",
                message=_extract_message(error),
                code=_extract_code(error),
                stack=_extract_stack(error),
                platform=self.platform,
                metadata=dict(metadata) if metadata else {},
            )
        except Exception as e:
            # Unconvertible metadata or context; keep the failure visible anyway
            record = ErrorRecord(
                id=record_id,
                timestamp=timestamp,
                context="Unknown",
                message=UNKNOWN_MESSAGE,
                platform=self.platform,
                metadata={"capture_error": repr(e)},
            )

        self._errors.append(record)

        try:
            log_error_record(logger, record)
        except Exception:
            logger.logger.exception("Failed to emit error record")

        return record

    def get_recent_errors(self, count: int = 10) -> List[ErrorRecord]:
        """
        Get the most recent records, oldest first.

        Args:
            count: Maximum number of records to return

        Returns:
            The last ``count`` records in insertion order
        """
        if count <= 0:
            return []
        return list(self._errors)[-count:]

    def clear_errors(self) -> None:
        """Empty the log."""
        self._errors.clear()

    def get_error_summary(self) -> Dict[str, int]:
        """
        Count occurrences over the full retained log.

        Returns:
            Mapping of "context: code-or-message" to occurrence count
        """
        summary: Dict[str, int] = {}
        for record in self._errors:
            key = f"{record.context}: {record.code or record.message}"
            summary[key] = summary.get(key, 0) + 1
        return summary

    def _now(self) -> datetime:
        try:
            return self._clock()
        except Exception:
            return utc_now()


def _extract_message(error: Any) -> str:
    if error is None:
        return UNKNOWN_MESSAGE
    if isinstance(error, str):
        return error or UNKNOWN_MESSAGE
    if isinstance(error, Mapping):
        message = error.get("message")
        return str(message) if message else UNKNOWN_MESSAGE
    if isinstance(error, BaseException):
        return str(error) or UNKNOWN_MESSAGE

    message = getattr(error, "message", None)
    if message:
        return str(message)
    try:
        return str(error) or UNKNOWN_MESSAGE
    except Exception:
        return UNKNOWN_MESSAGE


def _extract_code(error: Any) -> Optional[str]:
    if isinstance(error, Mapping):
        code = error.get("code")
    else:
        code = getattr(error, "code", None)
    if code is None or code == "":
        return None
    try:
        return str(code)
    except Exception:
        return None


def _extract_stack(error: Any) -> Optional[str]:
    if isinstance(error, BaseException):
        if error.__traceback__ is not None:
            return "".join(
                traceback.format_exception(type(error), error, error.__traceback__)
            )
        return None
    if isinstance(error, Mapping):
        stack = error.get("stack")
    else:
        stack = getattr(error, "stack", None)
    return str(stack) if stack else None
