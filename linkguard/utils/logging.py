"""
Structured logging utilities with JSON formatting and context injection.

This module provides structured logging capabilities with:
- JSON formatted log output for machine-readable diagnostics
- Context injection (error_context, strategy, probe) via LoggerAdapter
- Helpers for the monitor's own events (error records, recovery attempts,
  health snapshots)
"""

import logging
import json
import sys
import traceback
from datetime import datetime, timezone
from typing import Any, Dict, Optional, MutableMapping
from logging import LogRecord


# Context fields promoted to the top level of the JSON document
PROMOTED_FIELDS = ("error_id", "error_context", "strategy", "attempt", "probe")

_RESERVED_ATTRS = {
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs",
    "message", "pathname", "process", "processName", "relativeCreated",
    "thread", "threadName", "exc_info", "exc_text", "stack_info", "taskName",
}


class JSONFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.

    Outputs log records as JSON with standard fields:
    - timestamp: ISO 8601 formatted timestamp
    - level: Log level (INFO, WARNING, ERROR, etc.)
    - logger: Logger name
    - message: Log message
    - promoted context fields (error_id, error_context, strategy, attempt, probe)
    - context: any other extra fields
    - error: Error details when exc_info is attached
    """

    def format(self, record: LogRecord) -> str:
        """
        Format log record as JSON.

        Args:
            record: Log record to format

        Returns:
            JSON formatted log string
        """
        log_data: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z'),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for field in PROMOTED_FIELDS:
            if hasattr(record, field):
                log_data[field] = getattr(record, field)

        extra_fields = {}
        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS and key not in PROMOTED_FIELDS:
                extra_fields[key] = value

        if extra_fields:
            log_data["context"] = extra_fields

        if record.exc_info:
            log_data["error"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "stack_trace": "".join(traceback.format_exception(*record.exc_info))
            }

        log_data["source"] = {
            "file": record.pathname,
            "line": record.lineno,
            "function": record.funcName
        }

        # Metadata supplied by reporting sites is arbitrary
        return json.dumps(log_data, default=str)


class LogContext:
    """
    Context manager for adding temporary context to logs.

    Usage:
        with LogContext(logger, strategy="clear_error_log"):
            logger.info("Running strategy")  # Will include strategy
    """

    def __init__(self, logger: logging.LoggerAdapter, **context: Any):
        self.logger = logger
        self.context = context
        self.old_extra = None

    def __enter__(self) -> logging.LoggerAdapter:
        """Enter context and add fields to logger."""
        self.old_extra = self.logger.extra.copy() if self.logger.extra else {}
        self.logger.extra.update(self.context)
        return self.logger

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Exit context and restore original logger state."""
        if self.old_extra is not None:
            self.logger.extra = self.old_extra


class ContextLoggerAdapter(logging.LoggerAdapter):
    """
    Logger adapter that injects context fields into all log records.
    """

    def __init__(self, logger: logging.Logger, extra: Optional[Dict[str, Any]] = None):
        super().__init__(logger, extra or {})

    def process(self, msg: str, kwargs: MutableMapping[str, Any]) -> tuple[str, MutableMapping[str, Any]]:
        """
        Process log message and inject context.

        Args:
            msg: Log message
            kwargs: Log kwargs

        Returns:
            Tuple of (message, kwargs) with context injected
        """
        extra = kwargs.get("extra", {})
        extra.update(self.extra)
        kwargs["extra"] = extra
        return msg, kwargs

    def with_context(self, **context: Any) -> "ContextLoggerAdapter":
        """
        Create a new logger adapter with additional context.

        Args:
            **context: Additional context fields

        Returns:
            New logger adapter with merged context
        """
        new_extra = self.extra.copy()
        new_extra.update(context)
        return ContextLoggerAdapter(self.logger, new_extra)


def setup_logging(log_level: str = "INFO") -> None:
    """
    Configure structured logging for the application.

    Sets up:
    - JSON formatter for all handlers
    - Console handler with appropriate log level
    - Root logger configuration

    Args:
        log_level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    formatter = JSONFormatter()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    console_handler.setLevel(log_level)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()
    root_logger.addHandler(console_handler)

    # Reduce noise from third-party libraries
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("redis").setLevel(logging.WARNING)


def get_logger(name: str, **context: Any) -> ContextLoggerAdapter:
    """
    Get a context-aware logger for a module.

    Args:
        name: Logger name (typically __name__)
        **context: Initial context fields

    Returns:
        Context logger adapter

    Example:
        logger = get_logger(__name__, probe="memory")
        logger.info("Probe finished")  # Will include probe
    """
    base_logger = logging.getLogger(name)
    return ContextLoggerAdapter(base_logger, context)


def log_error_record(logger: logging.LoggerAdapter, record: Any) -> None:
    """
    Emit a stored error record for external diagnostics.

    Args:
        logger: Logger to use
        record: ErrorRecord that was just appended to the log
    """
    logger.error(
        f"[Error Monitor - {record.context}]: {record.message}",
        extra={
            "error_id": record.id,
            "error_context": record.context,
            "code": record.code,
            "platform": record.platform,
            "metadata": dict(record.metadata),
            "stack": record.stack,
        }
    )


def log_recovery_attempt(
    logger: logging.LoggerAdapter,
    attempt: int,
    max_attempts: int,
    status: str
) -> None:
    """
    Log a recovery cycle transition.

    Args:
        logger: Logger to use
        attempt: Attempt number (1-indexed)
        max_attempts: Attempt cap
        status: 'started', 'recovered' or 'failed'
    """
    level = logging.WARNING if status == "failed" else logging.INFO
    logger.log(
        level,
        f"Recovery attempt {attempt}/{max_attempts} {status}",
        extra={
            "attempt": attempt,
            "max_attempts": max_attempts,
            "status": status,
        }
    )


def log_health_snapshot(logger: logging.LoggerAdapter, snapshot: Any) -> None:
    """
    Log a health check run; unhealthy runs are warnings.

    Args:
        logger: Logger to use
        snapshot: HealthSnapshot produced by the run
    """
    results = {
        name: result.model_dump(mode="json")
        for name, result in snapshot.results.items()
    }

    if snapshot.overall_healthy:
        logger.info("Health check passed", extra={"results": results})
    else:
        logger.warning("Unhealthy state detected", extra={"results": results})


def log_error_with_context(
    logger: logging.LoggerAdapter,
    message: str,
    error: Exception,
    **context: Any
) -> None:
    """
    Log error with full stack trace and context.

    Args:
        logger: Logger to use
        message: Error message
        error: Exception object
        **context: Additional context fields
    """
    logger.error(
        message,
        extra=context,
        exc_info=(type(error), error, error.__traceback__)
    )
