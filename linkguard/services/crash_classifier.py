"""
Crash classifier component.

Decides whether recent error volume amounts to a crash state. The state is
derived on every query and never stored.
"""

from datetime import datetime, timedelta
from typing import Callable, Optional

from linkguard.services.error_log import ErrorLog, utc_now
from linkguard.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_THRESHOLD = 5
DEFAULT_WINDOW_MS = 60000


class CrashClassifier:
    """
    Count/time-window classifier over the error log.

    Only the last ``threshold`` records are inspected, not every record in the
    window. A burst followed by unrelated churn can therefore undercount; this
    keeps each check bounded and is intentional.
    """

    def __init__(
        self,
        error_log: ErrorLog,
        threshold: int = DEFAULT_THRESHOLD,
        window_ms: int = DEFAULT_WINDOW_MS,
        clock: Callable[[], datetime] = utc_now
    ):
        self.error_log = error_log
        self.threshold = threshold
        self.window_ms = window_ms
        self._clock = clock

    def is_crash_state(
        self,
        threshold: Optional[int] = None,
        window_ms: Optional[int] = None
    ) -> bool:
        """
        Evaluate crash state.

        Args:
            threshold: Error count that constitutes a crash (default: configured)
            window_ms: Time window in milliseconds (default: configured)

        Returns:
            True iff at least ``threshold`` of the last ``threshold`` records
            occurred within ``window_ms`` of now (boundary inclusive)
        """
        threshold = self.threshold if threshold is None else threshold
        window_ms = self.window_ms if window_ms is None else window_ms

        try:
            if threshold <= 0:
                return False

            recent_errors = self.error_log.get_recent_errors(threshold)
            if len(recent_errors) < threshold:
                return False

            now = self._clock()
            window = timedelta(milliseconds=window_ms)
            errors_in_window = [
                record for record in recent_errors
                if now - record.timestamp <= window
            ]

            return len(errors_in_window) >= threshold

        except Exception as e:
            logger.error(f"Crash state evaluation failed: {e}", exc_info=True)
            return False
