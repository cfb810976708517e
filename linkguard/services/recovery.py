"""
Recovery Coordinator component.

Runs the ordered recovery strategies when the client is in crash state, caps
the number of consecutive failed cycles, and judges success by re-querying the
crash classifier.
"""

import asyncio
from typing import List, Sequence

from linkguard.models.recovery import CrashStatus
from linkguard.services.crash_classifier import CrashClassifier
from linkguard.services.error_log import ErrorLog
from linkguard.utils.logging import get_logger, log_error_with_context, log_recovery_attempt
from linkguard.utils.metrics import emit_metric
from linkguard.utils.resilience import run_contained
from strategies.base import RecoveryStrategy

logger = get_logger(__name__)

STRATEGY_FAILURE_CONTEXT = "Recovery Strategy"
RECOVERY_FAILURE_CONTEXT = "Recovery"


class RecoveryCoordinator:
    """
    Two-state (Idle / Recovering) recovery coordinator.

    ``is_recovering`` is the only guard against overlapping cycles. It is
    checked and set before the first suspension point of
    :meth:`attempt_recovery`, which is sufficient on a single event loop.
    """

    def __init__(
        self,
        error_log: ErrorLog,
        classifier: CrashClassifier,
        strategies: Sequence[RecoveryStrategy] = (),
        max_recovery_attempts: int = 3,
        strategy_delay: float = 1.0
    ):
        """
        Initialize the coordinator.

        Args:
            error_log: Log receiving strategy failures
            classifier: Classifier consulted after the strategies ran
            strategies: Strategies in run order
            max_recovery_attempts: Consecutive failed cycles before giving up
            strategy_delay: Seconds to wait after each strategy
        """
        self.error_log = error_log
        self.classifier = classifier
        self.strategies: List[RecoveryStrategy] = list(strategies)
        self.max_recovery_attempts = max_recovery_attempts
        self.strategy_delay = strategy_delay

        self.recovery_attempts = 0
        self.is_recovering = False

    @property
    def is_exhausted(self) -> bool:
        """True once the attempt cap is reached without a successful cycle."""
        return self.recovery_attempts >= self.max_recovery_attempts

    async def attempt_recovery(self) -> bool:
        """
        Run one recovery cycle.

        Refused (False, no side effects) while a cycle is running or once the
        attempt cap is reached. Never raises.

        Returns:
            True if the client is out of crash state after the cycle
        """
        if self.is_recovering or self.is_exhausted:
            logger.info(
                "Recovery refused",
                extra={
                    "is_recovering": self.is_recovering,
                    "attempt": self.recovery_attempts,
                }
            )
            return False

        self.is_recovering = True
        self.recovery_attempts += 1
        attempt = self.recovery_attempts

        log_recovery_attempt(logger, attempt, self.max_recovery_attempts, "started")
        emit_metric("recovery_attempt", 1, attempt=attempt)

        try:
            for strategy in self.strategies:
                await run_contained(
                    strategy.run,
                    strategy.name,
                    on_error=self._report_strategy_failure
                )
                await asyncio.sleep(self.strategy_delay)

            if not self.classifier.is_crash_state():
                log_recovery_attempt(logger, attempt, self.max_recovery_attempts, "recovered")
                emit_metric("recovery_success", 1, attempt=attempt)
                self.recovery_attempts = 0
                return True

            log_recovery_attempt(logger, attempt, self.max_recovery_attempts, "failed")

        except Exception as e:
            log_error_with_context(logger, "Recovery failed", e, attempt=attempt)
            self.error_log.log_error(e, RECOVERY_FAILURE_CONTEXT, {"attempt": attempt})

        finally:
            self.is_recovering = False

        emit_metric("recovery_failure", 1, attempt=attempt)
        if self.is_exhausted:
            logger.warning(
                "Recovery attempts exhausted, manual intervention required",
                extra={"attempt": attempt, "max_attempts": self.max_recovery_attempts}
            )
        return False

    def reset_recovery(self) -> None:
        """Zero the attempt count and leave the Recovering state."""
        self.recovery_attempts = 0
        self.is_recovering = False
        logger.info("Recovery state reset")

    def get_crash_status(self) -> CrashStatus:
        """
        Get crash classification and recovery session state.

        Returns:
            CrashStatus with the last 10 errors
        """
        return CrashStatus(
            is_crash_state=self.classifier.is_crash_state(),
            is_recovering=self.is_recovering,
            recovery_attempts=self.recovery_attempts,
            max_recovery_attempts=self.max_recovery_attempts,
            recent_errors=self.error_log.get_recent_errors(10),
        )

    def _report_strategy_failure(self, error: Exception, strategy_name: str) -> None:
        self.error_log.log_error(
            error,
            STRATEGY_FAILURE_CONTEXT,
            {"strategy": strategy_name, "attempt": self.recovery_attempts}
        )
