"""
Auto-recovery scheduler.

Two independent periodic tasks on the running event loop:
- crash check (default every 30s): attempts recovery when crash state holds
- health check (default every 5min): runs the probes and logs unhealthy results

The scheduler is an explicit handle; ``stop()`` cancels pending ticks and waits
for a recovery cycle that has already started.
"""

import asyncio
from typing import Awaitable, Callable, Optional

from linkguard.models.health import HealthSnapshot
from linkguard.services.crash_classifier import CrashClassifier
from linkguard.services.health_monitor import HealthMonitor
from linkguard.services.recovery import RecoveryCoordinator
from linkguard.utils.logging import get_logger, log_health_snapshot
from linkguard.utils.resilience import contain_failures

logger = get_logger(__name__)


class AutoRecoveryScheduler:
    """Drives periodic crash checks and health checks."""

    def __init__(
        self,
        classifier: CrashClassifier,
        coordinator: RecoveryCoordinator,
        health_monitor: HealthMonitor,
        crash_check_interval: float = 30.0,
        health_check_interval: float = 300.0
    ):
        self.classifier = classifier
        self.coordinator = coordinator
        self.health_monitor = health_monitor
        self.crash_check_interval = crash_check_interval
        self.health_check_interval = health_check_interval

        self._crash_task: Optional[asyncio.Task] = None
        self._health_task: Optional[asyncio.Task] = None
        self._recovery_task: Optional[asyncio.Task] = None

        # A failed tick is logged and never stops later ticks
        self.run_crash_check = contain_failures(default=None, label="Crash Check")(
            self._check_and_recover
        )
        self.run_health_check = contain_failures(default=None, label="Health Check")(
            self._check_health
        )

    @property
    def is_running(self) -> bool:
        return any(
            task is not None and not task.done()
            for task in (self._crash_task, self._health_task)
        )

    def start(self) -> None:
        """
        Start both periodic tasks on the running event loop. No-op if running.

        Raises:
            RuntimeError: If called without a running event loop
        """
        if self.is_running:
            logger.debug("Auto-recovery scheduler already running")
            return

        self._crash_task = asyncio.create_task(
            self._run_periodically(self.run_crash_check, self.crash_check_interval),
            name="linkguard-crash-check"
        )
        self._health_task = asyncio.create_task(
            self._run_periodically(self.run_health_check, self.health_check_interval),
            name="linkguard-health-check"
        )

        logger.info(
            "Auto-recovery scheduler started",
            extra={
                "crash_check_interval": self.crash_check_interval,
                "health_check_interval": self.health_check_interval,
            }
        )

    async def stop(self) -> None:
        """
        Cancel both periodic tasks and wait for them to finish.

        A recovery cycle already in progress is not cancelled; stop returns
        once it has completed.
        """
        tasks = [task for task in (self._crash_task, self._health_task) if task is not None]
        for task in tasks:
            task.cancel()

        for task in tasks:
            try:
                await task
            except asyncio.CancelledError:
                pass

        recovery = self._recovery_task
        if recovery is not None and not recovery.done():
            logger.info("Waiting for in-flight recovery to finish")
            await recovery
        self._recovery_task = None

        self._crash_task = None
        self._health_task = None

        if tasks:
            logger.info("Auto-recovery scheduler stopped")

    async def _run_periodically(
        self,
        tick: Callable[[], Awaitable[None]],
        interval: float
    ) -> None:
        while True:
            await asyncio.sleep(interval)
            await tick()

    async def _check_and_recover(self) -> Optional[bool]:
        """
        One crash-check tick.

        Returns:
            None when nothing was attempted, otherwise the recovery outcome
        """
        if self.coordinator.is_recovering:
            return None

        if not self.classifier.is_crash_state():
            return None

        logger.warning("Crash state detected, attempting recovery")
        # Cancelling the tick leaves the cycle running; stop() awaits it
        self._recovery_task = asyncio.create_task(
            self.coordinator.attempt_recovery(),
            name="linkguard-recovery"
        )
        recovered = await asyncio.shield(self._recovery_task)

        if not recovered:
            logger.warning("Recovery failed, app may need manual intervention")

        return recovered

    async def _check_health(self) -> HealthSnapshot:
        """One health-check tick. Unhealthy results are logged, not acted on."""
        snapshot = await self.health_monitor.run_health_checks()
        log_health_snapshot(logger, snapshot)
        return snapshot
