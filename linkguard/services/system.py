"""
Resilience system.

Single construction point for the monitoring core. ``build_system()`` wires a
fresh, isolated set of components from settings; the application builds one at
startup and passes it to its consumers.
"""

from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from linkguard.config import Settings
from linkguard.models.error import ErrorRecord
from linkguard.models.recovery import SystemStatus
from linkguard.services.crash_classifier import CrashClassifier
from linkguard.services.error_log import ErrorLog, utc_now
from linkguard.services.global_handlers import GlobalErrorHandlers
from linkguard.services.health_monitor import HealthMonitor
from linkguard.services.recovery import RecoveryCoordinator
from linkguard.services.redis_client import RedisClient, RedisConnectionError
from linkguard.services.scheduler import AutoRecoveryScheduler
from linkguard.services.storage import (
    ContentCache,
    InMemoryKeyValueStore,
    KeyValueStore,
    NullContentCache,
    RedisContentCache,
    RedisKeyValueStore,
)
from linkguard.utils.logging import get_logger
from linkguard.utils.metrics import PerformanceMonitor
from strategies import (
    ClearCachesStrategy,
    ClearErrorLogStrategy,
    ResetAppStateStrategy,
    StrategyManager,
)

logger = get_logger(__name__)


class ResilienceSystem:
    """
    The monitoring core as consumed by the supervisor and the screens.

    Components are exposed as attributes for diagnostics and tests; callers
    use the methods below.
    """

    def __init__(
        self,
        settings: Settings,
        error_log: ErrorLog,
        classifier: CrashClassifier,
        coordinator: RecoveryCoordinator,
        health_monitor: HealthMonitor,
        scheduler: AutoRecoveryScheduler,
        strategy_manager: StrategyManager,
        state_store: KeyValueStore,
        content_cache: ContentCache,
        performance_monitor: PerformanceMonitor,
        redis_client: Optional[RedisClient] = None,
        clock: Callable[[], datetime] = utc_now
    ):
        self.settings = settings
        self.error_log = error_log
        self.classifier = classifier
        self.coordinator = coordinator
        self.health_monitor = health_monitor
        self.scheduler = scheduler
        self.strategy_manager = strategy_manager
        self.state_store = state_store
        self.content_cache = content_cache
        self.performance_monitor = performance_monitor
        self.redis_client = redis_client
        self.global_handlers = GlobalErrorHandlers(error_log)
        self._clock = clock

    def log_error(
        self,
        error: Any,
        context: str = "Unknown",
        metadata: Optional[Dict[str, Any]] = None
    ) -> ErrorRecord:
        """Record a failure. Never raises."""
        return self.error_log.log_error(error, context, metadata)

    def is_crash_state(self) -> bool:
        """Evaluate crash state with the configured threshold and window."""
        return self.classifier.is_crash_state()

    async def attempt_recovery(self) -> bool:
        """Run one recovery cycle. Never raises."""
        return await self.coordinator.attempt_recovery()

    def reset_recovery(self) -> None:
        """Zero the recovery attempt count (manual "Try Again")."""
        self.coordinator.reset_recovery()

    def get_system_status(self) -> SystemStatus:
        """
        Diagnostic snapshot for the debug panel.

        Returns:
            SystemStatus with crash status, health status and the last 5 errors
        """
        return SystemStatus(
            crash=self.coordinator.get_crash_status(),
            health=self.health_monitor.get_health_status(),
            errors=self.error_log.get_recent_errors(5),
            timestamp=self._clock(),
        )

    async def connect_storage(self) -> None:
        """Connect the Redis client, if one is configured. A failure is recorded, not raised."""
        if self.redis_client is None or self.redis_client.is_connected:
            return
        try:
            await self.redis_client.initialize()
        except RedisConnectionError as e:
            self.log_error(e, "Storage Initialization")

    def setup_global_error_handlers(self, loop=None) -> GlobalErrorHandlers:
        """Install process-wide failure hooks. Idempotent."""
        return self.global_handlers.install(loop)

    def setup_auto_recovery(self) -> AutoRecoveryScheduler:
        """Start the periodic crash and health checks. Idempotent."""
        self.scheduler.start()
        return self.scheduler

    async def shutdown(self) -> None:
        """Stop the scheduler, remove the hooks and close storage connections."""
        await self.scheduler.stop()
        self.global_handlers.uninstall()
        if self.redis_client is not None and self.redis_client.is_connected:
            await self.redis_client.close()
        logger.info("Resilience system shut down")


def build_system(
    settings: Optional[Settings] = None,
    state_store: Optional[KeyValueStore] = None,
    content_cache: Optional[ContentCache] = None,
    redis_client: Optional[RedisClient] = None,
    clock: Callable[[], datetime] = utc_now
) -> ResilienceSystem:
    """
    Construct a resilience system.

    Storage capabilities not passed explicitly are chosen from settings:
    Redis-backed when ``redis_url`` is set, in-process otherwise. The Redis
    client is not connected here; call ``connect_storage()`` on startup.

    Args:
        settings: Settings (default: loaded from the environment)
        state_store: Key-value store override
        content_cache: Content cache override
        redis_client: Redis client override
        clock: Time source shared by all components

    Returns:
        A fresh ResilienceSystem
    """
    if settings is None:
        settings = Settings()

    if redis_client is None and settings.redis_url and (state_store is None or content_cache is None):
        redis_client = RedisClient(redis_url=settings.redis_url)

    if state_store is None:
        if redis_client is not None:
            state_store = RedisKeyValueStore(redis_client, prefix=settings.state_key_prefix)
        else:
            state_store = InMemoryKeyValueStore()

    if content_cache is None:
        if redis_client is not None:
            content_cache = RedisContentCache(redis_client, prefix=settings.cache_key_prefix)
        else:
            content_cache = NullContentCache()

    error_log = ErrorLog(
        capacity=settings.error_log_capacity,
        platform=settings.platform,
        clock=clock,
    )
    classifier = CrashClassifier(
        error_log,
        threshold=settings.crash_threshold,
        window_ms=settings.crash_window_ms,
        clock=clock,
    )

    preserved_keys = list(settings.preserved_state_keys)
    strategy_order = None
    strategy_manager = StrategyManager()
    if settings.strategies_config:
        config = strategy_manager.load_strategy_config(Path(settings.strategies_config))
        preserved_keys = list(config.get("preserved_keys", preserved_keys))
        strategy_order = config.get("order")

    strategy_manager.register_strategy(ClearErrorLogStrategy(error_log))
    strategy_manager.register_strategy(ResetAppStateStrategy(state_store, preserved_keys))
    strategy_manager.register_strategy(ClearCachesStrategy(content_cache))
    if strategy_order is not None:
        strategy_manager.set_order(list(strategy_order))

    coordinator = RecoveryCoordinator(
        error_log,
        classifier,
        strategies=strategy_manager.get_strategies(),
        max_recovery_attempts=settings.max_recovery_attempts,
        strategy_delay=settings.strategy_delay_seconds,
    )

    health_monitor = HealthMonitor(clock=clock)
    health_monitor.setup_default_checks(
        connectivity_url=settings.connectivity_url,
        backend_health_url=settings.backend_health_url,
        memory_threshold=settings.memory_threshold,
        timeout=settings.probe_timeout_seconds,
    )
    if redis_client is not None:
        health_monitor.register_check("storage", redis_client.ping)

    scheduler = AutoRecoveryScheduler(
        classifier,
        coordinator,
        health_monitor,
        crash_check_interval=settings.crash_check_interval_seconds,
        health_check_interval=settings.health_check_interval_seconds,
    )

    performance_monitor = PerformanceMonitor(
        error_log,
        slow_threshold_ms=settings.slow_operation_ms,
    )

    logger.info(
        "Resilience system built",
        extra={
            "strategies": strategy_manager.list_strategies(),
            "storage": type(state_store).__name__,
            "cache": type(content_cache).__name__,
        }
    )

    return ResilienceSystem(
        settings=settings,
        error_log=error_log,
        classifier=classifier,
        coordinator=coordinator,
        health_monitor=health_monitor,
        scheduler=scheduler,
        strategy_manager=strategy_manager,
        state_store=state_store,
        content_cache=content_cache,
        performance_monitor=performance_monitor,
        redis_client=redis_client,
        clock=clock,
    )
