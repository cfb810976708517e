"""
Built-in recovery strategies, in the order a recovery cycle runs them.
"""

import logging
from typing import Iterable

from linkguard.services.error_log import ErrorLog
from linkguard.services.storage import ContentCache, KeyValueStore
from strategies.base import RecoveryStrategy

logger = logging.getLogger(__name__)

DEFAULT_PRESERVED_KEYS = ("userPreferences", "authToken")


class ClearErrorLogStrategy(RecoveryStrategy):
    """Empty the error log so crash state is re-evaluated from scratch."""

    def __init__(self, error_log: ErrorLog):
        self.error_log = error_log

    @property
    def name(self) -> str:
        return "clear_error_log"

    async def run(self) -> None:
        logger.info("Clearing error logs")
        self.error_log.clear_errors()


class ResetAppStateStrategy(RecoveryStrategy):
    """Evict persisted client state except the preserved keys."""

    def __init__(self, store: KeyValueStore, preserved_keys: Iterable[str] = DEFAULT_PRESERVED_KEYS):
        self.store = store
        self.preserved_keys = list(preserved_keys)

    @property
    def name(self) -> str:
        return "reset_app_state"

    async def run(self) -> None:
        logger.info("Resetting app state")
        removed = await self.store.clear_except(self.preserved_keys)
        logger.info(
            f"Removed {len(removed)} state key(s)",
            extra={"removed_keys": removed, "preserved_keys": self.preserved_keys}
        )


class ClearCachesStrategy(RecoveryStrategy):
    """Delete every content cache."""

    def __init__(self, cache: ContentCache):
        self.cache = cache

    @property
    def name(self) -> str:
        return "clear_caches"

    async def run(self) -> None:
        logger.info("Clearing caches")
        cleared = await self.cache.clear_all()
        logger.info(f"Cleared {len(cleared)} cache(s)", extra={"caches": cleared})
