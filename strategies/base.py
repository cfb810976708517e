"""
Base interface for recovery strategies.

A recovery strategy is one discrete remedial action run as part of a recovery
cycle (clear logs, reset state, clear caches).
"""

from abc import ABC, abstractmethod


class RecoveryStrategy(ABC):
    """Base interface for recovery strategies."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the strategy name (e.g., 'clear_error_log')."""
        pass

    @abstractmethod
    async def run(self) -> None:
        """
        Perform the remedial action.

        Raises:
            Exception: Any failure; the coordinator contains it, reports it and
                moves on to the next strategy
        """
        pass

    def __repr__(self) -> str:
        return f"<{type(self).__name__} name={self.name!r}>"
