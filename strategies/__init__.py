"""
Recovery strategy architecture.

This package provides the strategy interface, the built-in strategies and the
manager that orders them for a recovery cycle.
"""

from strategies.base import RecoveryStrategy
from strategies.builtin import (
    ClearCachesStrategy,
    ClearErrorLogStrategy,
    ResetAppStateStrategy,
)
from strategies.manager import StrategyManager

__all__ = [
    'RecoveryStrategy',
    'StrategyManager',
    'ClearErrorLogStrategy',
    'ResetAppStateStrategy',
    'ClearCachesStrategy',
]
