"""Monitoring core services package.

Only leaf components are re-exported here; import the recovery coordinator,
scheduler and system from their modules.
"""

from linkguard.services.error_log import ErrorLog
from linkguard.services.crash_classifier import CrashClassifier
from linkguard.services.health_monitor import HealthMonitor
from linkguard.services.redis_client import (
    RedisClient,
    RedisConnectionError
)
from linkguard.services.storage import (
    StorageError,
    KeyValueStore,
    ContentCache,
    InMemoryKeyValueStore,
    InMemoryContentCache,
    NullContentCache,
    RedisKeyValueStore,
    RedisContentCache
)

__all__ = [
    'ErrorLog',
    'CrashClassifier',
    'HealthMonitor',
    'RedisClient',
    'RedisConnectionError',
    'StorageError',
    'KeyValueStore',
    'ContentCache',
    'InMemoryKeyValueStore',
    'InMemoryContentCache',
    'NullContentCache',
    'RedisKeyValueStore',
    'RedisContentCache'
]
