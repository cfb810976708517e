"""
Storage capabilities the recovery strategies may reset.

Two capabilities, each with an in-process implementation (selected when no
Redis URL is configured) and a Redis-backed implementation:
- KeyValueStore: persisted client state (preferences, tokens, drafts)
- ContentCache: named caches of fetched content
"""

import asyncio
from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Optional

from redis.exceptions import RedisError

from linkguard.services.redis_client import RedisClient, RedisConnectionError
from linkguard.utils.logging import get_logger

logger = get_logger(__name__)

_REDIS_FAILURES = (RedisConnectionError, RedisError, RuntimeError)


class StorageError(Exception):
    """Raised when a storage capability cannot complete an operation."""
    pass


class KeyValueStore(ABC):
    """Persisted key-value state."""

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """Return the value for ``key`` or None."""
        pass

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``."""
        pass

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove ``key`` if present."""
        pass

    @abstractmethod
    async def keys(self) -> List[str]:
        """List every stored key."""
        pass

    async def clear_except(self, keep: Iterable[str]) -> List[str]:
        """
        Remove every key not in ``keep``.

        Args:
            keep: Keys to preserve

        Returns:
            Keys that were removed
        """
        preserved = set(keep)
        removed = [key for key in await self.keys() if key not in preserved]
        for key in removed:
            await self.delete(key)
        logger.debug(f"Removed {len(removed)} state key(s), preserved {sorted(preserved)}")
        return removed

    async def close(self) -> None:
        """Release resources."""
        return None


class ContentCache(ABC):
    """Named caches of fetched content."""

    @abstractmethod
    async def cache_names(self) -> List[str]:
        """List existing cache names."""
        pass

    @abstractmethod
    async def delete_cache(self, name: str) -> bool:
        """Delete one cache; True if it existed."""
        pass

    @abstractmethod
    async def put(self, name: str, key: str, value: str) -> None:
        """Store an entry in cache ``name``."""
        pass

    @abstractmethod
    async def get(self, name: str, key: str) -> Optional[str]:
        """Read an entry from cache ``name``."""
        pass

    async def clear_all(self) -> List[str]:
        """
        Delete every cache.

        Returns:
            Names of the deleted caches
        """
        names = await self.cache_names()
        await asyncio.gather(*(self.delete_cache(name) for name in names))
        logger.debug(f"Deleted {len(names)} content cache(s)")
        return names

    async def close(self) -> None:
        """Release resources."""
        return None


class InMemoryKeyValueStore(KeyValueStore):
    """Process-local key-value store."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        self._data[key] = value

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)

    async def keys(self) -> List[str]:
        return list(self._data)


class NullContentCache(ContentCache):
    """Content cache for environments without one. Holds nothing."""

    async def cache_names(self) -> List[str]:
        return []

    async def delete_cache(self, name: str) -> bool:
        return False

    async def put(self, name: str, key: str, value: str) -> None:
        return None

    async def get(self, name: str, key: str) -> Optional[str]:
        return None


class InMemoryContentCache(ContentCache):
    """Process-local named caches."""

    def __init__(self):
        self._caches: Dict[str, Dict[str, str]] = {}

    async def cache_names(self) -> List[str]:
        return list(self._caches)

    async def delete_cache(self, name: str) -> bool:
        return self._caches.pop(name, None) is not None

    async def put(self, name: str, key: str, value: str) -> None:
        self._caches.setdefault(name, {})[key] = value

    async def get(self, name: str, key: str) -> Optional[str]:
        return self._caches.get(name, {}).get(key)


class RedisKeyValueStore(KeyValueStore):
    """
    Key-value store backed by Redis strings.

    Keys are namespaced with ``prefix`` so that a reset never touches data
    belonging to other services on the same server.
    """

    def __init__(self, redis_client: RedisClient, prefix: str = "linkguard:state:"):
        self.redis_client = redis_client
        self.prefix = prefix

    def _key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    async def get(self, key: str) -> Optional[str]:
        try:
            return await self.redis_client.get_value(self._key(key))
        except _REDIS_FAILURES as e:
            raise StorageError(f"Failed to read state key '{key}': {e}") from e

    async def set(self, key: str, value: str) -> None:
        try:
            await self.redis_client.set_value(self._key(key), value)
        except _REDIS_FAILURES as e:
            raise StorageError(f"Failed to write state key '{key}': {e}") from e

    async def delete(self, key: str) -> None:
        try:
            await self.redis_client.delete_keys(self._key(key))
        except _REDIS_FAILURES as e:
            raise StorageError(f"Failed to delete state key '{key}': {e}") from e

    async def keys(self) -> List[str]:
        try:
            raw_keys = await self.redis_client.scan_keys(self.prefix)
        except _REDIS_FAILURES as e:
            raise StorageError(f"Failed to list state keys: {e}") from e
        return [key[len(self.prefix):] for key in raw_keys]

    async def close(self) -> None:
        await self.redis_client.close()


class RedisContentCache(ContentCache):
    """Named caches stored as Redis hashes, one hash per cache."""

    def __init__(self, redis_client: RedisClient, prefix: str = "linkguard:cache:"):
        self.redis_client = redis_client
        self.prefix = prefix

    def _key(self, name: str) -> str:
        return f"{self.prefix}{name}"

    async def cache_names(self) -> List[str]:
        try:
            raw_keys = await self.redis_client.scan_keys(self.prefix)
        except _REDIS_FAILURES as e:
            raise StorageError(f"Failed to list caches: {e}") from e
        return [key[len(self.prefix):] for key in raw_keys]

    async def delete_cache(self, name: str) -> bool:
        try:
            return await self.redis_client.delete_keys(self._key(name)) > 0
        except _REDIS_FAILURES as e:
            raise StorageError(f"Failed to delete cache '{name}': {e}") from e

    async def put(self, name: str, key: str, value: str) -> None:
        try:
            await self.redis_client.hset_entry(self._key(name), key, value)
        except _REDIS_FAILURES as e:
            raise StorageError(f"Failed to write cache '{name}': {e}") from e

    async def get(self, name: str, key: str) -> Optional[str]:
        try:
            return await self.redis_client.hget_entry(self._key(name), key)
        except _REDIS_FAILURES as e:
            raise StorageError(f"Failed to read cache '{name}': {e}") from e
