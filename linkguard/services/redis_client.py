"""
Redis client wrapper for persisted client state and content caches.

This service provides the Redis operations the storage capabilities need:
- String get/set/delete for key-value state
- Hash operations for named content caches
- Prefix scans for enumerating keys

Includes connection pooling and retry logic for resilience.
"""

import logging
import asyncio
from typing import Optional, List
from contextlib import asynccontextmanager
import redis.asyncio as redis
from redis.asyncio.connection import ConnectionPool
from redis.exceptions import RedisError, ConnectionError, TimeoutError


logger = logging.getLogger(__name__)


class RedisConnectionError(Exception):
    """Raised when Redis connection fails after retries."""
    pass


class RedisClient:
    """
    Redis client wrapper with connection pooling and retry logic.
    """

    def __init__(
        self,
        redis_url: Optional[str] = None,
        max_retries: int = 3,
        retry_delay: float = 1.0,
        connection_timeout: int = 5
    ):
        """
        Initialize Redis client.

        Args:
            redis_url: Redis connection URL. If None, will load from settings.
            max_retries: Maximum number of retry attempts for transient errors
            retry_delay: Base delay between retries (exponential backoff)
            connection_timeout: Connection timeout in seconds
        """
        self._redis_url = redis_url
        self._pool: Optional[ConnectionPool] = None
        self._client: Optional[redis.Redis] = None
        self._max_retries = max_retries
        self._retry_delay = retry_delay
        self._connection_timeout = connection_timeout

    @property
    def is_connected(self) -> bool:
        return self._client is not None

    async def initialize(self) -> None:
        """
        Initialize Redis connection pool.

        Should be called during application startup.

        Raises:
            RedisConnectionError: If connection fails
        """
        try:
            if not self._redis_url:
                from linkguard.config import settings
                self._redis_url = settings.redis_url

            if not self._redis_url:
                raise ValueError("No Redis URL configured")

            self._pool = ConnectionPool.from_url(
                self._redis_url,
                max_connections=10,
                decode_responses=True,
                socket_timeout=self._connection_timeout,
                socket_connect_timeout=self._connection_timeout
            )

            self._client = redis.Redis(connection_pool=self._pool)

            # Test connection
            await self._client.ping()

            logger.info("Redis connection pool initialized successfully")

        except Exception as e:
            logger.error(f"Failed to initialize Redis connection pool: {e}")
            raise RedisConnectionError(f"Failed to connect to Redis: {e}")

    async def close(self) -> None:
        """
        Close Redis connection pool.

        Should be called during application shutdown.
        """
        if self._client:
            await self._client.aclose()
            self._client = None

        if self._pool:
            await self._pool.disconnect()
            self._pool = None

        logger.info("Redis connection pool closed")

    async def ping(self) -> bool:
        """Check that the server answers."""
        async def _ping():
            async with self._get_client() as client:
                return bool(await client.ping())

        return await self._retry_operation(_ping)

    @asynccontextmanager
    async def _get_client(self):
        """
        Get Redis client with connection check.

        Yields:
            redis.Redis: Redis client instance

        Raises:
            RuntimeError: If client not initialized
        """
        if not self._client:
            raise RuntimeError("Redis client not initialized. Call initialize() first.")

        yield self._client

    async def _retry_operation(self, operation, *args, **kwargs):
        """
        Execute Redis operation with retry logic.

        Args:
            operation: Async function to execute
            *args: Positional arguments for operation
            **kwargs: Keyword arguments for operation

        Returns:
            Operation result

        Raises:
            RedisConnectionError: If operation fails after all retries
        """
        last_error = None

        for attempt in range(self._max_retries):
            try:
                return await operation(*args, **kwargs)

            except (ConnectionError, TimeoutError) as e:
                last_error = e
                if attempt < self._max_retries - 1:
                    delay = self._retry_delay * (2 ** attempt)
                    logger.warning(
                        f"Redis operation failed (attempt {attempt + 1}/{self._max_retries}), "
                        f"retrying in {delay}s: {e}"
                    )
                    await asyncio.sleep(delay)
                else:
                    logger.error(f"Redis operation failed after {self._max_retries} attempts: {e}")

            except RedisError as e:
                # Non-transient errors, don't retry
                logger.error(f"Redis operation failed with non-transient error: {e}")
                raise

        raise RedisConnectionError(f"Redis operation failed after {self._max_retries} retries: {last_error}")

    # ========== Key-Value Operations (String) ==========

    async def get_value(self, key: str) -> Optional[str]:
        """
        Get a string value.

        Raises:
            RedisConnectionError: If operation fails after retries
        """
        async def _get():
            async with self._get_client() as client:
                return await client.get(key)

        return await self._retry_operation(_get)

    async def set_value(self, key: str, value: str) -> None:
        """
        Set a string value.

        Raises:
            RedisConnectionError: If operation fails after retries
        """
        async def _set():
            async with self._get_client() as client:
                await client.set(key, value)
                logger.debug(f"Set key {key}")

        await self._retry_operation(_set)

    async def delete_keys(self, *keys: str) -> int:
        """
        Delete keys.

        Returns:
            Number of keys removed

        Raises:
            RedisConnectionError: If operation fails after retries
        """
        if not keys:
            return 0

        async def _delete():
            async with self._get_client() as client:
                removed = await client.delete(*keys)
                logger.debug(f"Deleted {removed} key(s)")
                return removed

        return await self._retry_operation(_delete)

    async def scan_keys(self, prefix: str) -> List[str]:
        """
        List every key starting with ``prefix``.

        Raises:
            RedisConnectionError: If operation fails after retries
        """
        async def _scan():
            async with self._get_client() as client:
                return [key async for key in client.scan_iter(match=f"{prefix}*")]

        return await self._retry_operation(_scan)

    # ========== Content Cache Operations (Hash) ==========

    async def hset_entry(self, key: str, field: str, value: str) -> None:
        """
        Store one entry in a hash.

        Raises:
            RedisConnectionError: If operation fails after retries
        """
        async def _hset():
            async with self._get_client() as client:
                await client.hset(key, field, value)

        await self._retry_operation(_hset)

    async def hget_entry(self, key: str, field: str) -> Optional[str]:
        """
        Read one entry from a hash.

        Raises:
            RedisConnectionError: If operation fails after retries
        """
        async def _hget():
            async with self._get_client() as client:
                return await client.hget(key, field)

        return await self._retry_operation(_hget)
