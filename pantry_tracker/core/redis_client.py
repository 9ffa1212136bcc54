"""Redis-backed blob store."""

import asyncio
import logging
from collections.abc import Callable, Coroutine
from datetime import UTC, datetime
from functools import wraps
from typing import Any, TypeVar

from redis.asyncio import Redis
from redis.asyncio.connection import ConnectionPool
from redis.exceptions import RedisError

from pantry_tracker.core.config import Constants


logger = logging.getLogger(__name__)

# Type variable for generic retry decorator
T = TypeVar("T")


def with_retry(
    max_retries: int = 3, base_delay: float = 0.1
) -> Callable[[Callable[..., Coroutine[Any, Any, T]]], Callable[..., Coroutine[Any, Any, T]]]:
    """Decorator to retry async functions with exponential backoff.

    Args:
        max_retries: Maximum number of retry attempts (default: 3)
        base_delay: Base delay in seconds for exponential backoff (default: 0.1)

    Returns:
        Decorated function with retry logic
    """

    def decorator(func: Callable[..., Coroutine[Any, Any, T]]) -> Callable[..., Coroutine[Any, Any, T]]:
        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:  # noqa: ANN401
            last_exception = None
            for attempt in range(max_retries):
                try:
                    return await func(*args, **kwargs)
                except RedisError as e:
                    last_exception = e
                    if attempt < max_retries - 1:
                        delay = base_delay * (2**attempt)
                        logger.warning(
                            "Redis operation failed (attempt %d/%d): %s. Retrying in %.2fs",
                            attempt + 1,
                            max_retries,
                            e,
                            delay,
                        )
                        await asyncio.sleep(delay)
                    else:
                        logger.error(
                            "Redis operation failed after %d attempts: %s",
                            max_retries,
                            e,
                        )
            # If we get here, all retries failed
            raise last_exception  # type: ignore[misc]

        return wrapper

    return decorator


class RedisBlobStore:
    """Async Redis blob store with connection pooling.

    Unlike a cache, a failed read or write is not swallowed: after the retries
    are exhausted the ``RedisError`` propagates so callers never mistake an
    outage for an empty pantry.
    """

    def __init__(self, url: str) -> None:
        """Initialize Redis blob store.

        Args:
            url: Redis connection URL
        """
        self._url = url
        self._pool = ConnectionPool.from_url(
            url,
            decode_responses=True,
            max_connections=Constants.REDIS_MAX_CONNECTIONS,
        )
        self._client: Redis = Redis(connection_pool=self._pool)

        # Health tracking
        self._last_successful_operation: datetime | None = None
        self._failure_count = 0
        self._total_operations = 0

        logger.info("Redis blob store initialized with URL: %s", url)

    def get_health_status(self) -> dict[str, Any]:
        """Get Redis health status.

        Returns:
            Dict with health status including last successful operation,
            failure count, and total operations
        """
        return {
            "backend": "redis",
            "last_successful_operation": self._last_successful_operation.isoformat()
            if self._last_successful_operation
            else None,
            "failure_count": self._failure_count,
            "total_operations": self._total_operations,
        }

    def _record_success(self) -> None:
        """Record successful Redis operation."""
        self._last_successful_operation = datetime.now(UTC)
        self._total_operations += 1

    def _record_failure(self) -> None:
        """Record failed Redis operation."""
        self._failure_count += 1
        self._total_operations += 1

    async def get(self, key: str) -> str | None:
        """Get a blob from Redis.

        Args:
            key: Blob key

        Returns:
            Stored value or None if the key is missing

        Raises:
            RedisError: If Redis stays unreachable after retries
        """

        @with_retry(max_retries=3, base_delay=0.1)
        async def _get_operation() -> str | None:
            return await self._client.get(key)

        try:
            value = await _get_operation()
        except RedisError:
            self._record_failure()
            raise

        self._record_success()
        return value

    async def set(self, key: str, value: str) -> None:
        """Store a blob in Redis without expiry.

        Args:
            key: Blob key
            value: Serialized value

        Raises:
            RedisError: If Redis stays unreachable after retries
        """

        @with_retry(max_retries=3, base_delay=0.1)
        async def _set_operation() -> None:
            await self._client.set(key, value)

        try:
            await _set_operation()
        except RedisError:
            self._record_failure()
            raise

        self._record_success()
        logger.debug("Stored key: %s (%d bytes)", key, len(value))

    async def delete(self, key: str) -> None:
        """Delete a blob from Redis.

        Args:
            key: Blob key

        Raises:
            RedisError: If Redis stays unreachable after retries
        """

        @with_retry(max_retries=3, base_delay=0.1)
        async def _delete_operation() -> None:
            await self._client.delete(key)

        try:
            await _delete_operation()
        except RedisError:
            self._record_failure()
            raise

        self._record_success()
        logger.debug("Deleted key: %s", key)

    async def ping(self) -> bool:
        """Ping Redis to check connection.

        Returns:
            True if Redis is responsive, False otherwise
        """
        try:
            result = await self._client.ping()  # type: ignore[misc]
            return bool(result)
        except RedisError as e:
            logger.warning("Redis PING failed: %s", e)
            return False

    async def close(self) -> None:
        """Close Redis connection."""
        await self._client.aclose()
        logger.info("Redis client closed")
