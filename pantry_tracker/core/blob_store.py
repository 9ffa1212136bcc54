"""Key-value blob store primitives backing persisted state."""

import logging
import threading
import time
from typing import Any, Protocol

from pantry_tracker.core.config import Settings, settings


logger = logging.getLogger(__name__)


class BlobStore(Protocol):
    """Minimal async key-value store holding serialized blobs.

    A single ``set`` is assumed atomic; nothing above it recovers partial writes.
    """

    async def get(self, key: str) -> str | None: ...

    async def set(self, key: str, value: str) -> None: ...

    async def delete(self, key: str) -> None: ...

    async def close(self) -> None: ...


class InMemoryBlobStore:
    """Thread-safe in-memory blob store."""

    def __init__(self) -> None:
        """Initialize in-memory blob store."""
        self._data: dict[str, str] = {}
        self._lock = threading.Lock()

        # Health tracking
        self._last_successful_operation: float | None = None
        self._total_operations = 0

    def get_health_status(self) -> dict[str, Any]:
        """Get store health status.

        Returns:
            Dict with health status including last successful operation and total operations
        """
        return {
            "backend": "memory",
            "connected": True,
            "last_successful_operation": self._last_successful_operation,
            "total_operations": self._total_operations,
            "entries": len(self._data),
        }

    def _record_success(self) -> None:
        """Record successful store operation."""
        self._last_successful_operation = time.time()
        self._total_operations += 1

    async def get(self, key: str) -> str | None:
        """Get a blob.

        Args:
            key: Blob key

        Returns:
            Stored value or None if the key is missing
        """
        with self._lock:
            value = self._data.get(key)
            self._record_success()
            return value

    async def set(self, key: str, value: str) -> None:
        """Store a blob, replacing any previous value.

        Args:
            key: Blob key
            value: Serialized value
        """
        with self._lock:
            self._data[key] = value
            self._record_success()
            logger.debug("Stored key: %s (%d bytes)", key, len(value))

    async def delete(self, key: str) -> None:
        """Delete a blob. Missing keys are ignored.

        Args:
            key: Blob key
        """
        with self._lock:
            self._data.pop(key, None)
            self._record_success()
            logger.debug("Deleted key: %s", key)

    async def close(self) -> None:
        """Close store (no-op for in-memory store)."""
        logger.info("In-memory blob store closed")


def create_blob_store(config: Settings | None = None) -> BlobStore:
    """Create the blob store configured for this process.

    Uses Redis when ``REDIS_URL`` is set, otherwise an in-memory store.
    """
    config = config or settings
    if config.redis_url:
        from pantry_tracker.core.redis_client import RedisBlobStore

        return RedisBlobStore(config.redis_url)

    logger.info("Redis URL not configured. Using in-memory blob store.")
    return InMemoryBlobStore()
