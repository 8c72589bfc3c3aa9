"""Key-value store interface and backends."""

import json
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from typing import Any

import redis.asyncio as redis
import structlog
from redis.exceptions import RedisError

from app.config import settings
from app.core.exceptions import StorageException

logger = structlog.get_logger(__name__)


class KeyValueStore(ABC):
    """Flat async key-value namespace holding JSON values."""

    @abstractmethod
    async def get_json(self, key: str) -> Any | None:
        """Get a value and deserialize it, or None when the key is absent."""

    @abstractmethod
    async def set_json(self, key: str, value: Any) -> None:
        """Serialize and store a value, overwriting any previous one."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Delete a key. Missing keys are ignored."""

    @abstractmethod
    async def exists(self, key: str) -> bool:
        """Check if a key is present."""

    @abstractmethod
    def iterate(self, prefix: str) -> AsyncIterator[tuple[str, Any]]:
        """Yield (key, value) for every key starting with prefix."""

    async def ping(self) -> bool:
        """Check that the backend answers."""
        return True

    async def close(self) -> None:
        """Release backend resources."""


class InMemoryKeyValueStore(KeyValueStore):
    """Process-local store. Iterates in insertion order."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    async def get_json(self, key: str) -> Any | None:
        raw = self._data.get(key)
        return json.loads(raw) if raw is not None else None

    async def set_json(self, key: str, value: Any) -> None:
        self._data[key] = json.dumps(value, default=str)

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)

    async def exists(self, key: str) -> bool:
        return key in self._data

    async def iterate(self, prefix: str) -> AsyncIterator[tuple[str, Any]]:
        # Snapshot so callers may write while iterating
        for key, raw in list(self._data.items()):
            if key.startswith(prefix):
                yield key, json.loads(raw)


class RedisKeyValueStore(KeyValueStore):
    """Redis-backed store. Keys are written as-is, values as JSON strings."""

    def __init__(self, redis_client: redis.Redis):
        """Initialize store with Redis client."""
        self.redis = redis_client

    async def get_json(self, key: str) -> Any | None:
        try:
            value = await self.redis.get(key)
        except RedisError as e:
            logger.error("kv_get_failed", key=key, error=str(e))
            raise StorageException(f"Failed to read {key}") from e
        if value is None:
            return None
        return json.loads(value)

    async def set_json(self, key: str, value: Any) -> None:
        try:
            await self.redis.set(key, json.dumps(value, default=str))
        except RedisError as e:
            logger.error("kv_set_failed", key=key, error=str(e))
            raise StorageException(f"Failed to write {key}") from e

    async def delete(self, key: str) -> None:
        try:
            await self.redis.delete(key)
        except RedisError as e:
            logger.error("kv_delete_failed", key=key, error=str(e))
            raise StorageException(f"Failed to delete {key}") from e

    async def exists(self, key: str) -> bool:
        try:
            return bool(await self.redis.exists(key))
        except RedisError as e:
            logger.error("kv_exists_failed", key=key, error=str(e))
            raise StorageException(f"Failed to check {key}") from e

    async def iterate(self, prefix: str) -> AsyncIterator[tuple[str, Any]]:
        """
        Scan keys matching prefix.

        Redis SCAN order is unspecified; callers must not rely on it.
        """
        try:
            async for key in self.redis.scan_iter(match=f"{prefix}*"):
                value = await self.redis.get(key)
                # Key may have been deleted between SCAN and GET
                if value is not None:
                    yield key, json.loads(value)
        except RedisError as e:
            logger.error("kv_scan_failed", prefix=prefix, error=str(e))
            raise StorageException(f"Failed to scan {prefix}") from e

    async def ping(self) -> bool:
        try:
            await self.redis.ping()
            return True
        except RedisError:
            return False

    async def close(self) -> None:
        await self.redis.aclose()


# Global store instance
_kv_store: KeyValueStore | None = None


def get_redis_client() -> redis.Redis:
    """
    Create an asyncio Redis client from settings.

    Returns:
        Redis client instance
    """
    return redis.Redis(
        host=settings.redis_host,
        port=settings.redis_port,
        username=settings.redis_username,
        password=settings.redis_password or None,
        db=settings.redis_db,
        decode_responses=True,
        socket_connect_timeout=5,
        socket_keepalive=True,
        health_check_interval=30,
    )


def get_kv_store() -> KeyValueStore:
    """
    Get or create the configured key-value store.

    Returns:
        Store selected by STORAGE_BACKEND
    """
    global _kv_store

    if _kv_store is None:
        if settings.storage_backend.lower() == "memory":
            _kv_store = InMemoryKeyValueStore()
        else:
            _kv_store = RedisKeyValueStore(get_redis_client())

    return _kv_store


async def check_storage_connection() -> bool:
    """
    Check if the key-value store is healthy.

    Returns:
        True if connection is healthy, False otherwise
    """
    try:
        return await get_kv_store().ping()
    except Exception:
        return False


async def close_kv_store() -> None:
    """Close the key-value store."""
    global _kv_store

    if _kv_store is not None:
        await _kv_store.close()
        _kv_store = None
