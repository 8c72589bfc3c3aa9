"""Tests for the key-value store backends."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from app.core.exceptions import StorageException
from app.core.kv_store import InMemoryKeyValueStore, RedisKeyValueStore


async def _keys(*keys: str):
    for key in keys:
        yield key


@pytest.mark.asyncio
async def test_in_memory_store_basics():
    """Values round-trip through JSON and deletes are idempotent."""
    store = InMemoryKeyValueStore()

    assert await store.get_json("missing") is None
    assert await store.exists("missing") is False

    await store.set_json("user_profile_a@x.com", {"name": "Ada"})
    assert await store.get_json("user_profile_a@x.com") == {"name": "Ada"}
    assert await store.exists("user_profile_a@x.com") is True

    await store.delete("user_profile_a@x.com")
    await store.delete("user_profile_a@x.com")
    assert await store.get_json("user_profile_a@x.com") is None


@pytest.mark.asyncio
async def test_in_memory_store_returns_copies():
    """Mutating a read value does not change the stored one."""
    store = InMemoryKeyValueStore()
    await store.set_json("k", [1, 2])

    value = await store.get_json("k")
    value.append(3)

    assert await store.get_json("k") == [1, 2]


@pytest.mark.asyncio
async def test_in_memory_iterate_by_prefix_in_insertion_order():
    """Iteration filters by prefix and keeps insertion order."""
    store = InMemoryKeyValueStore()
    await store.set_json("phone_map_2", "b@x.com")
    await store.set_json("user_profile_a@x.com", {})
    await store.set_json("phone_map_1", "a@x.com")

    items = [item async for item in store.iterate("phone_map_")]

    assert items == [("phone_map_2", "b@x.com"), ("phone_map_1", "a@x.com")]


@pytest.mark.asyncio
async def test_redis_store_get_json():
    """Stored strings are decoded as JSON."""
    mock_redis = MagicMock()
    mock_redis.get = AsyncMock(return_value=None)
    store = RedisKeyValueStore(redis_client=mock_redis)

    assert await store.get_json("user_auth_a@x.com") is None
    mock_redis.get.assert_awaited_once_with("user_auth_a@x.com")

    mock_redis.get = AsyncMock(return_value='{"password": "pw"}')
    assert await store.get_json("user_auth_a@x.com") == {"password": "pw"}


@pytest.mark.asyncio
async def test_redis_store_set_json():
    """Values are written as JSON strings under the raw key."""
    mock_redis = MagicMock()
    mock_redis.set = AsyncMock()
    store = RedisKeyValueStore(redis_client=mock_redis)

    await store.set_json("welcome_email_sent_a@x.com", True)

    mock_redis.set.assert_awaited_once_with("welcome_email_sent_a@x.com", "true")


@pytest.mark.asyncio
async def test_redis_store_wraps_errors():
    """Redis failures surface as StorageException."""
    mock_redis = MagicMock()
    mock_redis.get = AsyncMock(side_effect=RedisConnectionError("down"))
    mock_redis.set = AsyncMock(side_effect=RedisConnectionError("down"))
    store = RedisKeyValueStore(redis_client=mock_redis)

    with pytest.raises(StorageException):
        await store.get_json("k")
    with pytest.raises(StorageException):
        await store.set_json("k", 1)


@pytest.mark.asyncio
async def test_redis_store_iterate():
    """Iteration scans by prefix and skips keys deleted mid-scan."""
    mock_redis = MagicMock()
    mock_redis.scan_iter = MagicMock(return_value=_keys("phone_map_1", "phone_map_2"))
    mock_redis.get = AsyncMock(side_effect=['"a@x.com"', None])
    store = RedisKeyValueStore(redis_client=mock_redis)

    items = [item async for item in store.iterate("phone_map_")]

    mock_redis.scan_iter.assert_called_once_with(match="phone_map_*")
    assert items == [("phone_map_1", "a@x.com")]


@pytest.mark.asyncio
async def test_redis_store_ping():
    """Ping reports connection failures as False."""
    mock_redis = MagicMock()
    mock_redis.ping = AsyncMock(return_value=True)
    store = RedisKeyValueStore(redis_client=mock_redis)
    assert await store.ping() is True

    mock_redis.ping = AsyncMock(side_effect=RedisConnectionError("down"))
    assert await store.ping() is False
