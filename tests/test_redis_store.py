"""Tests for the Redis store and its Lua scripts.

Set DISTLOCK_TEST_REDIS_URL to point at a disposable database. When no server
responds the tests run against fakeredis, which executes the same scripts.
"""

from __future__ import annotations

import asyncio
import os

import fakeredis
import pytest
import pytest_asyncio
from redis.asyncio import Redis
from redis.exceptions import RedisError

from distlock.core.locks_redis import RedisLockStore
from distlock.core.manager import LockManager
from distlock.core.models import LockOptions

REDIS_URL = os.getenv("DISTLOCK_TEST_REDIS_URL", "redis://localhost:6379/15")
KEY_PREFIX = "__test_lock:"


@pytest_asyncio.fixture
async def redis_client():
    client = Redis.from_url(REDIS_URL, decode_responses=True)
    try:
        await client.ping()
    except (RedisError, OSError):
        await client.aclose()
        client = fakeredis.FakeAsyncRedis(decode_responses=True)
    async for key in client.scan_iter(match=f"{KEY_PREFIX}*"):
        await client.delete(key)
    yield client
    await client.aclose()


@pytest.fixture
def redis_store(redis_client) -> RedisLockStore:
    return RedisLockStore(redis_client)


def _manager(store: RedisLockStore, **options) -> LockManager:
    return LockManager(store, LockOptions(key_prefix=KEY_PREFIX, **options))


@pytest.mark.asyncio
async def test_acquire_writes_hash_with_ttl(redis_store, redis_client):
    lock = await _manager(redis_store).acquire("test-resource", "worker-1")

    assert lock is not False
    assert await redis_client.hgetall(f"{KEY_PREFIX}test-resource") == {"id": lock.token, "owner": "worker-1"}
    ttl = await redis_client.pttl(f"{KEY_PREFIX}test-resource")
    assert 0 < ttl <= 30000


@pytest.mark.asyncio
async def test_unavailable_lock_then_release(redis_store):
    manager = _manager(redis_store)
    lock = await manager.acquire("test-resource")

    assert await _manager(redis_store, max_retries=0).acquire("test-resource") is False
    assert await lock.release() is True
    assert await lock.release() is False

    again = await manager.acquire("test-resource")
    assert again is not False
    assert again.acquired_on_attempt == 1


@pytest.mark.asyncio
async def test_lock_expires_after_ttl(redis_store):
    assert await _manager(redis_store, ttl=100).acquire("test-resource") is not False
    await asyncio.sleep(0.2)
    assert await _manager(redis_store, max_retries=0).acquire("test-resource") is not False


@pytest.mark.asyncio
async def test_extension_holds_lock(redis_store):
    lock = await _manager(redis_store, ttl=100).acquire("test-resource")
    assert await lock.extend(1000) is True
    await asyncio.sleep(0.2)
    assert await _manager(redis_store, max_retries=0).acquire("test-resource") is False


@pytest.mark.asyncio
async def test_wrong_token_neither_releases_nor_extends(redis_store, redis_client):
    manager = _manager(redis_store, ttl=5000)
    lock = await manager.acquire("test-resource")

    assert await manager.release_lock("test-resource", "bogus") is False
    assert await manager.extend_lock("test-resource", "bogus", 60000) is False
    assert await redis_client.pttl(lock.key) <= 5000
    assert (await manager.get_acquired_lock("test-resource")).token == lock.token


@pytest.mark.asyncio
async def test_get_acquired_lock(redis_store):
    manager = _manager(redis_store)
    assert await manager.get_acquired_lock("test-resource") is None

    lock = await manager.acquire("test-resource")
    found = await manager.get_acquired_lock("test-resource")
    assert found.token == lock.token
    assert found.owner is None


@pytest.mark.asyncio
async def test_concurrent_acquire_single_winner(redis_store):
    managers = [_manager(redis_store, max_retries=0) for _ in range(10)]
    results = await asyncio.gather(*(m.acquire("contested") for m in managers))
    assert len([r for r in results if r is not False]) == 1


@pytest.mark.asyncio
async def test_store_from_url_closes_its_client():
    store = RedisLockStore.from_url(REDIS_URL)
    try:
        await store.redis.ping()
    except (RedisError, OSError):
        await store.close()
        pytest.skip(f"Redis not reachable at {REDIS_URL}")
    assert await store.read_lock(f"{KEY_PREFIX}nothing") is None
    await store.close()
