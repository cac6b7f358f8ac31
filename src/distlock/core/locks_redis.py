"""Redis-backed lock store using Lua scripts for check-and-set."""

from __future__ import annotations

import os
from typing import Any, Optional

from redis.asyncio import Redis

from .locks import LockRecord, LockStore

# KEYS[1] - lock key
# ARGV[1] - token, ARGV[2] - owner label, ARGV[3] - ttl in milliseconds
# returns: 1 if created, 0 if the key already exists
CREATE_LOCK_SCRIPT = """
if redis.call('exists', KEYS[1]) == 1 then
    return 0
end
redis.call('hset', KEYS[1], 'id', ARGV[1], 'owner', ARGV[2])
redis.call('pexpire', KEYS[1], ARGV[3])
return 1
"""

# KEYS[1] - lock key
# ARGV[1] - token
# returns: 1 if deleted, otherwise 0
DELETE_LOCK_SCRIPT = """
if redis.call('hget', KEYS[1], 'id') == ARGV[1] then
    return redis.call('del', KEYS[1])
else
    return 0
end
"""

# KEYS[1] - lock key
# ARGV[1] - token, ARGV[2] - new ttl in milliseconds
# returns: 1 if the ttl was reset, otherwise 0
EXTEND_LOCK_SCRIPT = """
if redis.call('hget', KEYS[1], 'id') == ARGV[1] then
    return redis.call('pexpire', KEYS[1], ARGV[2])
else
    return 0
end
"""


def _as_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return str(value)


class RedisLockStore(LockStore):
    """Lock records stored as ``{id, owner}`` hashes with a PEXPIRE ttl."""

    def __init__(self, redis: Redis, *, owns_client: bool = False) -> None:
        self._redis = redis
        self._owns_client = owns_client
        self._create = redis.register_script(CREATE_LOCK_SCRIPT)
        self._delete = redis.register_script(DELETE_LOCK_SCRIPT)
        self._extend = redis.register_script(EXTEND_LOCK_SCRIPT)

    @classmethod
    def from_url(cls, url: Optional[str] = None) -> "RedisLockStore":
        client = Redis.from_url(url or os.getenv("REDIS_URL", "redis://localhost:6379/0"), decode_responses=True)
        return cls(client, owns_client=True)

    @property
    def redis(self) -> Redis:
        return self._redis

    async def create_lock(self, key: str, token: str, owner: str, ttl_ms: int) -> bool:
        result = await self._create(keys=[key], args=[token, owner, ttl_ms])
        return int(result) == 1

    async def delete_lock(self, key: str, token: str) -> bool:
        result = await self._delete(keys=[key], args=[token])
        return int(result) == 1

    async def extend_lock(self, key: str, token: str, ttl_ms: int) -> bool:
        result = await self._extend(keys=[key], args=[token, ttl_ms])
        return int(result) == 1

    async def read_lock(self, key: str) -> Optional[LockRecord]:
        token, owner = await self._redis.hmget(key, "id", "owner")
        if token is None:
            return None
        return LockRecord(token=_as_str(token), owner=_as_str(owner) or None)

    async def close(self) -> None:
        if self._owns_client:
            await self._redis.aclose()
