"""In-process lock store for tests and single-process deployments."""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from .locks import LockRecord, LockStore


@dataclass(slots=True)
class _Entry:
    token: str
    owner: str
    expires_at: float


class MemoryLockStore(LockStore):
    """Dictionary-backed store; expired entries are treated as absent."""

    def __init__(self, *, clock: Callable[[], float] = time.monotonic) -> None:
        self._entries: Dict[str, _Entry] = {}
        self._lock = asyncio.Lock()
        self._clock = clock

    def _live_entry(self, key: str) -> Optional[_Entry]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() >= entry.expires_at:
            del self._entries[key]
            return None
        return entry

    def _purge_expired(self) -> None:
        now = self._clock()
        self._entries = {key: entry for key, entry in self._entries.items() if entry.expires_at > now}

    def _deadline(self, ttl_ms: int) -> float:
        return self._clock() + ttl_ms / 1000.0

    async def create_lock(self, key: str, token: str, owner: str, ttl_ms: int) -> bool:
        async with self._lock:
            self._purge_expired()
            if self._live_entry(key) is not None:
                return False
            self._entries[key] = _Entry(token=token, owner=owner, expires_at=self._deadline(ttl_ms))
            return True

    async def delete_lock(self, key: str, token: str) -> bool:
        async with self._lock:
            entry = self._live_entry(key)
            if entry is None or entry.token != token:
                return False
            del self._entries[key]
            return True

    async def extend_lock(self, key: str, token: str, ttl_ms: int) -> bool:
        async with self._lock:
            entry = self._live_entry(key)
            if entry is None or entry.token != token:
                return False
            entry.expires_at = self._deadline(ttl_ms)
            return True

    async def read_lock(self, key: str) -> Optional[LockRecord]:
        async with self._lock:
            entry = self._live_entry(key)
            if entry is None:
                return None
            return LockRecord(token=entry.token, owner=entry.owner or None)

    async def close(self) -> None:
        async with self._lock:
            self._entries.clear()
