"""Abstract interface for the store backing distributed locks."""

from __future__ import annotations

import abc
from dataclasses import dataclass
from typing import Optional


@dataclass(slots=True, frozen=True)
class LockRecord:
    """Current holder of a lock key as seen by the store."""

    token: str
    owner: Optional[str] = None


class LockStore(abc.ABC):
    """Atomic operations a lock store must provide.

    Each of ``create_lock``, ``delete_lock`` and ``extend_lock`` must execute
    indivisibly with respect to every other operation on the same key. The
    store is also responsible for deleting records once their TTL elapses.
    """

    @abc.abstractmethod
    async def create_lock(self, key: str, token: str, owner: str, ttl_ms: int) -> bool:  # pragma: no cover - interface
        """Create the record if the key is absent. Returns True if created."""
        raise NotImplementedError

    @abc.abstractmethod
    async def delete_lock(self, key: str, token: str) -> bool:  # pragma: no cover - interface
        """Delete the record only if its token matches. Returns True if deleted."""
        raise NotImplementedError

    @abc.abstractmethod
    async def extend_lock(self, key: str, token: str, ttl_ms: int) -> bool:  # pragma: no cover - interface
        """Reset the record's TTL only if its token matches. Returns True if extended."""
        raise NotImplementedError

    @abc.abstractmethod
    async def read_lock(self, key: str) -> Optional[LockRecord]:  # pragma: no cover - interface
        """Return the current record, or None if the key is not held."""
        raise NotImplementedError

    async def close(self) -> None:
        """Release client resources held by the store."""
