"""Data models shared across the lock manager."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from distlock.core.manager import LockManager


class LockOptions(BaseModel):
    """Manager options; fixed for the lifetime of a manager."""

    model_config = ConfigDict(frozen=True)

    ttl: int = Field(default=30000, gt=0)  # milliseconds
    retry_delay: int = Field(default=50, ge=0)  # milliseconds
    max_retries: int = Field(default=-1, ge=-1)  # -1 retries forever
    key_prefix: str = "lock:"

    def key_for(self, resource_name: str) -> str:
        return f"{self.key_prefix}{resource_name}"

    @property
    def unlimited_retries(self) -> bool:
        return self.max_retries == -1


@dataclass(slots=True, eq=False)
class Lock:
    """Handle to an acquired lock.

    The token is the only credential the store checks, so any handle carrying
    the current token can release or extend the lock.
    """

    resource: str
    key: str
    token: str
    owner: Optional[str] = None
    acquired_on_attempt: Optional[int] = None
    acquire_delay: Optional[int] = None
    _manager: Optional["LockManager"] = field(default=None, repr=False)

    async def release(self) -> bool:
        """Release the lock. Returns False if it was no longer held with this token."""
        return await self._bound_manager().release_lock(self.resource, self.token)

    async def extend(self, duration_ms: float) -> bool:
        """Reset the lock's TTL to ``duration_ms``."""
        return await self._bound_manager().extend_lock(self.resource, self.token, duration_ms)

    def _bound_manager(self) -> "LockManager":
        if self._manager is None:
            raise RuntimeError("Lock handle is not bound to a LockManager")
        return self._manager

    def to_dict(self) -> dict:
        return {
            "resource": self.resource,
            "key": self.key,
            "token": self.token,
            "owner": self.owner,
            "acquired_on_attempt": self.acquired_on_attempt,
            "acquire_delay": self.acquire_delay,
        }
