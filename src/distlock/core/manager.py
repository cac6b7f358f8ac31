"""Lock manager: acquisition with retry, and token-scoped release/extend."""

from __future__ import annotations

import asyncio
import math
from contextlib import asynccontextmanager
from typing import AsyncIterator, Literal, Optional, Union

from distlock.core.errors import LockNotAcquiredError, LockValidationError
from distlock.core.locks import LockStore
from distlock.core.models import Lock, LockOptions
from distlock.core.tokens import TokenFactory, new_token
from distlock.utils.logging import get_logger


def _require_name(value: object, name: str) -> str:
    if not value or not isinstance(value, str):
        raise LockValidationError(f"{name} is required and must be a string")
    return value


def _require_duration(value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not value > 0:
        raise LockValidationError("duration_ms is required and must be a positive number")
    if math.isinf(value):
        raise LockValidationError("duration_ms must be finite")
    return int(math.ceil(value))


class LockManager:
    """Acquire, inspect, release and extend locks held in a shared store.

    All cross-process exclusion comes from the store's atomic operations; the
    manager keeps no state of its own beyond its options.
    """

    def __init__(
        self,
        store: LockStore,
        options: Optional[LockOptions] = None,
        *,
        token_factory: TokenFactory = new_token,
    ) -> None:
        self._store = store
        self._options = options or LockOptions()
        self._new_token = token_factory
        self.logger = get_logger("LockManager")

    @property
    def options(self) -> LockOptions:
        return self._options

    @property
    def store(self) -> LockStore:
        return self._store

    async def acquire(
        self,
        resource_name: str,
        owner: Optional[str] = None,
        *,
        cancel: Optional[asyncio.Event] = None,
    ) -> Union[Lock, Literal[False]]:
        """Acquire the lock on ``resource_name``.

        Retries every ``retry_delay`` ms until the lock is obtained or
        ``max_retries`` is exhausted. Returns False when the lock could not be
        acquired (including when ``cancel`` is set); store errors are raised
        immediately.
        """
        _require_name(resource_name, "resource_name")
        if owner is not None and not isinstance(owner, str):
            raise LockValidationError("owner must be a string")

        key = self._options.key_for(resource_name)
        attempt = 0
        while True:
            attempt += 1
            token = self._new_token()
            try:
                created = await self._store.create_lock(key, token, owner or "", self._options.ttl)
            except Exception:
                self.logger.warning("Store error acquiring '%s' on attempt %d", resource_name, attempt)
                raise

            if created:
                self.logger.debug("Acquired '%s' on attempt %d", resource_name, attempt)
                return Lock(
                    resource=resource_name,
                    key=key,
                    token=token,
                    owner=owner or None,
                    acquired_on_attempt=attempt,
                    acquire_delay=(attempt - 1) * self._options.retry_delay,
                    _manager=self,
                )

            if not self._options.unlimited_retries and attempt > self._options.max_retries:
                self.logger.debug("Gave up on '%s' after %d attempts", resource_name, attempt)
                return False

            if not await self._wait_before_retry(cancel):
                self.logger.debug("Acquisition of '%s' cancelled after %d attempts", resource_name, attempt)
                return False

    async def _wait_before_retry(self, cancel: Optional[asyncio.Event]) -> bool:
        """Sleep ``retry_delay``; returns False if ``cancel`` was set instead."""
        delay = self._options.retry_delay / 1000.0
        if cancel is None:
            await asyncio.sleep(delay)
            return True
        if cancel.is_set():
            return False
        try:
            await asyncio.wait_for(cancel.wait(), timeout=delay)
        except asyncio.TimeoutError:
            return True
        return False

    async def get_acquired_lock(self, resource_name: str) -> Optional[Lock]:
        """Return a handle for the current holder of ``resource_name``, if any.

        This is a point-in-time read; the lock may be released or expire
        immediately afterwards.
        """
        _require_name(resource_name, "resource_name")
        key = self._options.key_for(resource_name)
        try:
            record = await self._store.read_lock(key)
        except Exception:
            self.logger.warning("Store error reading '%s'", resource_name)
            raise
        if record is None:
            return None
        return Lock(resource=resource_name, key=key, token=record.token, owner=record.owner, _manager=self)

    async def release_lock(self, resource_name: str, token: str) -> bool:
        """Delete the lock if ``token`` is still the current one."""
        _require_name(resource_name, "resource_name")
        _require_name(token, "token")
        try:
            released = await self._store.delete_lock(self._options.key_for(resource_name), token)
        except Exception:
            self.logger.warning("Store error releasing '%s'", resource_name)
            raise
        if released:
            self.logger.debug("Released '%s'", resource_name)
        else:
            self.logger.debug("Release of '%s' ignored: token no longer holds the lock", resource_name)
        return released

    async def extend_lock(self, resource_name: str, token: str, duration_ms: float) -> bool:
        """Reset the lock's TTL to ``duration_ms`` if ``token`` is still current."""
        _require_name(resource_name, "resource_name")
        _require_name(token, "token")
        ttl_ms = _require_duration(duration_ms)
        try:
            extended = await self._store.extend_lock(self._options.key_for(resource_name), token, ttl_ms)
        except Exception:
            self.logger.warning("Store error extending '%s'", resource_name)
            raise
        if extended:
            self.logger.debug("Extended '%s' to %d ms", resource_name, ttl_ms)
        else:
            self.logger.debug("Extend of '%s' ignored: token no longer holds the lock", resource_name)
        return extended

    @asynccontextmanager
    async def hold(self, resource_name: str, owner: Optional[str] = None) -> AsyncIterator[Lock]:
        """Hold the lock for the duration of an ``async with`` block."""
        lock = await self.acquire(resource_name, owner)
        if lock is False:
            raise LockNotAcquiredError(resource_name)
        try:
            yield lock
        finally:
            if not await lock.release():
                self.logger.warning("Lock on '%s' expired before it was released", resource_name)

    async def close(self) -> None:
        await self._store.close()

    async def __aenter__(self) -> "LockManager":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()
