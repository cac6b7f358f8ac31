"""Exceptions raised by the lock manager."""

from __future__ import annotations


class LockError(Exception):
    """Base class for lock errors."""


class LockValidationError(LockError, ValueError):
    """An argument was missing or had the wrong type."""


class LockNotAcquiredError(LockError):
    """Raised by ``LockManager.hold`` when the lock stayed unavailable."""

    def __init__(self, resource_name: str) -> None:
        super().__init__(f"Lock on '{resource_name}' could not be acquired")
        self.resource_name = resource_name
