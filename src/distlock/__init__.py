"""Distributed mutual-exclusion locks backed by a shared key-value store."""

from distlock.core import (
    Lock,
    LockError,
    LockManager,
    LockNotAcquiredError,
    LockOptions,
    LockValidationError,
)

__all__ = [
    "__version__",
    "Lock",
    "LockError",
    "LockManager",
    "LockNotAcquiredError",
    "LockOptions",
    "LockValidationError",
]

__version__ = "0.1.0"
