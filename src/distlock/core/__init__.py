"""Core lock protocol primitives."""

from .errors import LockError, LockNotAcquiredError, LockValidationError
from .locks import LockRecord, LockStore
from .locks_memory import MemoryLockStore
from .locks_redis import RedisLockStore
from .manager import LockManager
from .models import Lock, LockOptions
from .settings import LockSettings, create_lock_manager
from .tokens import new_token

__all__ = [
    "LockError",
    "LockNotAcquiredError",
    "LockValidationError",
    "LockRecord",
    "LockStore",
    "MemoryLockStore",
    "RedisLockStore",
    "LockManager",
    "Lock",
    "LockOptions",
    "LockSettings",
    "create_lock_manager",
    "new_token",
]
