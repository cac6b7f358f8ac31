from __future__ import annotations

import pytest

from distlock.core.locks_memory import MemoryLockStore
from distlock.core.manager import LockManager
from distlock.core.models import LockOptions


class ManualClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms / 1000.0


@pytest.fixture
def store() -> MemoryLockStore:
    return MemoryLockStore()


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def make_manager(store):
    def _make(**options) -> LockManager:
        options.setdefault("key_prefix", "__test_lock:")
        return LockManager(store, LockOptions(**options))

    return _make
