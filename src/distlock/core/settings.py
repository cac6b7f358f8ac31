"""Runtime settings loader."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Literal

import yaml
from pydantic import BaseModel, Field, ValidationError

from distlock.core.locks import LockStore
from distlock.core.locks_memory import MemoryLockStore
from distlock.core.locks_redis import RedisLockStore
from distlock.core.manager import LockManager
from distlock.core.models import LockOptions
from distlock.utils.env import get_int_env, get_str_env


class LockSettings(BaseModel):
    backend: Literal["redis", "memory"] = "redis"
    redis_url: str = "redis://localhost:6379/0"
    lock: LockOptions = Field(default_factory=LockOptions)

    @classmethod
    def from_file(cls, path: Path) -> "LockSettings":
        data = yaml.safe_load(path.read_text()) or {}
        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise ValueError(f"Invalid lock settings: {exc}") from exc

    @classmethod
    def from_env(cls) -> "LockSettings":
        data: Dict[str, Any] = {}
        backend = get_str_env("DISTLOCK_BACKEND")
        if backend:
            data["backend"] = backend.lower()
        redis_url = get_str_env("DISTLOCK_REDIS_URL", "REDIS_URL")
        if redis_url:
            data["redis_url"] = redis_url

        lock: Dict[str, Any] = {}
        for field_name, env_name in (
            ("ttl", "DISTLOCK_TTL"),
            ("retry_delay", "DISTLOCK_RETRY_DELAY"),
            ("max_retries", "DISTLOCK_MAX_RETRIES"),
        ):
            value = get_int_env(env_name)
            if value is not None:
                lock[field_name] = value
        key_prefix = get_str_env("DISTLOCK_KEY_PREFIX")
        if key_prefix is not None:
            lock["key_prefix"] = key_prefix
        if lock:
            data["lock"] = lock

        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise ValueError(f"Invalid lock settings: {exc}") from exc

    def create_store(self) -> LockStore:
        if self.backend == "memory":
            return MemoryLockStore()
        return RedisLockStore.from_url(self.redis_url)


def create_lock_manager(settings: LockSettings) -> LockManager:
    """Build a manager wired to the store selected by ``settings.backend``."""
    return LockManager(settings.create_store(), settings.lock)
