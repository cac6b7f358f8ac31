"""Environment helper utilities."""

from __future__ import annotations

import os
from typing import Optional


_FALSE_VALUES = {"0", "false", "no", "off"}


def get_bool_env(name: str, *, default: bool = False) -> bool:
    """Return True/False for an environment flag."""
    raw = os.getenv(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if not value:
        return default
    return value not in _FALSE_VALUES


def get_str_env(name: str, *fallbacks: str) -> Optional[str]:
    """Return the first non-empty value among ``name`` and ``fallbacks``."""
    for candidate in (name, *fallbacks):
        raw = os.getenv(candidate)
        if raw is not None and raw.strip():
            return raw.strip()
    return None


def get_int_env(name: str) -> Optional[int]:
    """Read an integer from the environment; unset or blank yields None."""
    raw = get_str_env(name)
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc
