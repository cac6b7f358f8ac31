"""Lock token generation."""

from __future__ import annotations

import uuid
from typing import Callable

TokenFactory = Callable[[], str]


def new_token() -> str:
    """Return a fresh, collision-resistant lock token."""
    return uuid.uuid4().hex
