"""Identifier and clock helpers for client-visible records."""
from __future__ import annotations

import time
from uuid import uuid4


def new_id() -> str:
    """Return a collision-resistant identifier independent of wall-clock ordering."""
    return str(uuid4())


def now_ms() -> int:
    return int(time.time() * 1000)
