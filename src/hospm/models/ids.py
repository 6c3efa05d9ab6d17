"""Identifier generation for project entities."""

from __future__ import annotations

import time
import uuid


def generate_id(prefix: str) -> str:
    """Return ``<prefix>-<epoch millis>-<9 char random suffix>``.

    Unique enough for a single user's project; collisions are not checked.
    """
    millis = time.time_ns() // 1_000_000
    return f"{prefix}-{millis}-{uuid.uuid4().hex[:9]}"
