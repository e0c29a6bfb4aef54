"""Identifier helpers."""

from __future__ import annotations

import uuid


def new_id(prefix: str | None = None) -> str:
    """Random hex id, e.g. ``chk_3f2a...``; prefixes tell record kinds apart in logs."""
    base = uuid.uuid4().hex
    return f"{prefix}_{base}" if prefix else base
