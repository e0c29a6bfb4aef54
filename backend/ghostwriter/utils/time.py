"""Time helpers."""

from __future__ import annotations

import time


def now_ms() -> int:
    """Current wall-clock time as integer milliseconds, the unit stored in SQLite."""
    return int(time.time() * 1000)
