"""Text formatting used by the runner screens."""

from __future__ import annotations

import math

from backend.utils import compact_number, to_number

PLACEHOLDER = "—"


def format_clock(seconds: int) -> str:
    """Return ``seconds`` as ``m:ss``."""
    minutes, secs = divmod(max(0, int(seconds)), 60)
    return f"{minutes}:{secs:02d}"


def format_duration(seconds: int) -> str:
    minutes, secs = divmod(max(0, int(seconds)), 60)
    return f"{minutes}m {secs}s"


def format_value(value, suffix: str = "") -> str:
    """Return ``value`` for display, or a dash when it is not positive."""
    number = to_number(value)
    if not math.isfinite(number) or number <= 0:
        return PLACEHOLDER
    return f"{compact_number(number)}{suffix}"
