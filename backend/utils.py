"""Utility helpers used across backend modules."""

from __future__ import annotations

import math


def to_number(value) -> float:
    """Return ``value`` as a float, or ``nan`` when it is not numeric.

    Strings are stripped first and an empty string counts as ``0`` so text
    typed on the keypad behaves the same as a cleared field.
    """

    if value is None or isinstance(value, bool):
        return math.nan
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0.0
        try:
            return float(text)
        except ValueError:
            return math.nan
    return math.nan


def positive_or_none(value) -> float | None:
    """Return ``value`` as a number if it is finite and positive."""

    number = to_number(value)
    if not math.isfinite(number) or number <= 0:
        return None
    return number


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up (``2.5 -> 3``)."""

    return int(math.floor(value + 0.5))


def compact_number(value: float):
    """Return ``value`` as an ``int`` when it has no fractional part."""

    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value
