"""Lenient coercion of request and diagram values.

Task ids and focus seconds arrive as ints or numeric strings, imported node
positions as whatever the canvas wrote, and flags as JSON booleans or
query-string words.
"""

from __future__ import annotations

import math
from typing import Any

TRUE_FLAGS = frozenset({"1", "true", "yes", "on"})
FALSE_FLAGS = frozenset({"0", "false", "no", "off"})


def safe_int(value: Any, default: int = 0) -> int:
    """``"42"``, ``42.0`` and ``True`` become ints; anything else gives ``default``."""
    if isinstance(value, str):
        value = value.strip()
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return default


def clamped_int(value: Any, *, default: int, minimum: int, maximum: int) -> int:
    return max(minimum, min(maximum, safe_int(value, default)))


def finite_float(value: Any, default: float = 0.0) -> float:
    """Coordinate value; NaN, infinities and non-numbers give ``default``."""
    if isinstance(value, str):
        value = value.strip()
    try:
        result = float(value)
    except (TypeError, ValueError, OverflowError):
        return default
    return result if math.isfinite(result) else default


def as_bool(value: Any, default: bool = False) -> bool:
    """Interpret JSON/query-string flags such as ``true``, ``"1"`` or ``"no"``."""
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    lowered = str(value).strip().lower()
    if lowered in TRUE_FLAGS:
        return True
    if lowered in FALSE_FLAGS:
        return False
    return default
