"""
Argument Validation.

This module provides the domain checks every contract operation applies to
its arguments before any unit conversion or hardware call.
"""

from __future__ import annotations

import math
from numbers import Real
from typing import Any

from universaldrone.core.exceptions import InvalidArgument


def require_number(name: str, value: Any) -> float:
    """
    Check that ``value`` is a finite real number.

    Returns:
        The value as a float

    Raises:
        InvalidArgument: For non-numbers, booleans, NaN and infinities
    """
    if isinstance(value, bool) or not isinstance(value, Real):
        raise InvalidArgument(f"{name} must be a number, got {value!r}")
    number = float(value)
    if not math.isfinite(number):
        raise InvalidArgument(f"{name} must be finite, got {value!r}")
    return number


def require_non_negative(name: str, value: Any) -> float:
    number = require_number(name, value)
    if number < 0:
        raise InvalidArgument(f"{name} must be >= 0, got {value!r}")
    return number


def require_positive(name: str, value: Any) -> float:
    number = require_number(name, value)
    if number <= 0:
        raise InvalidArgument(f"{name} must be > 0, got {value!r}")
    return number


def require_degrees(value: Any) -> float:
    """Check that a rotation lies in [0, 360]."""
    number = require_number("degrees", value)
    if not 0 <= number <= 360:
        raise InvalidArgument(f"degrees must be within [0, 360], got {value!r}")
    return number


def require_level(value: Any, level_range: tuple[int, int]) -> int:
    """
    Check that a speed level is an integer within the declared range.

    Args:
        value: The requested level
        level_range: Inclusive (low, high) range
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidArgument(f"speed level must be an integer, got {value!r}")
    low, high = level_range
    if not low <= value <= high:
        raise InvalidArgument(f"speed level must be within [{low}, {high}], got {value}")
    return value
