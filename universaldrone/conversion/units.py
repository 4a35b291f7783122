"""
Unit Conversion.

This module provides pure conversion functions between length units and
between speed units. Every function is total over the enumerated units;
only unparseable tokens fail, with :py:class:`UnknownUnit`.
"""

from __future__ import annotations

from universaldrone.core.exceptions import UnknownUnit
from universaldrone.models.position import Position
from universaldrone.models.units import LengthUnit, SpeedUnit


def parse_length_unit(unit: LengthUnit | str) -> LengthUnit:
    """
    Resolve a length unit token.

    Args:
        unit: A LengthUnit member, or a token such as "m", "cm", "inches"

    Returns:
        The matching LengthUnit

    Raises:
        UnknownUnit: If the token names no length unit
    """
    if isinstance(unit, LengthUnit):
        return unit
    if isinstance(unit, str):
        found = LengthUnit.lookup(unit)
        if found is not None:
            return found
    raise UnknownUnit(unit, "length unit")


def parse_speed_unit(unit: SpeedUnit | str) -> SpeedUnit:
    """
    Resolve a speed unit token.

    Args:
        unit: A SpeedUnit member, or a token such as "m/s", "cm/s", "mph"

    Returns:
        The matching SpeedUnit

    Raises:
        UnknownUnit: If the token names no speed unit
    """
    if isinstance(unit, SpeedUnit):
        return unit
    if isinstance(unit, str):
        found = SpeedUnit.lookup(unit)
        if found is not None:
            return found
    raise UnknownUnit(unit, "speed unit")


def convert_length(
    value: float,
    from_unit: LengthUnit | str,
    to_unit: LengthUnit | str,
) -> float:
    """
    Convert a length between units.

    Example:
        >>> convert_length(1.5, "m", "cm")
        150.0
    """
    source = parse_length_unit(from_unit)
    target = parse_length_unit(to_unit)
    if source is target:
        return float(value)
    return value * source.factor / target.factor


def convert_speed(
    value: float,
    from_unit: SpeedUnit | str,
    to_unit: SpeedUnit | str,
) -> float:
    """Convert a speed between units."""
    source = parse_speed_unit(from_unit)
    target = parse_speed_unit(to_unit)
    if source is target:
        return float(value)
    return value * source.factor / target.factor


def convert_position(position: Position, to_unit: LengthUnit | str) -> Position:
    """Express a position in another length unit."""
    return position.to(parse_length_unit(to_unit))
