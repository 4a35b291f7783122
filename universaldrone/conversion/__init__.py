"""
Unit Conversion Module.

This module provides conversion between the supported length and speed units.
"""

from universaldrone.conversion.units import (
    convert_length,
    convert_position,
    convert_speed,
    parse_length_unit,
    parse_speed_unit,
)

__all__ = [
    "convert_length",
    "convert_position",
    "convert_speed",
    "parse_length_unit",
    "parse_speed_unit",
]
