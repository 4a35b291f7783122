"""
Unit Definitions.

This module provides the closed enumerations of length and speed units.
Each member carries its symbol, the names it may be spelled as, and a
static factor to the SI base unit of its dimension (metre, metre/second).
"""

from __future__ import annotations

from enum import Enum


class _Unit(Enum):
    """Shared behaviour of unit enumerations."""

    def __init__(self, symbol: str, factor: float, aliases: tuple[str, ...]) -> None:
        self.symbol = symbol
        self.factor = factor
        self.aliases = aliases

    def __str__(self) -> str:
        return self.symbol

    @classmethod
    def lookup(cls, token: str) -> "_Unit | None":
        """
        Find the member named by ``token``.

        Matching ignores case and surrounding whitespace and accepts the
        symbol, the member name, and any alias.

        Returns:
            The matching member, or None if no member matches.
        """
        key = token.strip().lower()
        for member in cls:
            if key == member.symbol.lower() or key == member.name.lower():
                return member
            if key in member.aliases:
                return member
        return None


class LengthUnit(_Unit):
    """Length units; factors are metres per unit."""

    METER = ("m", 1.0, ("meter", "meters", "metre", "metres"))
    CENTIMETER = ("cm", 0.01, ("centimeter", "centimeters", "centimetre", "centimetres"))
    MILLIMETER = ("mm", 0.001, ("millimeter", "millimeters", "millimetre", "millimetres"))
    INCH = ("in", 0.0254, ("inch", "inches"))
    FOOT = ("ft", 0.3048, ("foot", "feet"))


class SpeedUnit(_Unit):
    """Speed units; factors are metres/second per unit."""

    METERS_PER_SECOND = ("m/s", 1.0, ("mps", "meter/s", "meters/s", "metres/s"))
    CENTIMETERS_PER_SECOND = ("cm/s", 0.01, ("cmps", "centimeters/s", "centimetres/s"))
    KILOMETERS_PER_HOUR = ("km/h", 1000.0 / 3600.0, ("kmh", "kph"))
    INCHES_PER_SECOND = ("in/s", 0.0254, ("ips", "inches/s"))
    FEET_PER_SECOND = ("ft/s", 0.3048, ("fps", "feet/s"))
    MILES_PER_HOUR = ("mph", 1609.344 / 3600.0, ("miles/h",))
