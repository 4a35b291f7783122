"""
Position Data Model.

This module provides the immutable Position value type.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from universaldrone.models.units import LengthUnit


@dataclass(frozen=True)
class Position:
    """
    A point in the drone's frame of reference.

    The unit is part of the value: ``Position(1, 0, 0, LengthUnit.METER)``
    and ``Position(100, 0, 0, LengthUnit.CENTIMETER)`` describe the same
    point but do not compare equal. Use :py:meth:`to` to compare across units.

    Example:
        >>> pos = Position(1.0, 0.0, 0.5)
        >>> print(pos.to(LengthUnit.CENTIMETER))
        Position(x=100.00, y=0.00, z=50.00, unit=cm)

    Attributes:
        x: Horizontal coordinate, left (-) to right (+).
        y: Horizontal coordinate, backward (-) to forward (+).
        z: Vertical coordinate (height).
        unit: Length unit of all three coordinates.
    """

    x: float
    y: float
    z: float
    unit: LengthUnit = LengthUnit.METER

    def __str__(self) -> str:
        return f"Position(x={self.x:.2f}, y={self.y:.2f}, z={self.z:.2f}, unit={self.unit})"

    def to(self, unit: LengthUnit) -> "Position":
        """Return the same point expressed in ``unit``."""
        if unit is self.unit:
            return self
        scale = self.unit.factor / unit.factor
        return Position(self.x * scale, self.y * scale, self.z * scale, unit)

    def offset(self, dx: float, dy: float, dz: float) -> "Position":
        """Return this position moved by a displacement in the same unit."""
        return Position(self.x + dx, self.y + dy, self.z + dz, self.unit)

    def distance_to(self, other: "Position") -> float:
        """
        Calculate the straight-line distance to another position.

        Returns:
            Distance in this position's unit.
        """
        other = other.to(self.unit)
        return math.sqrt(
            (self.x - other.x) ** 2 + (self.y - other.y) ** 2 + (self.z - other.z) ** 2
        )
