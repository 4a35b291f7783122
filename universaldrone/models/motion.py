"""
Motion Primitives.

This module provides the motion primitives the core sends to adapters and
the body-frame unit vectors of the translational ones.
"""

from __future__ import annotations

import math
from enum import Enum

from universaldrone.models.state import MovementState


class MotionPrimitive(Enum):
    """Normalized motion instructions understood by every adapter."""

    FORWARD = "forward"
    BACKWARD = "backward"
    LEFT = "left"
    RIGHT = "right"
    UP = "up"
    DOWN = "down"
    ROTATE = "rotate"
    HOVER = "hover"
    MOVE_TO_ABSOLUTE = "move_to_absolute"
    TAKEOFF = "takeoff"
    LAND = "land"


# (x, y, z) in the body frame: x right, y forward, z up.
BODY_FRAME_VECTORS: dict[MotionPrimitive, tuple[float, float, float]] = {
    MotionPrimitive.FORWARD: (0.0, 1.0, 0.0),
    MotionPrimitive.BACKWARD: (0.0, -1.0, 0.0),
    MotionPrimitive.LEFT: (-1.0, 0.0, 0.0),
    MotionPrimitive.RIGHT: (1.0, 0.0, 0.0),
    MotionPrimitive.UP: (0.0, 0.0, 1.0),
    MotionPrimitive.DOWN: (0.0, 0.0, -1.0),
}

TRANSLATIONS = frozenset(BODY_FRAME_VECTORS)

MOVEMENT_STATES: dict[MotionPrimitive, MovementState] = {
    MotionPrimitive.FORWARD: MovementState.MOVING_FORWARD,
    MotionPrimitive.BACKWARD: MovementState.MOVING_BACKWARD,
    MotionPrimitive.LEFT: MovementState.MOVING_LEFT,
    MotionPrimitive.RIGHT: MovementState.MOVING_RIGHT,
    MotionPrimitive.UP: MovementState.ASCENDING,
    MotionPrimitive.DOWN: MovementState.DESCENDING,
    MotionPrimitive.ROTATE: MovementState.ROTATING,
    MotionPrimitive.TAKEOFF: MovementState.ASCENDING,
    MotionPrimitive.LAND: MovementState.DESCENDING,
}


def displacement(
    primitive: MotionPrimitive,
    distance: float,
    heading: float = 0.0,
) -> tuple[float, float, float]:
    """
    Calculate the displacement of a translation in the reference frame.

    The body-frame unit vector of ``primitive`` is rotated clockwise by
    ``heading`` degrees (0 = facing +y) and scaled by ``distance``.

    Args:
        primitive: One of the translational primitives
        distance: Distance to travel, any length unit
        heading: Current heading in degrees, clockwise

    Returns:
        (dx, dy, dz) in the unit of ``distance``

    Example:
        >>> displacement(MotionPrimitive.FORWARD, 2.0, heading=90.0)
        (2.0, 0.0, 0.0)
    """
    bx, by, bz = BODY_FRAME_VECTORS[primitive]
    theta = math.radians(heading)
    cos_t = math.cos(theta)
    sin_t = math.sin(theta)
    dx = bx * cos_t + by * sin_t
    dy = -bx * sin_t + by * cos_t
    return (round(dx * distance, 9), round(dy * distance, 9), bz * distance)
