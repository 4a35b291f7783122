"""
Capability Data Model.

This module provides the enumeration of optional drone features an adapter
can declare.
"""

from __future__ import annotations

from enum import Enum


class Capability(Enum):
    """
    Optional features a drone may or may not support.

    Attributes:
        ABSOLUTE_POSITIONING: Can fly to an absolute coordinate (``move_to``).
        EXACT_SPEED: Accepts a physical movement speed.
        SPEED_LEVELS: Accepts an opaque speed level in a declared range.
        VIDEO: Has a camera with a video stream.
        TEMPERATURE_SENSOR: Reports its internal temperature.
        POSITION_TRACKING: Reports its current position.
    """

    ABSOLUTE_POSITIONING = "absolute_positioning"
    EXACT_SPEED = "exact_speed"
    SPEED_LEVELS = "speed_levels"
    VIDEO = "video"
    TEMPERATURE_SENSOR = "temperature_sensor"
    POSITION_TRACKING = "position_tracking"


# A drone declares at most one of these.
SPEED_CONTROL = frozenset({Capability.EXACT_SPEED, Capability.SPEED_LEVELS})
