"""
Status Data Models.

This module provides the flight and movement state enumerations.
"""

from __future__ import annotations

from enum import Enum


class FlightState(Enum):
    """
    Connection and flight lifecycle of a drone session.

    The value is the human readable label used in logs and reports
    (e.g., "hovering", "on ground").
    """

    DISCONNECTED = "disconnected"
    CONNECTED = "connected"
    ON_GROUND = "on ground"
    TAKING_OFF = "taking off"
    HOVERING = "hovering"
    FLYING = "flying"
    LANDING = "landing"

    def __str__(self) -> str:
        return self.value

    @property
    def is_airborne(self) -> bool:
        """Check if the drone may be off the ground in this state."""
        return self in AIRBORNE_STATES

    @property
    def is_connected(self) -> bool:
        """Check if a link to the drone exists in this state."""
        return self is not FlightState.DISCONNECTED


AIRBORNE_STATES = frozenset(
    {
        FlightState.TAKING_OFF,
        FlightState.HOVERING,
        FlightState.FLYING,
        FlightState.LANDING,
    }
)


class MovementState(Enum):
    """What the drone is doing right now; reported only, never authoritative."""

    STATIONARY = "stationary"
    MOVING_FORWARD = "forward"
    MOVING_BACKWARD = "backward"
    MOVING_LEFT = "left"
    MOVING_RIGHT = "right"
    ASCENDING = "ascending"
    DESCENDING = "descending"
    ROTATING = "rotating"

    def __str__(self) -> str:
        return self.value
