"""
Data Models.

This module provides the value types shared by the session, the adapters
and callers: units, positions, states, capabilities and telemetry.
"""

from universaldrone.models.units import LengthUnit, SpeedUnit
from universaldrone.models.position import Position
from universaldrone.models.state import AIRBORNE_STATES, FlightState, MovementState
from universaldrone.models.capability import SPEED_CONTROL, Capability
from universaldrone.models.motion import (
    BODY_FRAME_VECTORS,
    MOVEMENT_STATES,
    TRANSLATIONS,
    MotionPrimitive,
    displacement,
)
from universaldrone.models.telemetry import (
    UNSUPPORTED,
    RawTelemetry,
    TelemetrySnapshot,
    is_unsupported,
)

__all__ = [
    # Units
    "LengthUnit",
    "SpeedUnit",
    # Position
    "Position",
    # State
    "AIRBORNE_STATES",
    "FlightState",
    "MovementState",
    # Capability
    "Capability",
    "SPEED_CONTROL",
    # Motion
    "BODY_FRAME_VECTORS",
    "MOVEMENT_STATES",
    "TRANSLATIONS",
    "MotionPrimitive",
    "displacement",
    # Telemetry
    "UNSUPPORTED",
    "RawTelemetry",
    "TelemetrySnapshot",
    "is_unsupported",
]
