"""
Telemetry Data Models.

This module provides the raw telemetry adapters report and the normalized
snapshot the session caches.

Two kinds of "missing" are kept apart: ``None`` means the value is unknown
right now (not reported, or not yet read), while :py:data:`UNSUPPORTED`
means the drone cannot report it at all.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

from universaldrone.models.position import Position
from universaldrone.models.state import FlightState, MovementState


class _Unsupported:
    """Marker for a telemetry field the drone cannot report."""

    _instance: "_Unsupported | None" = None

    def __new__(cls) -> "_Unsupported":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSUPPORTED"

    def __bool__(self) -> bool:
        return False

    def __reduce__(self) -> str:
        return "UNSUPPORTED"


UNSUPPORTED: Any = _Unsupported()

FloatField = Union[float, None, _Unsupported]
IntField = Union[int, None, _Unsupported]
PositionField = Union[Position, None, _Unsupported]


def is_unsupported(value: Any) -> bool:
    """Check if a telemetry field holds the UNSUPPORTED marker."""
    return value is UNSUPPORTED


@dataclass(frozen=True)
class RawTelemetry:
    """
    Telemetry exactly as an adapter reports it, in its native units.

    Attributes:
        battery: Remaining battery energy as percentage (0-100).
        height: Height above the takeoff point, native length unit.
        temperature: Internal temperature in degrees Celsius.
        position: Current position; its own ``unit`` says which.
        speed: Configured movement speed, native speed unit.
        speed_level: Configured speed level.
    """

    battery: IntField = None
    height: FloatField = None
    temperature: FloatField = None
    position: PositionField = None
    speed: FloatField = None
    speed_level: IntField = None


@dataclass(frozen=True)
class TelemetrySnapshot:
    """
    Last-known-good telemetry of a session.

    Lengths are in metres and speeds in metres/second; the session converts
    to the caller's unit on read.

    Attributes:
        battery: Remaining battery energy as percentage (0-100).
        height: Height above the takeoff point in metres.
        temperature: Internal temperature in degrees Celsius.
        position: Current position in metres.
        speed: Configured movement speed in metres/second.
        speed_level: Configured speed level.
        flight_state: Flight state when the snapshot was captured.
        movement_state: Movement state when the snapshot was captured.
        captured_at: Monotonic timestamp of the capture.
    """

    battery: IntField
    height: FloatField
    temperature: FloatField
    position: PositionField
    speed: FloatField
    speed_level: IntField
    flight_state: FlightState
    movement_state: MovementState
    captured_at: float

    def __str__(self) -> str:
        return (
            f"TelemetrySnapshot:battery={self.battery},"
            f"height={self.height},"
            f"temperature={self.temperature},"
            f"state={self.flight_state}"
        )

    @property
    def is_low_battery(self) -> bool | None:
        """
        Check if battery level is low (below 20%).

        Returns:
            None if the level is unknown or unsupported.
        """
        if not isinstance(self.battery, int):
            return None
        return self.battery < 20

    @property
    def is_critical_battery(self) -> bool | None:
        """Check if battery level is critical (below 10%)."""
        if not isinstance(self.battery, int):
            return None
        return self.battery < 10
