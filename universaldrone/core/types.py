"""
Protocol and Type Definitions.

This module defines the protocols (interfaces) used throughout
universaldrone, most importantly the contract every drone backend
implements.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from universaldrone.core.events import EventBus
    from universaldrone.models.capability import Capability
    from universaldrone.models.motion import MotionPrimitive
    from universaldrone.models.telemetry import RawTelemetry
    from universaldrone.models.units import LengthUnit, SpeedUnit


@runtime_checkable
class DroneAdapter(Protocol):
    """
    Protocol for drone backends.

    An adapter executes normalized commands against one drone family. It
    only ever sees values in its own native units, and reports failures by
    raising :py:class:`~universaldrone.core.exceptions.AdapterError` (or any
    other exception); the session translates them for the caller.

    ``declared_capabilities``, ``native_units`` and ``speed_level_range`` are
    queried once, when the session is created.
    """

    @property
    def name(self) -> str:
        """Return the adapter name (e.g., 'sim', 'mavlink')."""
        ...

    def connect(self) -> None:
        """Open the link to the drone."""
        ...

    def disconnect(self) -> None:
        """Close the link to the drone."""
        ...

    def execute_motion(
        self,
        primitive: "MotionPrimitive",
        value: Any,
        speed: float | None,
    ) -> None:
        """
        Execute one motion and return when it has completed.

        Args:
            primitive: The motion to perform
            value: Native distance for translations, signed degrees for
                   ROTATE (negative = counterclockwise), seconds for HOVER,
                   a native Position for MOVE_TO_ABSOLUTE, None otherwise
            speed: Native speed, or None to use the configured speed
        """
        ...

    def read_telemetry(self) -> "RawTelemetry":
        """Read telemetry in native units."""
        ...

    def declared_capabilities(self) -> "frozenset[Capability]":
        """Return the capabilities this drone supports."""
        ...

    def native_units(self) -> "tuple[LengthUnit, SpeedUnit]":
        """Return the length and speed units the drone works in."""
        ...

    def speed_level_range(self) -> tuple[int, int]:
        """Return the inclusive range of accepted speed levels."""
        ...

    def set_speed(self, speed: float) -> None:
        """Set the movement speed, native speed unit."""
        ...

    def set_speed_level(self, level: int) -> None:
        """Set the movement speed level."""
        ...

    def start_video(self) -> None:
        """Start the video stream."""
        ...

    def stop_video(self) -> None:
        """Stop the video stream."""
        ...

    def attach(self, event_bus: "EventBus") -> None:
        """
        Attach the adapter to an event bus.

        The adapter publishes out-of-band events (FlightStateChanged,
        ConnectionLost, TelemetryReceived) on it.
        """
        ...

    def detach(self) -> None:
        """Detach the adapter from the event bus."""
        ...
