"""
Simulated Drone Adapter.

This module provides an in-memory drone that dead-reckons its position
from the commands it receives. It needs no hardware, so it backs the
examples and the test suite, where it also serves as a spy: every call it
receives is recorded in :py:attr:`SimulatedAdapter.calls`.
"""

from __future__ import annotations

import threading
from typing import Any, Iterable

from universaldrone.adapters.base import BaseAdapter
from universaldrone.adapters.registry import ADAPTERS
from universaldrone.capabilities.registry import DEFAULT_SPEED_LEVEL_RANGE
from universaldrone.conversion.units import (
    convert_length,
    convert_speed,
    parse_length_unit,
    parse_speed_unit,
)
from universaldrone.core.events import ConnectionLost, FlightStateChanged, TelemetryReceived
from universaldrone.core.exceptions import (
    AdapterConnectionError,
    AdapterError,
    AdapterPreconditionError,
    PreconditionReason,
)
from universaldrone.models.capability import Capability
from universaldrone.models.motion import TRANSLATIONS, MotionPrimitive, displacement
from universaldrone.models.position import Position
from universaldrone.models.state import FlightState
from universaldrone.models.telemetry import UNSUPPORTED, RawTelemetry
from universaldrone.models.units import LengthUnit, SpeedUnit

DEFAULT_CAPABILITIES = frozenset(
    {
        Capability.ABSOLUTE_POSITIONING,
        Capability.EXACT_SPEED,
        Capability.POSITION_TRACKING,
        Capability.TEMPERATURE_SENSOR,
        Capability.VIDEO,
    }
)

# Below this the simulated firmware refuses to take off.
MIN_TAKEOFF_BATTERY = 10


@ADAPTERS.register
class SimulatedAdapter(BaseAdapter):
    """
    Dead-reckoning drone simulator.

    Positions are kept in the native length unit, in a frame fixed at
    connect time: x to the right, y forward, z up. Rotations change the
    heading that later relative moves are applied along.

    Args:
        capabilities: Declared capabilities
        length_unit: Native length unit (default: centimetres)
        speed_unit: Native speed unit (default: centimetres/second)
        speed_level_range: Inclusive range of accepted speed levels
        battery: Starting battery percentage
        battery_drain: Percentage lost per executed motion
        auto_land: Land by itself, and report it, when the battery drops
                   below the takeoff minimum while airborne
        temperature: Reported temperature in degrees Celsius
        takeoff_height: Height reached by takeoff, native length unit.
                        Defaults to one metre.
        latency: Seconds every motion takes to complete
        time_scale: Fraction of a hover's duration actually waited
        reachable: Whether connect() succeeds
    """

    adapter_name = "sim"

    def __init__(
        self,
        capabilities: Iterable[Capability] = DEFAULT_CAPABILITIES,
        length_unit: LengthUnit | str = LengthUnit.CENTIMETER,
        speed_unit: SpeedUnit | str = SpeedUnit.CENTIMETERS_PER_SECOND,
        speed_level_range: tuple[int, int] = DEFAULT_SPEED_LEVEL_RANGE,
        battery: int = 100,
        battery_drain: float = 0.0,
        auto_land: bool = True,
        temperature: float = 40.0,
        takeoff_height: float | None = None,
        latency: float = 0.0,
        time_scale: float = 0.0,
        reachable: bool = True,
    ) -> None:
        super().__init__(
            capabilities,
            parse_length_unit(length_unit),
            parse_speed_unit(speed_unit),
        )
        self._speed_level_range = speed_level_range
        self._battery = float(battery)
        self._battery_drain = battery_drain
        self._auto_land = auto_land
        self._temperature = temperature
        if takeoff_height is None:
            takeoff_height = convert_length(1.0, LengthUnit.METER, self._length_unit)
        self._takeoff_height = takeoff_height
        self.latency = latency
        self.time_scale = time_scale
        self.reachable = reachable

        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        self._failures: dict[str, BaseException] = {}
        self._lock = threading.Lock()
        self._stop = threading.Event()
        self._moving = threading.Event()

        self._connected = False
        self._airborne = False
        self._position = Position(0.0, 0.0, 0.0, self._length_unit)
        self._heading = 0.0
        self._speed = convert_speed(0.5, SpeedUnit.METERS_PER_SECOND, self._speed_unit)
        self._speed_level = speed_level_range[0]
        self._video = False

    def __repr__(self) -> str:
        return (
            f"<SimulatedAdapter connected={self._connected} airborne={self._airborne} "
            f"position={self._position} heading={self._heading}>"
        )

    # ===== Adapter contract =====

    def speed_level_range(self) -> tuple[int, int]:
        return self._speed_level_range

    def connect(self) -> None:
        self._record("connect")
        if not self.reachable:
            raise AdapterConnectionError("Simulated drone is unreachable")
        with self._lock:
            self._connected = True
            self._airborne = False
            self._heading = 0.0
            self._position = Position(0.0, 0.0, 0.0, self._length_unit)
        self._logger.info("Simulated drone connected")

    def disconnect(self) -> None:
        self._record("disconnect")
        with self._lock:
            self._connected = False
            self._video = False
        self._stop.set()
        self._logger.info("Simulated drone disconnected")

    def execute_motion(
        self,
        primitive: MotionPrimitive,
        value: Any,
        speed: float | None,
    ) -> None:
        self._record("execute_motion", primitive, value, speed)
        self._require_link()

        if primitive is MotionPrimitive.HOVER and not value:
            # Stop command: interrupts whatever motion is running.
            self._stop.set()
            return

        self._stop.clear()
        delay = self.latency
        if primitive is MotionPrimitive.HOVER:
            delay += value * self.time_scale
        self._moving.set()
        try:
            if delay > 0 and self._stop.wait(delay):
                raise AdapterError(f"{primitive.value} interrupted before completion")
        finally:
            self._moving.clear()

        with self._lock:
            self._apply(primitive, value)
            self._battery = max(0.0, self._battery - self._battery_drain)
            auto_land = (
                self._auto_land
                and self._airborne
                and self._battery < MIN_TAKEOFF_BATTERY
            )
        if auto_land:
            self.trigger_auto_land("critical battery")

    def read_telemetry(self) -> RawTelemetry:
        self._record("read_telemetry")
        self._require_link()
        caps = self._capabilities
        with self._lock:
            return RawTelemetry(
                battery=int(self._battery),
                height=self._position.z,
                temperature=(
                    self._temperature if Capability.TEMPERATURE_SENSOR in caps else UNSUPPORTED
                ),
                position=(
                    self._position if Capability.POSITION_TRACKING in caps else UNSUPPORTED
                ),
                speed=self._speed if Capability.EXACT_SPEED in caps else UNSUPPORTED,
                speed_level=(
                    self._speed_level if Capability.SPEED_LEVELS in caps else UNSUPPORTED
                ),
            )

    def set_speed(self, speed: float) -> None:
        self._record("set_speed", speed)
        self._require_link()
        if Capability.EXACT_SPEED not in self._capabilities:
            super().set_speed(speed)
        with self._lock:
            self._speed = speed

    def set_speed_level(self, level: int) -> None:
        self._record("set_speed_level", level)
        self._require_link()
        if Capability.SPEED_LEVELS not in self._capabilities:
            super().set_speed_level(level)
        with self._lock:
            self._speed_level = level

    def start_video(self) -> None:
        self._record("start_video")
        self._require_link()
        if Capability.VIDEO not in self._capabilities:
            super().start_video()
        self._video = True

    def stop_video(self) -> None:
        self._record("stop_video")
        self._require_link()
        if Capability.VIDEO not in self._capabilities:
            super().stop_video()
        self._video = False

    # ===== Simulation controls =====

    def fail_next(self, operation: str | MotionPrimitive, exc: BaseException) -> None:
        """
        Make the next call of ``operation`` raise ``exc``.

        Args:
            operation: A motion primitive, or a method name such as
                       "connect", "read_telemetry" or "set_speed"
            exc: The exception to raise once
        """
        key = operation.value if isinstance(operation, MotionPrimitive) else operation
        self._failures[key] = exc

    def trigger_auto_land(self, reason: str = "auto-land") -> None:
        """Land without being told to and report it on the event bus."""
        with self._lock:
            self._airborne = False
            self._position = Position(self._position.x, self._position.y, 0.0, self._length_unit)
        self._logger.warning("Simulated drone landed by itself: %s", reason)
        self.publish(FlightStateChanged(FlightState.ON_GROUND, reason))

    def lose_connection(self, reason: str = "link timeout") -> None:
        """Drop the link and report it on the event bus."""
        with self._lock:
            self._connected = False
        self._stop.set()
        self._logger.warning("Simulated drone lost its link: %s", reason)
        self.publish(ConnectionLost(reason))

    def emit_telemetry(self) -> None:
        """Push the current telemetry on the event bus."""
        self.publish(TelemetryReceived(self.read_telemetry()))

    @property
    def motions(self) -> list[tuple[MotionPrimitive, Any, float | None]]:
        """Arguments of every execute_motion call received, in order."""
        return [args for name, args in self.calls if name == "execute_motion"]

    def wait_until_moving(self, timeout: float = 1.0) -> bool:
        """Block until a motion is under way; for interrupting it from a test."""
        return self._moving.wait(timeout)

    @property
    def connected(self) -> bool:
        return self._connected

    @property
    def airborne(self) -> bool:
        return self._airborne

    @property
    def position(self) -> Position:
        """Current position, native length unit."""
        with self._lock:
            return self._position

    @property
    def heading(self) -> float:
        return self._heading

    @property
    def battery(self) -> float:
        return self._battery

    @battery.setter
    def battery(self, value: float) -> None:
        self._battery = float(value)

    @property
    def video_active(self) -> bool:
        return self._video

    # ===== Internals =====

    def _record(self, name: str, *args: Any) -> None:
        self.calls.append((name, args))
        key = args[0].value if args and isinstance(args[0], MotionPrimitive) else name
        exc = self._failures.pop(key, None)
        if exc is not None:
            raise exc

    def _require_link(self) -> None:
        if not self._connected:
            raise AdapterConnectionError("Simulated drone is not connected")

    def _apply(self, primitive: MotionPrimitive, value: Any) -> None:
        """Update the simulated state; the caller holds the lock."""
        if primitive is MotionPrimitive.TAKEOFF:
            if self._battery < MIN_TAKEOFF_BATTERY:
                raise AdapterPreconditionError(
                    f"Battery at {self._battery:.0f}%, too low for takeoff",
                    reason=PreconditionReason.LOW_BATTERY,
                )
            self._airborne = True
            climb = self._takeoff_height - self._position.z
            self._position = self._position.offset(0.0, 0.0, climb)
        elif primitive is MotionPrimitive.LAND:
            self._airborne = False
            self._position = self._position.offset(0.0, 0.0, -self._position.z)
        elif primitive in TRANSLATIONS:
            dx, dy, dz = displacement(primitive, value, self._heading)
            if self._position.z + dz < 0:
                raise AdapterError(f"Cannot descend {value} {self._length_unit} below ground")
            self._position = self._position.offset(dx, dy, dz)
        elif primitive is MotionPrimitive.ROTATE:
            self._heading = (self._heading + value) % 360.0
        elif primitive is MotionPrimitive.MOVE_TO_ABSOLUTE:
            target = value.to(self._length_unit)
            if target.z < 0:
                raise AdapterError(f"Cannot fly below ground to {target}")
            self._position = target
        elif primitive is not MotionPrimitive.HOVER:
            raise AdapterError(f"Unknown motion {primitive}")
