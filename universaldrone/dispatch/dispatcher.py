"""
Command Dispatcher.

This module provides the CommandDispatcher, the single entry point through
which every contract operation reaches a drone.

Each call goes through the same steps:

1. re-read the flight state and reject illegal commands,
2. check the capability registry,
3. validate argument domains,
4. convert units to the adapter's native units,
5. invoke the adapter and translate its failures,
6. update the flight state and the telemetry cache.

Steps 1 to 4 never touch the adapter.
"""

from __future__ import annotations

import logging
import math
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from contextlib import contextmanager
from typing import Any, Callable, Iterator

from universaldrone.capabilities.registry import (
    DEFAULT_SPEED_LEVEL_RANGE,
    CapabilityRegistry,
)
from universaldrone.config import DispatcherConfig
from universaldrone.conversion.units import (
    convert_length,
    convert_speed,
    parse_length_unit,
    parse_speed_unit,
)
from universaldrone.core.events import (
    ConnectionLost,
    EventBus,
    EventPriority,
    FlightStateChanged,
    TelemetryReceived,
)
from universaldrone.core.exceptions import (
    APIException,
    CommandTimeout,
    ConnectionFailed,
    HardwareFault,
    SessionBusy,
    UnsupportedCapability,
)
from universaldrone.core.observer import HasObservers
from universaldrone.core.types import DroneAdapter
from universaldrone.dispatch.errors import translate_adapter_error
from universaldrone.dispatch.validation import (
    require_degrees,
    require_level,
    require_non_negative,
    require_number,
    require_positive,
)
from universaldrone.flight_control.state_machine import FlightStateMachine, Trigger
from universaldrone.logs.handlers import get_adapter_logger
from universaldrone.models.capability import Capability
from universaldrone.models.motion import MOVEMENT_STATES, MotionPrimitive
from universaldrone.models.position import Position
from universaldrone.models.state import FlightState, MovementState
from universaldrone.models.telemetry import (
    UNSUPPORTED,
    RawTelemetry,
    TelemetrySnapshot,
    is_unsupported,
)
from universaldrone.models.units import LengthUnit, SpeedUnit
from universaldrone.telemetry.cache import TelemetryCache

logger = logging.getLogger(__name__)
adapter_logger = get_adapter_logger()

# Triggers with a transitional state, and the trigger that completes them.
_ACKS = {
    Trigger.TAKEOFF: Trigger.TAKEOFF_ACK,
    Trigger.LAND: Trigger.LAND_ACK,
}


class CommandDispatcher(HasObservers):
    """
    Uniform control surface of one drone session.

    One dispatcher owns one adapter, one flight state machine and one
    telemetry cache. Mutating commands are serialized: a command issued
    while another is running fails immediately with :py:class:`SessionBusy`
    instead of queueing behind it. Telemetry getters never wait for a
    running command; they serve the last-known-good snapshot instead. Every
    adapter call, telemetry reads included, runs on the session's single
    worker thread, so an adapter is never entered from two threads at once
    (the HOVER sent by :py:meth:`cancel` and by a timeout excepted).

    Physical commands block until the adapter reports completion, up to
    ``config.command_timeout``. On timeout the drone is told to hover
    (except while landing) and :py:class:`CommandTimeout` is raised. Nothing
    is ever retried.

    Example:
        >>> from universaldrone import CommandDispatcher, SimulatedAdapter
        >>> drone = CommandDispatcher(SimulatedAdapter())
        >>> drone.connect()
        >>> drone.take_off()
        >>> drone.move_forward(50, "cm")
        >>> drone.rotate_right(90)
        >>> drone.land()
        >>> drone.disconnect()

    Args:
        adapter: The drone backend
        config: Timeouts and telemetry settings
        event_bus: Bus the adapter publishes out-of-band events on.
                   A private bus is created if omitted.
    """

    def __init__(
        self,
        adapter: DroneAdapter,
        config: DispatcherConfig | None = None,
        event_bus: EventBus | None = None,
    ) -> None:
        super().__init__()
        self._adapter = adapter
        self._config = config or DispatcherConfig()

        # Queried once, for the whole session
        self._registry = CapabilityRegistry.from_adapter(adapter)
        length_unit, speed_unit = adapter.native_units()
        self._length_unit = parse_length_unit(length_unit)
        self._speed_unit = parse_speed_unit(speed_unit)

        self._state_machine = FlightStateMachine(on_change=self._on_flight_state_change)
        self._telemetry = TelemetryCache(
            max_age=self._config.telemetry_max_age,
            on_update=self._on_telemetry_update,
        )

        self._lock = threading.Lock()
        self._worker: threading.Thread | None = None
        self._executor = ThreadPoolExecutor(
            max_workers=1,
            thread_name_prefix="universaldrone-command",
            initializer=self._bind_worker,
        )
        self._inflight: Future | None = None
        self._inflight_is_motion = False
        self._closed = False

        self._movement_state = MovementState.STATIONARY
        self._heading = 0.0
        self._video_active = False
        self._speed_setting: float | None = None
        self._speed_level_setting: int | None = None

        self._event_bus = event_bus or EventBus()
        self._unsubscribe_fns: list[Callable[[], None]] = [
            self._event_bus.subscribe(
                FlightStateChanged, self._handle_state_changed, EventPriority.HIGH
            ),
            self._event_bus.subscribe(
                ConnectionLost, self._handle_connection_lost, EventPriority.HIGH
            ),
            self._event_bus.subscribe(TelemetryReceived, self._handle_telemetry),
        ]
        adapter.attach(self._event_bus)
        logger.debug(
            "Session created for %s adapter (native units %s, %s)",
            adapter.name,
            self._length_unit,
            self._speed_unit,
        )

    def __repr__(self) -> str:
        return f"<CommandDispatcher adapter={self._adapter.name} state={self.flight_state}>"

    def __enter__(self) -> "CommandDispatcher":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # ===== Connection =====

    def connect(self) -> None:
        """
        Connect to the drone.

        Raises:
            AlreadyConnected: If the session is not disconnected
            ConnectionFailed: If the adapter could not connect
        """
        with self._session():
            if self._closed:
                raise ConnectionFailed("Session is closed")
            self._state_machine.check(Trigger.CONNECT)
            logger.info("Connecting to drone via %s adapter", self._adapter.name)
            self._invoke(
                "connect",
                self._adapter.connect,
                timeout=self._config.connect_timeout,
                connecting=True,
            )
            self._heading = 0.0
            self._video_active = False
            self._speed_setting = None
            self._speed_level_setting = None
            self._set_movement(MovementState.STATIONARY)
            self._telemetry.invalidate()
            self._state_machine.request_transition(Trigger.CONNECT)
            logger.info("Connected to drone via %s adapter", self._adapter.name)

    def disconnect(self) -> None:
        """
        Disconnect from the drone.

        Best effort: transport teardown errors are logged, never raised, and
        the session always ends up DISCONNECTED. Disconnecting while airborne
        is allowed and logged as abnormal. This does not wait for a running
        command.
        """
        if self._state_machine.current is FlightState.DISCONNECTED:
            logger.debug("Disconnect requested on a disconnected session")
            return
        try:
            self._release_transport("disconnect")
        finally:
            self._video_active = False
            self._set_movement(MovementState.STATIONARY)
            self._telemetry.invalidate()
            self._state_machine.request_transition(Trigger.DISCONNECT)
        logger.info("Disconnected from drone")

    def close(self) -> None:
        """Disconnect and release the session; it cannot be reconnected."""
        if self._closed:
            return
        self.disconnect()
        self._closed = True
        for unsubscribe in self._unsubscribe_fns:
            unsubscribe()
        self._unsubscribe_fns.clear()
        try:
            self._adapter.detach()
        except Exception:
            adapter_logger.warning("Adapter detach failed", exc_info=True)
        self._executor.shutdown(wait=False)

    # ===== Takeoff and landing =====

    def take_off(self) -> None:
        """
        Take off and hover.

        Raises:
            InvalidStateTransition: Unless CONNECTED or ON_GROUND
            PreconditionFailed: If the drone refused (e.g., low battery)
        """
        with self._session():
            self._state_machine.check(Trigger.TAKEOFF)
            self._run_motion(Trigger.TAKEOFF, MotionPrimitive.TAKEOFF)
            logger.info("Takeoff complete")

    def land(self) -> None:
        """
        Land and stop the motors.

        A failed landing is never retried; the state returns to what it was
        before the call so the caller can decide.
        """
        with self._session():
            self._state_machine.check(Trigger.LAND)
            self._run_motion(Trigger.LAND, MotionPrimitive.LAND)
            logger.info("Landing complete")

    # ===== Absolute movement =====

    def move_to(
        self,
        x: float,
        y: float,
        z: float,
        unit: LengthUnit | str = LengthUnit.METER,
    ) -> None:
        """
        Fly to an absolute position.

        Raises:
            UnsupportedCapability: Without ABSOLUTE_POSITIONING
        """
        with self._session():
            self._state_machine.check(Trigger.MOVE)
            self._registry.require(Capability.ABSOLUTE_POSITIONING)
            coords = [require_number(n, v) for n, v in (("x", x), ("y", y), ("z", z))]
            target = Position(*coords, unit=parse_length_unit(unit))
            self._run_motion(
                Trigger.MOVE,
                MotionPrimitive.MOVE_TO_ABSOLUTE,
                target.to(self._length_unit),
            )

    def get_current_position(self, unit: LengthUnit | str = LengthUnit.METER) -> Position:
        """
        Get the current position.

        Raises:
            UnsupportedCapability: Without POSITION_TRACKING
            HardwareFault: If the drone did not report its position
        """
        self._state_machine.check(Trigger.QUERY)
        self._registry.require(Capability.POSITION_TRACKING)
        target = parse_length_unit(unit)
        snapshot = self._current_snapshot()
        position = self._reading(snapshot.position, "position", Capability.POSITION_TRACKING)
        return position.to(target)

    # ===== Relative movement =====

    def move_forward(
        self,
        distance: float,
        unit: LengthUnit | str = LengthUnit.CENTIMETER,
        speed: float | None = None,
        speed_unit: SpeedUnit | str = SpeedUnit.CENTIMETERS_PER_SECOND,
    ) -> None:
        """
        Move forward, in the direction the drone is facing.

        Args:
            distance: How far to move (>= 0; 0 does nothing)
            unit: Unit of ``distance``
            speed: Optional speed (> 0); requires EXACT_SPEED
            speed_unit: Unit of ``speed``
        """
        self._displace(MotionPrimitive.FORWARD, distance, unit, speed, speed_unit)

    def move_backward(
        self,
        distance: float,
        unit: LengthUnit | str = LengthUnit.CENTIMETER,
        speed: float | None = None,
        speed_unit: SpeedUnit | str = SpeedUnit.CENTIMETERS_PER_SECOND,
    ) -> None:
        """Move backward without turning around."""
        self._displace(MotionPrimitive.BACKWARD, distance, unit, speed, speed_unit)

    def move_left(
        self,
        distance: float,
        unit: LengthUnit | str = LengthUnit.CENTIMETER,
        speed: float | None = None,
        speed_unit: SpeedUnit | str = SpeedUnit.CENTIMETERS_PER_SECOND,
    ) -> None:
        """Slide left without rotating."""
        self._displace(MotionPrimitive.LEFT, distance, unit, speed, speed_unit)

    def move_right(
        self,
        distance: float,
        unit: LengthUnit | str = LengthUnit.CENTIMETER,
        speed: float | None = None,
        speed_unit: SpeedUnit | str = SpeedUnit.CENTIMETERS_PER_SECOND,
    ) -> None:
        """Slide right without rotating."""
        self._displace(MotionPrimitive.RIGHT, distance, unit, speed, speed_unit)

    def move_up(self, distance: float, unit: LengthUnit | str = LengthUnit.CENTIMETER) -> None:
        """Ascend straight up."""
        self._displace(MotionPrimitive.UP, distance, unit)

    def move_down(self, distance: float, unit: LengthUnit | str = LengthUnit.CENTIMETER) -> None:
        """Descend straight down."""
        self._displace(MotionPrimitive.DOWN, distance, unit)

    def rotate_left(self, degrees: float) -> None:
        """
        Rotate counterclockwise in place.

        Args:
            degrees: Angle within [0, 360]; 0 and 360 do nothing
        """
        self._rotate(degrees, -1)

    def rotate_right(self, degrees: float) -> None:
        """Rotate clockwise in place."""
        self._rotate(degrees, 1)

    def hover(self, duration_seconds: float) -> None:
        """
        Hold position for a while.

        Args:
            duration_seconds: How long to hover (>= 0)
        """
        with self._session():
            self._state_machine.check(Trigger.HOVER)
            duration = require_non_negative("duration_seconds", duration_seconds)
            self._run_motion(
                Trigger.HOVER,
                MotionPrimitive.HOVER,
                duration,
                extra_time=duration,
            )

    def cancel(self) -> bool:
        """
        Stop the motion currently in progress.

        Safe to call from another thread while a command blocks. The drone
        is told to hover; the blocked command returns with whatever the
        adapter reports for the interrupted motion.

        Returns:
            True if a motion was in progress and HOVER was sent
        """
        future = self._inflight
        if future is None or future.done() or not self._inflight_is_motion:
            return False
        logger.warning("Cancelling motion in progress; sending HOVER")
        try:
            self._adapter.execute_motion(MotionPrimitive.HOVER, 0.0, None)
        except Exception as exc:
            raise translate_adapter_error(exc, "cancel") from exc
        return True

    # ===== Speed control =====

    def set_speed(
        self,
        speed: float,
        unit: SpeedUnit | str = SpeedUnit.CENTIMETERS_PER_SECOND,
    ) -> None:
        """
        Set the movement speed used by later commands.

        Raises:
            UnsupportedCapability: Without EXACT_SPEED (a drone with speed
                                   levels must use set_speed_level)
        """
        with self._session():
            self._state_machine.check(Trigger.COMMAND)
            self._registry.require(Capability.EXACT_SPEED)
            value = require_positive("speed", speed)
            native = convert_speed(value, unit, self._speed_unit)
            self._invoke(
                "set_speed",
                self._adapter.set_speed,
                native,
                timeout=self._config.command_timeout,
            )
            self._speed_setting = convert_speed(native, self._speed_unit, SpeedUnit.METERS_PER_SECOND)
            self._telemetry.invalidate()

    def set_speed_level(self, level: int) -> None:
        """
        Set the movement speed level.

        Raises:
            UnsupportedCapability: Without SPEED_LEVELS
            InvalidArgument: If the level is outside the declared range
        """
        with self._session():
            self._state_machine.check(Trigger.COMMAND)
            self._registry.require(Capability.SPEED_LEVELS)
            level_range = self._registry.speed_level_range or DEFAULT_SPEED_LEVEL_RANGE
            value = require_level(level, level_range)
            self._invoke(
                "set_speed_level",
                self._adapter.set_speed_level,
                value,
                timeout=self._config.command_timeout,
            )
            self._speed_level_setting = value
            self._telemetry.invalidate()

    def get_speed(self, unit: SpeedUnit | str = SpeedUnit.CENTIMETERS_PER_SECOND) -> float:
        """Get the configured movement speed."""
        self._state_machine.check(Trigger.QUERY)
        self._registry.require(Capability.EXACT_SPEED)
        target = parse_speed_unit(unit)
        speed = self._current_snapshot().speed
        if speed is None or is_unsupported(speed):
            speed = self._speed_setting
        value = self._reading(speed, "speed")
        return convert_speed(value, SpeedUnit.METERS_PER_SECOND, target)

    def get_speed_level(self) -> int:
        """Get the configured speed level."""
        self._state_machine.check(Trigger.QUERY)
        self._registry.require(Capability.SPEED_LEVELS)
        level = self._current_snapshot().speed_level
        if level is None or is_unsupported(level):
            level = self._speed_level_setting
        return self._reading(level, "speed level")

    # ===== Telemetry =====

    def get_battery(self) -> int:
        """Get the remaining battery percentage (0-100)."""
        self._state_machine.check(Trigger.QUERY)
        return self._reading(self._current_snapshot().battery, "battery")

    def get_height(self, unit: LengthUnit | str = LengthUnit.CENTIMETER) -> float:
        """Get the height above the takeoff point."""
        self._state_machine.check(Trigger.QUERY)
        target = parse_length_unit(unit)
        height = self._reading(self._current_snapshot().height, "height")
        return convert_length(height, LengthUnit.METER, target)

    def get_temperature(self) -> float:
        """
        Get the internal temperature in degrees Celsius.

        Raises:
            UnsupportedCapability: Without TEMPERATURE_SENSOR
        """
        self._state_machine.check(Trigger.QUERY)
        self._registry.require(Capability.TEMPERATURE_SENSOR)
        snapshot = self._current_snapshot()
        return self._reading(snapshot.temperature, "temperature", Capability.TEMPERATURE_SENSOR)

    def get_flight_state(self) -> FlightState:
        """Get the flight state; legal in every state."""
        return self._state_machine.current

    def get_movement_state(self) -> MovementState:
        """Get the movement state; legal in every state."""
        return self._movement_state

    def refresh_telemetry(self) -> TelemetrySnapshot:
        """
        Read telemetry from the adapter and replace the cached snapshot.

        Raises:
            InvalidStateTransition: If disconnected
            SessionBusy: If a command is running; use :py:attr:`telemetry`
            HardwareFault: If the adapter failed to report
        """
        self._state_machine.check(Trigger.QUERY)
        raw = self._read_raw()
        snapshot = self._normalize(raw, self._telemetry.clock())
        self._telemetry.update(snapshot)
        return snapshot

    # ===== Video =====

    def start_video(self) -> None:
        """
        Start the video stream.

        Raises:
            UnsupportedCapability: Without VIDEO
        """
        with self._session():
            self._state_machine.check(Trigger.COMMAND)
            self._registry.require(Capability.VIDEO)
            self._invoke(
                "start_video",
                self._adapter.start_video,
                timeout=self._config.command_timeout,
            )
            self._video_active = True

    def stop_video(self) -> None:
        """Stop the video stream."""
        with self._session():
            self._state_machine.check(Trigger.COMMAND)
            self._registry.require(Capability.VIDEO)
            self._invoke(
                "stop_video",
                self._adapter.stop_video,
                timeout=self._config.command_timeout,
            )
            self._video_active = False

    # ===== Properties =====

    @property
    def adapter(self) -> DroneAdapter:
        """The adapter of this session."""
        return self._adapter

    @property
    def config(self) -> DispatcherConfig:
        return self._config

    @property
    def capabilities(self) -> CapabilityRegistry:
        """Capabilities declared by the adapter."""
        return self._registry

    @property
    def native_units(self) -> tuple[LengthUnit, SpeedUnit]:
        """The adapter's native length and speed units."""
        return (self._length_unit, self._speed_unit)

    @property
    def flight_state(self) -> FlightState:
        return self._state_machine.current

    @property
    def movement_state(self) -> MovementState:
        return self._movement_state

    @property
    def heading(self) -> float:
        """Heading in degrees [0, 360), clockwise, relative to connect time."""
        return self._heading

    @property
    def video_active(self) -> bool:
        return self._video_active

    @property
    def telemetry(self) -> TelemetrySnapshot | None:
        """The cached snapshot, without refreshing it."""
        return self._telemetry.get()

    @property
    def busy(self) -> bool:
        """Check if a command is running on this session."""
        if self._lock.locked():
            return True
        future = self._inflight
        return future is not None and not future.done()

    # ===== Internals =====

    @contextmanager
    def _session(self) -> Iterator[None]:
        """Hold the session for one mutating command."""
        if not self._lock.acquire(blocking=False):
            raise SessionBusy("Another command is in progress on this drone")
        try:
            future = self._inflight
            if future is not None and not future.done():
                raise SessionBusy("A timed out command is still running on this drone")
            yield
        finally:
            self._lock.release()

    def _invoke(
        self,
        operation: str,
        fn: Callable[..., Any],
        *args: Any,
        timeout: float | None,
        halt: bool = False,
        connecting: bool = False,
    ) -> Any:
        """
        Run an adapter call on the worker thread and wait for it.

        Args:
            operation: Name used in messages
            fn: The adapter method
            timeout: Seconds to wait, None to wait forever
            halt: Send HOVER if the call times out
            connecting: Translate failures as connection failures
        """
        future = self._executor.submit(fn, *args)
        self._inflight = future
        self._inflight_is_motion = halt
        try:
            return future.result(timeout=timeout)
        except Exception as exc:
            if future.done():
                raise translate_adapter_error(exc, operation, connecting) from exc
            logger.error("%s did not complete within %ss", operation, timeout)
            if connecting:
                raise ConnectionFailed(
                    f"Could not connect to drone within {timeout}s"
                ) from None
            if halt and self._config.halt_on_timeout:
                self._halt(operation)
            raise CommandTimeout(
                f"{operation} did not complete within {timeout}s"
            ) from None

    def _halt(self, operation: str) -> None:
        try:
            self._adapter.execute_motion(MotionPrimitive.HOVER, 0.0, None)
        except Exception:
            adapter_logger.exception("HOVER after timed out %s failed", operation)

    def _run_motion(
        self,
        trigger: Trigger,
        primitive: MotionPrimitive,
        value: Any = None,
        speed: float | None = None,
        extra_time: float = 0.0,
    ) -> None:
        """Execute a validated motion and apply its state transition."""
        machine = self._state_machine
        prior = machine.current
        if trigger in _ACKS:
            machine.request_transition(trigger)
        revision = machine.revision

        timeout = self._config.command_timeout
        if timeout is not None:
            timeout += extra_time

        self._set_movement(MOVEMENT_STATES.get(primitive, MovementState.STATIONARY))
        self._telemetry.invalidate()
        try:
            self._invoke(
                primitive.value,
                self._adapter.execute_motion,
                primitive,
                value,
                speed,
                timeout=timeout,
                halt=primitive is not MotionPrimitive.LAND,
            )
        except CommandTimeout:
            # Physical outcome unknown; a transitional state stays visible.
            if primitive is not MotionPrimitive.LAND:
                self._set_movement(MovementState.STATIONARY)
            raise
        except APIException:
            self._set_movement(MovementState.STATIONARY)
            if machine.current is not prior:
                machine.force(prior, f"{primitive.value} failed", expected_revision=revision)
            raise
        self._set_movement(MovementState.STATIONARY)
        machine.request_transition(_ACKS.get(trigger, trigger), expected_revision=revision)

    def _displace(
        self,
        primitive: MotionPrimitive,
        distance: float,
        unit: LengthUnit | str,
        speed: float | None = None,
        speed_unit: SpeedUnit | str = SpeedUnit.CENTIMETERS_PER_SECOND,
    ) -> None:
        """Shared implementation of the six relative moves."""
        with self._session():
            self._state_machine.check(Trigger.MOVE)
            if speed is not None:
                self._registry.require(Capability.EXACT_SPEED)
            value = require_non_negative("distance", distance)
            if speed is not None:
                speed = require_positive("speed", speed)
            native_distance = convert_length(value, unit, self._length_unit)
            native_speed = None
            if speed is not None:
                native_speed = convert_speed(speed, speed_unit, self._speed_unit)
            if native_distance == 0:
                logger.debug("Zero distance %s is a no-op", primitive.value)
                return
            self._run_motion(Trigger.MOVE, primitive, native_distance, native_speed)

    def _rotate(self, degrees: float, direction: int) -> None:
        """Shared implementation of both rotations; direction is -1 or 1."""
        with self._session():
            self._state_machine.check(Trigger.MOVE)
            signed = math.fmod(direction * require_degrees(degrees), 360.0)
            if signed == 0:
                logger.debug("Rotation by %s degrees is a no-op", degrees)
                return
            self._run_motion(Trigger.MOVE, MotionPrimitive.ROTATE, signed)
            self._heading = (self._heading + signed) % 360.0

    def _current_snapshot(self) -> TelemetrySnapshot:
        """Cached snapshot if fresh (or if the drone is busy), else refreshed."""
        snapshot = self._telemetry.get()
        if snapshot is not None and (not self._telemetry.is_stale() or self.busy):
            return snapshot
        return self.refresh_telemetry()

    def _read_raw(self) -> RawTelemetry:
        """Read the adapter's telemetry on the worker thread."""
        if threading.current_thread() is self._worker:
            # A listener running inside an adapter call
            raise SessionBusy("Telemetry cannot be read from inside a running command")
        if self.busy:
            raise SessionBusy("Telemetry cannot be read while a command is running")
        future = self._executor.submit(self._adapter.read_telemetry)
        timeout = self._config.command_timeout
        try:
            return future.result(timeout=timeout)
        except Exception as exc:
            if future.done():
                raise translate_adapter_error(exc, "read_telemetry") from exc
            logger.error("read_telemetry did not complete within %ss", timeout)
            raise CommandTimeout(
                f"read_telemetry did not complete within {timeout}s"
            ) from None

    def _bind_worker(self) -> None:
        self._worker = threading.current_thread()

    def _release_transport(self, reason: str) -> None:
        """Tear the adapter's link down; failures are logged, never raised."""
        try:
            self._adapter.disconnect()
        except Exception:
            adapter_logger.warning(
                "Transport teardown failed during %s", reason, exc_info=True
            )

    @staticmethod
    def _reading(value: Any, field: str, capability: Capability | None = None) -> Any:
        if is_unsupported(value):
            if capability is not None:
                raise UnsupportedCapability(capability)
            raise HardwareFault(f"Drone cannot report its {field}")
        if value is None:
            raise HardwareFault(f"Drone did not report its {field}")
        return value

    def _normalize(self, raw: RawTelemetry, captured_at: float) -> TelemetrySnapshot:
        """Convert raw telemetry to canonical units and mark unsupported fields."""
        registry = self._registry

        battery = raw.battery
        if isinstance(battery, (int, float)) and not isinstance(battery, bool):
            battery = min(100, max(0, int(round(battery))))

        height = raw.height
        if isinstance(height, (int, float)):
            height = convert_length(height, self._length_unit, LengthUnit.METER)

        temperature = raw.temperature
        if not registry.supports(Capability.TEMPERATURE_SENSOR):
            temperature = UNSUPPORTED
        elif isinstance(temperature, (int, float)):
            temperature = float(temperature)

        position = raw.position
        if not registry.supports(Capability.POSITION_TRACKING):
            position = UNSUPPORTED
        elif isinstance(position, Position):
            position = position.to(LengthUnit.METER)

        speed = raw.speed
        if not registry.supports(Capability.EXACT_SPEED):
            speed = UNSUPPORTED
        elif isinstance(speed, (int, float)):
            speed = convert_speed(speed, self._speed_unit, SpeedUnit.METERS_PER_SECOND)

        speed_level = raw.speed_level
        if not registry.supports(Capability.SPEED_LEVELS):
            speed_level = UNSUPPORTED

        return TelemetrySnapshot(
            battery=battery,
            height=height,
            temperature=temperature,
            position=position,
            speed=speed,
            speed_level=speed_level,
            flight_state=self._state_machine.current,
            movement_state=self._movement_state,
            captured_at=captured_at,
        )

    def _set_movement(self, state: MovementState) -> None:
        self._movement_state = state
        self.notify_attribute_listeners("movement_state", state, cache=True)

    # ===== Callbacks =====

    def _on_flight_state_change(self, old: FlightState, new: FlightState) -> None:
        self.notify_attribute_listeners("flight_state", new, cache=True)

    def _on_telemetry_update(self, snapshot: TelemetrySnapshot) -> None:
        self.notify_attribute_listeners("telemetry", snapshot)

    def _handle_state_changed(self, event: FlightStateChanged) -> None:
        """Apply a state change the hardware made on its own."""
        self._state_machine.force(event.state, event.reason)
        if not event.state.is_airborne:
            self._set_movement(MovementState.STATIONARY)
        if event.state is FlightState.DISCONNECTED:
            self._release_transport("pushed disconnect")
            self._video_active = False
        self._telemetry.invalidate()

    def _handle_connection_lost(self, event: ConnectionLost) -> None:
        if self._state_machine.current is FlightState.DISCONNECTED:
            return
        adapter_logger.error("Link to drone lost: %s", event.reason or "no reason given")
        self._release_transport("link loss")
        self._video_active = False
        self._set_movement(MovementState.STATIONARY)
        self._telemetry.invalidate()
        self._state_machine.force(FlightState.DISCONNECTED, event.reason or "connection lost")

    def _handle_telemetry(self, event: TelemetryReceived) -> None:
        if self._state_machine.current is FlightState.DISCONNECTED:
            return
        self._telemetry.update(self._normalize(event.telemetry, event.timestamp))
