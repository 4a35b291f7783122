"""
MAVLink Drone Adapter.

This module provides the adapter for MAVLink autopilots (ArduPilot in
GUIDED mode and compatible firmware), built on pymavlink.

One receive thread per connection owns the pymavlink socket: it keeps
``master.messages`` current, notices disarms and heartbeat loss while the
session is idle, and publishes them on the event bus. Commands only send
and then watch ``master.messages``.

The adapter's reference frame is the autopilot's local frame turned
upright: x east, y north, z up, in metres from the EKF origin. Relative
moves are resolved against the vehicle's current yaw before they are
sent, so the autopilot only ever receives absolute local targets.
"""

from __future__ import annotations

import math
import threading
from collections import deque
from typing import Any, Callable

import monotonic
from pymavlink import mavutil

from universaldrone.adapters.base import BaseAdapter
from universaldrone.adapters.registry import ADAPTERS
from universaldrone.core.events import ConnectionLost, FlightStateChanged
from universaldrone.core.exceptions import (
    AdapterConnectionError,
    AdapterError,
    AdapterPreconditionError,
    PreconditionReason,
)
from universaldrone.models.capability import Capability
from universaldrone.models.motion import TRANSLATIONS, MotionPrimitive
from universaldrone.models.position import Position
from universaldrone.models.state import FlightState
from universaldrone.models.telemetry import UNSUPPORTED, RawTelemetry
from universaldrone.models.units import LengthUnit, SpeedUnit

MAVLINK_CAPABILITIES = frozenset(
    {
        Capability.ABSOLUTE_POSITIONING,
        Capability.EXACT_SPEED,
        Capability.POSITION_TRACKING,
        Capability.TEMPERATURE_SENSOR,
    }
)

# Position-only and velocity-only SET_POSITION_TARGET_LOCAL_NED type masks
POSITION_TYPE_MASK = 0b0000111111111000
VELOCITY_TYPE_MASK = 0b0000111111000111

# (forward, right, down) body offsets of the translational primitives
_BODY_OFFSETS: dict[MotionPrimitive, tuple[float, float, float]] = {
    MotionPrimitive.FORWARD: (1.0, 0.0, 0.0),
    MotionPrimitive.BACKWARD: (-1.0, 0.0, 0.0),
    MotionPrimitive.RIGHT: (0.0, 1.0, 0.0),
    MotionPrimitive.LEFT: (0.0, -1.0, 0.0),
    MotionPrimitive.UP: (0.0, 0.0, -1.0),
    MotionPrimitive.DOWN: (0.0, 0.0, 1.0),
}

# Heartbeats from these are not from the vehicle
_NON_VEHICLE_TYPES = (
    mavutil.mavlink.MAV_TYPE_GCS,
    mavutil.mavlink.MAV_TYPE_GIMBAL,
    mavutil.mavlink.MAV_TYPE_ADSB,
    mavutil.mavlink.MAV_TYPE_ONBOARD_CONTROLLER,
)

_PREARM_REASONS = (
    ("batt", PreconditionReason.LOW_BATTERY),
    ("temp", PreconditionReason.OVERHEAT),
    ("calibrat", PreconditionReason.NOT_CALIBRATED),
    ("compass", PreconditionReason.NOT_CALIBRATED),
    ("accel", PreconditionReason.NOT_CALIBRATED),
    ("proximity", PreconditionReason.OBSTACLE),
)


def prearm_reason(text: str) -> PreconditionReason:
    """
    Classify an autopilot pre-arm failure message.

    Example:
        >>> prearm_reason("PreArm: Battery below minimum arming voltage")
        <PreconditionReason.LOW_BATTERY: 'low_battery'>
    """
    lowered = text.lower()
    for needle, reason in _PREARM_REASONS:
        if needle in lowered:
            return reason
    return PreconditionReason.OTHER


@ADAPTERS.register
class MAVLinkAdapter(BaseAdapter):
    """
    Adapter for MAVLink vehicles flown in a guided mode.

    Args:
        connection_string: pymavlink connection string. Examples:
            - "udpin:0.0.0.0:14550" (UDP input)
            - "tcp:127.0.0.1:5760" (TCP)
            - "/dev/ttyUSB0" (Serial)
        baud: Baud rate for serial connections
        heartbeat_timeout: Seconds to wait for a heartbeat on connect, and
                           without one before the link counts as lost
        takeoff_altitude: Takeoff altitude in metres
        motion_timeout: Seconds a motion may take before it fails
        arrival_tolerance: Distance in metres counted as arrived
        yaw_tolerance: Heading error in degrees counted as arrived
        guided_mode: Name of the autopilot mode accepting guided commands
        source_system: MAVLink source system ID
        source_component: MAVLink source component ID
        rate: Requested telemetry rate (Hz)
        block: Wait for each motion to complete; without it commands
               return as soon as they are sent
        poll_interval: Seconds between checks while waiting
    """

    adapter_name = "mavlink"

    def __init__(
        self,
        connection_string: str = "udpin:0.0.0.0:14550",
        baud: int = 115200,
        heartbeat_timeout: float = 30.0,
        takeoff_altitude: float = 1.0,
        motion_timeout: float = 60.0,
        arrival_tolerance: float = 0.2,
        yaw_tolerance: float = 5.0,
        guided_mode: str = "GUIDED",
        source_system: int = 255,
        source_component: int = 0,
        rate: int = 4,
        block: bool = True,
        poll_interval: float = 0.1,
    ) -> None:
        super().__init__(
            MAVLINK_CAPABILITIES,
            LengthUnit.METER,
            SpeedUnit.METERS_PER_SECOND,
        )
        self._connection_string = connection_string
        self._baud = baud
        self._heartbeat_timeout = heartbeat_timeout
        self._takeoff_altitude = takeoff_altitude
        self._motion_timeout = motion_timeout
        self._arrival_tolerance = arrival_tolerance
        self._yaw_tolerance = yaw_tolerance
        self._guided_mode = guided_mode
        self._source_system = source_system
        self._source_component = source_component
        self._rate = rate
        self._block = block
        self._poll_interval = poll_interval

        self._master: Any = None
        self._last_heartbeat = 0.0
        self._link_lost = False
        self._airborne = False
        self._landing = False
        self._speed: float | None = None
        self._status_texts: deque[str] = deque(maxlen=20)
        self._stop = threading.Event()
        self._receiver: threading.Thread | None = None

    @property
    def master(self) -> Any:
        """The pymavlink connection, None while disconnected."""
        return self._master

    # ===== Connection =====

    def connect(self) -> None:
        if self._master is not None:
            self.disconnect()
        self._logger.info("Connecting to vehicle on: %s", self._connection_string)
        try:
            master = mavutil.mavlink_connection(
                self._connection_string,
                baud=self._baud,
                source_system=self._source_system,
                source_component=self._source_component,
            )
        except OSError as exc:
            raise AdapterConnectionError(
                f"Cannot open {self._connection_string}: {exc}"
            ) from exc

        heartbeat = master.wait_heartbeat(timeout=self._heartbeat_timeout)
        if heartbeat is None:
            master.close()
            raise AdapterConnectionError(
                f"No heartbeat received in {self._heartbeat_timeout}s"
            )

        self._master = master
        self._last_heartbeat = monotonic.monotonic()
        self._link_lost = False
        self._airborne = False
        self._landing = False
        self._speed = None
        self._status_texts.clear()
        self._receiver = threading.Thread(
            target=self._receive_loop,
            args=(master,),
            name="universaldrone-mavlink-in",
            daemon=True,
        )
        self._receiver.start()
        self._request_data_streams()
        self._logger.info(
            "Connected to vehicle (system %d, component %d)",
            master.target_system,
            master.target_component,
        )

    def disconnect(self) -> None:
        master, self._master = self._master, None
        receiver, self._receiver = self._receiver, None
        self._stop.set()
        # The receive thread may be the caller, reporting a lost link
        if receiver is not None and receiver is not threading.current_thread():
            receiver.join(timeout=2.0)
        if master is not None:
            master.close()
            self._logger.info("Closed link to %s", self._connection_string)

    # ===== Motion =====

    def execute_motion(
        self,
        primitive: MotionPrimitive,
        value: Any,
        speed: float | None,
    ) -> None:
        self._require_master()
        if primitive is MotionPrimitive.HOVER and not value:
            self._stop.set()
            self._send_velocity(0.0, 0.0, 0.0)
            return

        self._stop.clear()
        if primitive is MotionPrimitive.TAKEOFF:
            self._takeoff()
        elif primitive is MotionPrimitive.LAND:
            self._land()
        elif primitive in TRANSLATIONS:
            self._translate(primitive, value, speed)
        elif primitive is MotionPrimitive.ROTATE:
            self._yaw(value)
        elif primitive is MotionPrimitive.HOVER:
            self._send_velocity(0.0, 0.0, 0.0)
            if self._block and self._stop.wait(value):
                raise AdapterError("hover interrupted before completion")
        elif primitive is MotionPrimitive.MOVE_TO_ABSOLUTE:
            self._goto(value.to(LengthUnit.METER), speed)
        else:
            raise AdapterError(f"Unknown motion {primitive}")

    def set_speed(self, speed: float) -> None:
        self._require_master()
        self._change_speed(speed)

    def _takeoff(self) -> None:
        master = self._master
        self._set_guided()
        if not master.motors_armed():
            self._status_texts.clear()
            master.arducopter_arm()
            self._wait_until(master.motors_armed, "motors to arm", self._check_prearm)
        self._command_long(
            mavutil.mavlink.MAV_CMD_NAV_TAKEOFF,
            0, 0, 0, 0, 0, 0,
            self._takeoff_altitude,
        )
        target = self._takeoff_altitude * 0.95
        self._wait_until(
            lambda: (self._relative_altitude() or 0.0) >= target,
            "takeoff altitude",
        )
        self._airborne = True

    def _land(self) -> None:
        master = self._master
        self._landing = True
        try:
            self._command_long(mavutil.mavlink.MAV_CMD_NAV_LAND, 0, 0, 0, 0, 0, 0, 0)
            self._wait_until(lambda: not master.motors_armed(), "landing")
        finally:
            self._landing = False
        self._airborne = False

    def _translate(
        self,
        primitive: MotionPrimitive,
        distance: float,
        speed: float | None,
    ) -> None:
        north, east, down = self._local_position()
        yaw = self._yaw_radians()
        fwd, right, dn = (axis * distance for axis in _BODY_OFFSETS[primitive])
        target = (
            north + fwd * math.cos(yaw) - right * math.sin(yaw),
            east + fwd * math.sin(yaw) + right * math.cos(yaw),
            down + dn,
        )
        if speed is not None:
            self._change_speed(speed)
        self._fly_to(*target)

    def _goto(self, position: Position, speed: float | None) -> None:
        if speed is not None:
            self._change_speed(speed)
        self._fly_to(position.y, position.x, -position.z)

    def _fly_to(self, north: float, east: float, down: float) -> None:
        self._master.mav.set_position_target_local_ned_send(
            0,  # time_boot_ms
            self._master.target_system,
            self._master.target_component,
            mavutil.mavlink.MAV_FRAME_LOCAL_NED,
            POSITION_TYPE_MASK,
            north,
            east,
            down,
            0, 0, 0,  # velocity (ignored)
            0, 0, 0,  # acceleration (ignored)
            0, 0,  # yaw, yaw_rate (ignored)
        )

        def arrived() -> bool:
            n, e, d = self._local_position()
            error = math.sqrt((n - north) ** 2 + (e - east) ** 2 + (d - down) ** 2)
            return error <= self._arrival_tolerance

        self._wait_until(arrived, f"arrival at N{north:.2f} E{east:.2f} D{down:.2f}")

    def _yaw(self, degrees: float) -> None:
        target = (math.degrees(self._yaw_radians()) + degrees) % 360.0
        self._command_long(
            mavutil.mavlink.MAV_CMD_CONDITION_YAW,
            abs(degrees),
            0,  # default yaw rate
            1 if degrees > 0 else -1,
            1,  # relative
            0, 0, 0,
        )

        def arrived() -> bool:
            current = math.degrees(self._yaw_radians()) % 360.0
            error = abs((current - target + 180.0) % 360.0 - 180.0)
            return error <= self._yaw_tolerance

        self._wait_until(arrived, f"heading {target:.0f}")

    def _send_velocity(self, vn: float, ve: float, vd: float) -> None:
        self._master.mav.set_position_target_local_ned_send(
            0,
            self._master.target_system,
            self._master.target_component,
            mavutil.mavlink.MAV_FRAME_LOCAL_NED,
            VELOCITY_TYPE_MASK,
            0, 0, 0,
            vn,
            ve,
            vd,
            0, 0, 0,
            0, 0,
        )

    def _change_speed(self, speed: float) -> None:
        self._command_long(
            mavutil.mavlink.MAV_CMD_DO_CHANGE_SPEED,
            1,  # groundspeed
            speed,
            -1,  # throttle (no change)
            0, 0, 0, 0,
        )
        self._speed = speed

    def _set_guided(self) -> None:
        mapping = self._master.mode_mapping() or {}
        mode_id = mapping.get(self._guided_mode.upper())
        if mode_id is None:
            raise AdapterError(f"Vehicle has no {self._guided_mode} mode")
        self._master.set_mode(mode_id)

    def _command_long(self, command: int, *params: float) -> None:
        self._master.mav.command_long_send(
            self._master.target_system,
            self._master.target_component,
            command,
            0,  # confirmation
            *params,
        )

    # ===== Telemetry =====

    def read_telemetry(self) -> RawTelemetry:
        messages = self._messages()

        battery = None
        sys_status = messages.get("SYS_STATUS")
        if sys_status is not None and sys_status.battery_remaining >= 0:
            battery = sys_status.battery_remaining

        position = None
        local = messages.get("LOCAL_POSITION_NED")
        if local is not None:
            position = Position(local.y, local.x, -local.z, LengthUnit.METER)

        temperature = None
        pressure = messages.get("SCALED_PRESSURE")
        if pressure is not None:
            temperature = pressure.temperature / 100.0

        return RawTelemetry(
            battery=battery,
            height=self._relative_altitude(),
            temperature=temperature,
            position=position,
            speed=self._speed,
            speed_level=UNSUPPORTED,
        )

    def _relative_altitude(self) -> float | None:
        messages = self._messages()
        global_position = messages.get("GLOBAL_POSITION_INT")
        if global_position is not None:
            return global_position.relative_alt / 1000.0
        local = messages.get("LOCAL_POSITION_NED")
        if local is not None:
            return -local.z
        return None

    def _local_position(self) -> tuple[float, float, float]:
        local = self._messages().get("LOCAL_POSITION_NED")
        if local is None:
            raise AdapterError("Vehicle has not reported a local position")
        return (local.x, local.y, local.z)

    def _yaw_radians(self) -> float:
        attitude = self._messages().get("ATTITUDE")
        if attitude is None:
            raise AdapterError("Vehicle has not reported its attitude")
        return attitude.yaw

    # ===== Link handling =====

    def _request_data_streams(self) -> None:
        self._master.mav.request_data_stream_send(
            self._master.target_system,
            self._master.target_component,
            mavutil.mavlink.MAV_DATA_STREAM_ALL,
            self._rate,
            1,  # start
        )

    def _receive_loop(self, master: Any) -> None:
        """Receive thread body; runs until ``master`` is no longer the live link."""
        while self._master is master:
            try:
                msg = master.recv_match(blocking=True, timeout=self._poll_interval)
            except mavutil.mavlink.MAVError as exc:
                self._logger.debug("mav recv error: %s", exc)
                continue
            except OSError as exc:
                if self._master is master:
                    self._lose_link(f"Receive failed: {exc}")
                return
            if msg is not None:
                try:
                    self._handle_message(msg)
                except Exception:
                    self._logger.exception(
                        "Exception in message handler for %s", msg.get_type()
                    )
            self._check_link()

    def _handle_message(self, msg: Any) -> None:
        msg_type = msg.get_type()
        if msg_type == "HEARTBEAT":
            if msg.type in _NON_VEHICLE_TYPES:
                return
            self._last_heartbeat = monotonic.monotonic()
            armed = bool(msg.base_mode & mavutil.mavlink.MAV_MODE_FLAG_SAFETY_ARMED)
            if self._airborne and not armed and not self._landing:
                self._airborne = False
                self._logger.warning("Vehicle disarmed while airborne")
                self.publish(FlightStateChanged(FlightState.ON_GROUND, "motors disarmed"))
        elif msg_type == "STATUSTEXT":
            self._logger.info("Autopilot: %s", msg.text)
            self._status_texts.append(msg.text)

    def _check_link(self) -> None:
        silence = monotonic.monotonic() - self._last_heartbeat
        if silence > self._heartbeat_timeout:
            self._lose_link(f"No heartbeat for {silence:.1f}s")

    def _lose_link(self, reason: str) -> None:
        if self._link_lost:
            return
        self._link_lost = True
        self._logger.error("Link to vehicle lost: %s", reason)
        self.publish(ConnectionLost(reason))

    def _check_prearm(self) -> None:
        for text in tuple(self._status_texts):
            if "prearm" in text.lower().replace("-", ""):
                raise AdapterPreconditionError(text, reason=prearm_reason(text))

    def _wait_until(
        self,
        predicate: Callable[[], bool],
        description: str,
        on_poll: Callable[[], None] | None = None,
    ) -> None:
        """Poll until ``predicate`` holds; a no-op unless blocking."""
        if not self._block:
            return
        start = monotonic.monotonic()
        while True:
            if predicate():
                return
            if on_poll:
                on_poll()
            if self._link_lost:
                raise AdapterConnectionError(f"Link lost waiting for {description}")
            if (monotonic.monotonic() - start) > self._motion_timeout:
                raise AdapterError(
                    f"Timed out after {self._motion_timeout}s waiting for {description}"
                )
            if self._stop.wait(self._poll_interval):
                raise AdapterError(f"Interrupted waiting for {description}")

    def _require_master(self) -> None:
        if self._master is None:
            raise AdapterConnectionError("Not connected to a vehicle")

    def _messages(self) -> dict[str, Any]:
        """Latest message of each type, as kept by the receive thread."""
        master = self._master
        if master is None:
            raise AdapterConnectionError("Not connected to a vehicle")
        return master.messages
