"""Tests covering the command dispatcher's contract over the simulated drone."""

from __future__ import annotations

import math

import pytest

from conftest import make_session
from universaldrone import (
    AdapterPreconditionError,
    AlreadyConnected,
    Capability,
    CommandDispatcher,
    ConnectionFailed,
    ErrorKind,
    FlightState,
    FlightStateChanged,
    HardwareFault,
    InvalidArgument,
    InvalidStateTransition,
    LengthUnit,
    MotionPrimitive,
    MovementState,
    Position,
    PreconditionFailed,
    PreconditionReason,
    SimulatedAdapter,
    UnknownUnit,
    UnsupportedCapability,
)
from universaldrone.flight_control.state_machine import TRANSITIONS, Trigger


def test_end_to_end_flight() -> None:
    """Connect, take off, fly to a point, land and disconnect."""

    drone, sim = make_session(
        capabilities={
            Capability.ABSOLUTE_POSITIONING,
            Capability.EXACT_SPEED,
            Capability.POSITION_TRACKING,
        }
    )
    states: list[FlightState] = []
    drone.add_attribute_listener("flight_state", lambda _, __, value: states.append(value))

    drone.connect()
    drone.take_off()
    drone.move_to(1, 0, 0, "m")
    position = drone.get_current_position("cm")
    drone.land()
    drone.disconnect()

    assert position == Position(100.0, 0.0, 0.0, LengthUnit.CENTIMETER)
    assert states == [
        FlightState.CONNECTED,
        FlightState.TAKING_OFF,
        FlightState.HOVERING,
        FlightState.FLYING,
        FlightState.LANDING,
        FlightState.ON_GROUND,
        FlightState.DISCONNECTED,
    ]
    assert [p for p, _, _ in sim.motions] == [
        MotionPrimitive.TAKEOFF,
        MotionPrimitive.MOVE_TO_ABSOLUTE,
        MotionPrimitive.LAND,
    ]
    drone.close()


def test_move_forward_before_takeoff_fails(connected: CommandDispatcher, sim: SimulatedAdapter) -> None:
    """Moving on the ground is rejected without touching the hardware."""

    calls_before = list(sim.calls)

    with pytest.raises(InvalidStateTransition) as excinfo:
        connected.move_forward(50)

    assert excinfo.value.kind is ErrorKind.INVALID_STATE_TRANSITION
    assert connected.flight_state is FlightState.CONNECTED
    assert sim.calls == calls_before


@pytest.mark.parametrize(
    "command",
    [
        lambda d: d.take_off(),
        lambda d: d.land(),
        lambda d: d.move_forward(10),
        lambda d: d.move_up(10),
        lambda d: d.rotate_right(90),
        lambda d: d.hover(1),
        lambda d: d.move_to(1, 1, 1),
        lambda d: d.set_speed(10),
        lambda d: d.start_video(),
        lambda d: d.get_battery(),
        lambda d: d.get_height(),
        lambda d: d.refresh_telemetry(),
    ],
)
def test_commands_on_disconnected_session_make_no_adapter_calls(
    drone: CommandDispatcher, sim: SimulatedAdapter, command
) -> None:
    """Illegal commands fail before reaching the adapter."""

    with pytest.raises(InvalidStateTransition):
        command(drone)

    assert drone.flight_state is FlightState.DISCONNECTED
    assert sim.calls == []


OPERATIONS = {
    "take_off": (Trigger.TAKEOFF, lambda d: d.take_off()),
    "land": (Trigger.LAND, lambda d: d.land()),
    "move_forward": (Trigger.MOVE, lambda d: d.move_forward(10)),
    "move_down": (Trigger.MOVE, lambda d: d.move_down(10)),
    "rotate_left": (Trigger.MOVE, lambda d: d.rotate_left(90)),
    "move_to": (Trigger.MOVE, lambda d: d.move_to(1, 1, 1)),
    "hover": (Trigger.HOVER, lambda d: d.hover(1)),
    "set_speed": (Trigger.COMMAND, lambda d: d.set_speed(10)),
    "set_speed_level": (Trigger.COMMAND, lambda d: d.set_speed_level(3)),
    "start_video": (Trigger.COMMAND, lambda d: d.start_video()),
    "stop_video": (Trigger.COMMAND, lambda d: d.stop_video()),
}

ILLEGAL_COMMANDS = [
    (state, name)
    for state in FlightState
    if state is not FlightState.DISCONNECTED
    for name, (trigger, _) in OPERATIONS.items()
    if (state, trigger) not in TRANSITIONS
]


def bring_to(drone: CommandDispatcher, sim: SimulatedAdapter, state: FlightState) -> None:
    """Drive a fresh session into ``state``; transitional states are pushed."""

    drone.connect()
    if state in (FlightState.HOVERING, FlightState.FLYING, FlightState.ON_GROUND):
        drone.take_off()
    if state is FlightState.FLYING:
        drone.move_forward(10)
    if state is FlightState.ON_GROUND:
        drone.land()
    if state in (FlightState.TAKING_OFF, FlightState.LANDING):
        sim.publish(FlightStateChanged(state, "held for test"))
    assert drone.flight_state is state


@pytest.mark.parametrize("state,name", ILLEGAL_COMMANDS)
def test_illegal_commands_make_no_adapter_calls(
    drone: CommandDispatcher, sim: SimulatedAdapter, state: FlightState, name: str
) -> None:
    """Every command the flight state forbids fails before reaching the adapter."""

    bring_to(drone, sim, state)
    calls_before = list(sim.calls)
    _, command = OPERATIONS[name]

    with pytest.raises(InvalidStateTransition):
        command(drone)

    assert drone.flight_state is state
    assert sim.calls == calls_before


def test_illegal_command_table_covers_every_connected_state() -> None:
    assert {state for state, _ in ILLEGAL_COMMANDS} == set(FlightState) - {FlightState.DISCONNECTED}
    assert (FlightState.HOVERING, "take_off") in ILLEGAL_COMMANDS
    assert (FlightState.TAKING_OFF, "take_off") in ILLEGAL_COMMANDS
    assert (FlightState.ON_GROUND, "land") in ILLEGAL_COMMANDS


def test_state_getters_are_always_legal(drone: CommandDispatcher) -> None:
    assert drone.get_flight_state() is FlightState.DISCONNECTED
    assert drone.get_movement_state() is MovementState.STATIONARY


def test_connect_twice_is_already_connected(connected: CommandDispatcher) -> None:
    """A second connect keeps the first session."""

    with pytest.raises(AlreadyConnected):
        connected.connect()
    assert connected.flight_state is FlightState.CONNECTED


def test_unreachable_drone_fails_to_connect() -> None:
    """Transport failures become ConnectionFailed and leave the session disconnected."""

    drone, _ = make_session(reachable=False)

    with pytest.raises(ConnectionFailed) as excinfo:
        drone.connect()

    assert excinfo.value.kind is ErrorKind.CONNECTION_FAILED
    assert excinfo.value.cause is not None
    assert drone.flight_state is FlightState.DISCONNECTED
    drone.close()


def test_move_to_requires_absolute_positioning() -> None:
    """Dead-reckoning drones refuse absolute moves without moving."""

    drone, sim = make_session(capabilities={Capability.POSITION_TRACKING})
    drone.connect()
    drone.take_off()

    with pytest.raises(UnsupportedCapability) as excinfo:
        drone.move_to(1, 0, 0)

    assert excinfo.value.capability is Capability.ABSOLUTE_POSITIONING
    assert [p for p, _, _ in sim.motions] == [MotionPrimitive.TAKEOFF]
    assert drone.flight_state is FlightState.HOVERING
    drone.close()


@pytest.mark.parametrize("degrees", [0, 360])
def test_full_and_zero_rotations_are_no_ops(airborne: CommandDispatcher, sim: SimulatedAdapter, degrees: int) -> None:
    """Rotating by 0 or 360 degrees sends nothing and keeps the state."""

    motions_before = list(sim.motions)

    airborne.rotate_left(degrees)
    airborne.rotate_right(degrees)

    assert sim.motions == motions_before
    assert airborne.flight_state is FlightState.HOVERING
    assert airborne.heading == 0.0


def test_rotation_direction_and_heading(airborne: CommandDispatcher, sim: SimulatedAdapter) -> None:
    """Left is counterclockwise (negative), right is clockwise (positive)."""

    airborne.rotate_left(90)
    assert sim.motions[-1] == (MotionPrimitive.ROTATE, -90.0, None)
    assert airborne.heading == 270.0

    airborne.rotate_right(135)
    assert sim.motions[-1] == (MotionPrimitive.ROTATE, 135.0, None)
    assert airborne.heading == 45.0
    assert airborne.flight_state is FlightState.FLYING


@pytest.mark.parametrize("degrees", [-1, 360.5, math.nan, "90", True])
def test_rotation_outside_domain_is_invalid(airborne: CommandDispatcher, degrees: object) -> None:
    with pytest.raises(InvalidArgument):
        airborne.rotate_right(degrees)  # type: ignore[arg-type]


def test_relative_moves_convert_to_native_units(airborne: CommandDispatcher, sim: SimulatedAdapter) -> None:
    """Caller units are converted to the adapter's centimetres."""

    airborne.move_forward(1, "m")
    airborne.move_left(12, "in", speed=1, speed_unit="m/s")
    airborne.move_up(50)

    forward, left, up = sim.motions[-3:]
    assert forward[0] is MotionPrimitive.FORWARD
    assert forward[1] == pytest.approx(100.0)
    assert forward[2] is None
    assert left[0] is MotionPrimitive.LEFT
    assert left[1] == pytest.approx(30.48)
    assert left[2] == pytest.approx(100.0)
    assert up == (MotionPrimitive.UP, 50.0, None)
    assert airborne.flight_state is FlightState.FLYING


def test_dead_reckoning_follows_heading(airborne: CommandDispatcher) -> None:
    """After turning right, forward is +x."""

    airborne.rotate_right(90)
    airborne.move_forward(1, "m")
    airborne.move_down(50, "cm")

    position = airborne.get_current_position("m")
    assert position.unit is LengthUnit.METER
    assert (position.x, position.y, position.z) == pytest.approx((1.0, 0.0, 0.5))
    assert airborne.get_height("cm") == pytest.approx(50.0)


def test_zero_distance_is_a_no_op(airborne: CommandDispatcher, sim: SimulatedAdapter) -> None:
    motions_before = list(sim.motions)

    airborne.move_backward(0)

    assert sim.motions == motions_before
    assert airborne.flight_state is FlightState.HOVERING


@pytest.mark.parametrize(
    "kwargs,error",
    [
        ({"distance": -10}, InvalidArgument),
        ({"distance": math.inf}, InvalidArgument),
        ({"distance": "10"}, InvalidArgument),
        ({"distance": 10, "unit": "furlong"}, UnknownUnit),
        ({"distance": 10, "speed": 0}, InvalidArgument),
        ({"distance": 10, "speed": 10, "speed_unit": "knots"}, UnknownUnit),
    ],
)
def test_invalid_move_arguments_never_reach_the_adapter(
    airborne: CommandDispatcher, sim: SimulatedAdapter, kwargs: dict, error: type
) -> None:
    motions_before = list(sim.motions)

    with pytest.raises(error):
        airborne.move_right(**kwargs)

    assert sim.motions == motions_before
    assert airborne.flight_state is FlightState.HOVERING


def test_exact_speed_drone_rejects_speed_levels(airborne: CommandDispatcher, sim: SimulatedAdapter) -> None:
    """Exact-speed drones take set_speed and refuse set_speed_level."""

    airborne.set_speed(1, "m/s")

    assert ("set_speed", (100.0,)) in sim.calls
    assert airborne.get_speed("m/s") == pytest.approx(1.0)
    assert airborne.get_speed() == pytest.approx(100.0)
    with pytest.raises(UnsupportedCapability):
        airborne.set_speed_level(3)
    with pytest.raises(UnsupportedCapability):
        airborne.get_speed_level()


def test_speed_level_drone_rejects_exact_speed() -> None:
    """Level-based drones take set_speed_level and refuse exact speeds."""

    drone, sim = make_session(capabilities={Capability.SPEED_LEVELS}, speed_level_range=(1, 5))
    drone.connect()
    drone.take_off()

    drone.set_speed_level(4)

    assert drone.get_speed_level() == 4
    assert ("set_speed_level", (4,)) in sim.calls
    with pytest.raises(UnsupportedCapability):
        drone.set_speed(20)
    with pytest.raises(UnsupportedCapability):
        drone.get_speed()
    with pytest.raises(UnsupportedCapability):
        drone.move_forward(10, speed=20)
    for level in (0, 6, 2.5, True):
        with pytest.raises(InvalidArgument):
            drone.set_speed_level(level)  # type: ignore[arg-type]
    drone.close()


def test_declaring_both_speed_controls_is_rejected() -> None:
    with pytest.raises(InvalidArgument):
        CommandDispatcher(
            SimulatedAdapter(capabilities={Capability.EXACT_SPEED, Capability.SPEED_LEVELS})
        )


def test_low_battery_takeoff_is_a_precondition_failure() -> None:
    """The drone's refusal maps to PreconditionFailed and the state rolls back."""

    drone, _ = make_session(battery=5)
    drone.connect()

    with pytest.raises(PreconditionFailed) as excinfo:
        drone.take_off()

    assert excinfo.value.reason is PreconditionReason.LOW_BATTERY
    assert isinstance(excinfo.value.cause, AdapterPreconditionError)
    assert drone.flight_state is FlightState.CONNECTED
    assert drone.movement_state is MovementState.STATIONARY
    drone.close()


def test_hardware_failure_keeps_native_cause(airborne: CommandDispatcher, sim: SimulatedAdapter) -> None:
    """Unknown adapter exceptions become HardwareFault; the state is unchanged."""

    airborne.move_forward(10)
    stall = RuntimeError("motor stall")
    sim.fail_next(MotionPrimitive.FORWARD, stall)

    with pytest.raises(HardwareFault) as excinfo:
        airborne.move_forward(10)

    assert excinfo.value.cause is stall
    assert excinfo.value.__cause__ is stall
    assert airborne.flight_state is FlightState.FLYING
    assert airborne.movement_state is MovementState.STATIONARY


def test_failed_landing_is_not_retried(airborne: CommandDispatcher, sim: SimulatedAdapter) -> None:
    """A failed landing restores the prior state and sends LAND once."""

    sim.fail_next(MotionPrimitive.LAND, RuntimeError("gps glitch"))

    with pytest.raises(HardwareFault):
        airborne.land()

    assert airborne.flight_state is FlightState.HOVERING
    assert [p for p, _, _ in sim.motions].count(MotionPrimitive.LAND) == 1


def test_descending_below_ground_is_a_hardware_fault(airborne: CommandDispatcher) -> None:
    with pytest.raises(HardwareFault):
        airborne.move_down(5, "m")
    assert airborne.flight_state is FlightState.HOVERING


def test_hover_reaches_hovering(airborne: CommandDispatcher, sim: SimulatedAdapter) -> None:
    """Hover from flight goes back to HOVERING and passes the duration on."""

    airborne.move_forward(10)
    airborne.hover(2.5)

    assert sim.motions[-1] == (MotionPrimitive.HOVER, 2.5, None)
    assert airborne.flight_state is FlightState.HOVERING
    with pytest.raises(InvalidArgument):
        airborne.hover(-1)


def test_telemetry_is_normalized(airborne: CommandDispatcher) -> None:
    """Readings come back in the caller's units."""

    assert airborne.get_battery() == 100
    assert airborne.get_height() == pytest.approx(100.0)
    assert airborne.get_height("m") == pytest.approx(1.0)
    assert airborne.get_temperature() == pytest.approx(40.0)
    snapshot = airborne.telemetry
    assert snapshot is not None
    assert snapshot.flight_state is FlightState.HOVERING


def test_missing_capabilities_gate_getters() -> None:
    """Unsupported readings fail explicitly instead of returning a guess."""

    drone, _ = make_session(capabilities=())
    drone.connect()

    with pytest.raises(UnsupportedCapability):
        drone.get_temperature()
    with pytest.raises(UnsupportedCapability):
        drone.get_current_position()
    assert drone.get_battery() == 100
    drone.close()


def test_battery_is_clamped() -> None:
    drone, sim = make_session()
    drone.connect()
    sim.battery = 140

    assert drone.refresh_telemetry().battery == 100
    drone.close()


def test_video_requires_flight_and_capability(connected: CommandDispatcher, sim: SimulatedAdapter) -> None:
    """Video is a flight command gated on VIDEO."""

    with pytest.raises(InvalidStateTransition):
        connected.start_video()

    connected.take_off()
    connected.start_video()
    assert connected.video_active
    assert sim.video_active
    connected.stop_video()
    assert not connected.video_active

    drone, _ = make_session(capabilities=())
    drone.connect()
    drone.take_off()
    with pytest.raises(UnsupportedCapability):
        drone.start_video()
    drone.close()


def test_movement_state_is_reported(airborne: CommandDispatcher) -> None:
    """Listeners see the motion start and finish."""

    seen: list[MovementState] = []
    airborne.add_attribute_listener("movement_state", lambda _, __, value: seen.append(value))

    airborne.move_forward(10)
    airborne.rotate_left(45)

    assert seen == [
        MovementState.MOVING_FORWARD,
        MovementState.STATIONARY,
        MovementState.ROTATING,
        MovementState.STATIONARY,
    ]


def test_native_units_other_than_centimetres() -> None:
    """Adapters in imperial units receive imperial values."""

    drone, sim = make_session(length_unit="in", speed_unit="in/s")
    drone.connect()
    drone.take_off()

    drone.move_forward(2.54, "cm", speed=0.0254, speed_unit="m/s")

    primitive, value, speed = sim.motions[-1]
    assert primitive is MotionPrimitive.FORWARD
    assert value == pytest.approx(1.0)
    assert speed == pytest.approx(1.0)
    assert drone.get_height("m") == pytest.approx(1.0)
    drone.close()


def test_disconnect_while_airborne_is_allowed(airborne: CommandDispatcher, sim: SimulatedAdapter) -> None:
    airborne.disconnect()

    assert airborne.flight_state is FlightState.DISCONNECTED
    assert not sim.connected


def test_disconnect_never_raises(connected: CommandDispatcher, sim: SimulatedAdapter, caplog) -> None:
    """Teardown errors are logged and the session still ends disconnected."""

    sim.fail_next("disconnect", OSError("socket already closed"))

    with caplog.at_level("WARNING", logger="adapter"):
        connected.disconnect()

    assert connected.flight_state is FlightState.DISCONNECTED
    assert "teardown failed" in caplog.text


def test_reconnect_resets_session(airborne: CommandDispatcher) -> None:
    """A new connection starts from a clean heading and movement state."""

    airborne.rotate_right(90)
    airborne.disconnect()
    airborne.connect()

    assert airborne.flight_state is FlightState.CONNECTED
    assert airborne.heading == 0.0


def test_closed_session_cannot_reconnect() -> None:
    """close() is final; the context manager calls it."""

    with CommandDispatcher(SimulatedAdapter()) as drone:
        drone.connect()
        drone.take_off()

    assert drone.flight_state is FlightState.DISCONNECTED
    with pytest.raises(ConnectionFailed):
        drone.connect()
