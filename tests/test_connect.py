"""Tests covering the adapter registry and the connect() shortcut."""

from __future__ import annotations

import pytest

from universaldrone import (
    ADAPTERS,
    AdapterRegistry,
    BaseAdapter,
    CommandDispatcher,
    ConnectionFailed,
    DroneAdapter,
    FlightState,
    InvalidArgument,
    MAVLinkAdapter,
    RawTelemetry,
    SimulatedAdapter,
    UnsupportedCapability,
    connect,
)


def test_bundled_adapters_are_registered() -> None:
    assert {"sim", "mavlink"} <= set(ADAPTERS.available_adapters())
    assert isinstance(ADAPTERS.create("SIM"), SimulatedAdapter)
    assert isinstance(ADAPTERS.create("mavlink", connection_string="tcp:127.0.0.1:5760"), MAVLinkAdapter)


def test_adapters_satisfy_the_protocol() -> None:
    assert isinstance(SimulatedAdapter(), DroneAdapter)
    assert isinstance(MAVLinkAdapter(), DroneAdapter)


def test_custom_adapter_registration() -> None:
    """Third-party drone families register the same way."""

    registry = AdapterRegistry()

    @registry.register
    class PaperPlane(BaseAdapter):
        adapter_name = "paper"

        def connect(self) -> None:
            pass

        def disconnect(self) -> None:
            pass

        def execute_motion(self, primitive, value, speed) -> None:
            pass

        def read_telemetry(self) -> RawTelemetry:
            return RawTelemetry(battery=100, height=0.0)

    assert list(registry.available_adapters()) == ["paper"]
    plane = registry.create("paper")
    assert plane.name == "paper"
    with pytest.raises(KeyError):
        registry.create("kite")

    drone = connect(plane)
    drone.take_off()
    with pytest.raises(UnsupportedCapability):
        drone.start_video()
    drone.close()


def test_connect_by_name() -> None:
    drone = connect("sim", battery=42)

    assert isinstance(drone, CommandDispatcher)
    assert drone.flight_state is FlightState.CONNECTED
    assert drone.get_battery() == 42
    drone.close()


def test_connect_with_instance() -> None:
    sim = SimulatedAdapter()
    drone = connect(sim)

    assert drone.adapter is sim
    drone.close()


def test_connect_rejects_unknown_names_and_stray_options() -> None:
    with pytest.raises(InvalidArgument) as excinfo:
        connect("tello-x")
    assert "sim" in str(excinfo.value)

    with pytest.raises(InvalidArgument):
        connect(SimulatedAdapter(), battery=3)


def test_failed_connect_is_not_retried() -> None:
    sim = SimulatedAdapter(reachable=False)

    with pytest.raises(ConnectionFailed):
        connect(sim)

    assert sim.calls == [("connect", ())]
    assert not sim.connected
