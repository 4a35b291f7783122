"""Tests for attribute listeners on a session."""

from __future__ import annotations

from universaldrone import HasObservers


def test_cached_attributes_only_notify_on_change() -> None:
    session = HasObservers()
    seen: list[str] = []
    session.add_attribute_listener("flight_state", lambda _, __, value: seen.append(value))

    session.notify_attribute_listeners("flight_state", "hovering", cache=True)
    session.notify_attribute_listeners("flight_state", "hovering", cache=True)
    session.notify_attribute_listeners("flight_state", "flying", cache=True)

    assert seen == ["hovering", "flying"]


def test_decorator_registers_every_name_and_wildcard_sees_all() -> None:
    """The decorated function is returned so it can be removed later."""

    session = HasObservers()
    named: list[str] = []
    everything: list[str] = []

    @session.on_attribute(["flight_state", "movement_state"])
    def on_state(_, attr_name, value):
        named.append(attr_name)

    session.add_attribute_listener("*", lambda _, attr_name, __: everything.append(attr_name))

    session.notify_attribute_listeners("flight_state", 1)
    session.notify_attribute_listeners("movement_state", 2)
    session.notify_attribute_listeners("telemetry", 3)
    session.remove_attribute_listener("flight_state", on_state)
    session.notify_attribute_listeners("flight_state", 4)

    assert named == ["flight_state", "movement_state"]
    assert everything == ["flight_state", "movement_state", "telemetry", "flight_state"]


def test_failing_listener_does_not_stop_others(caplog) -> None:
    session = HasObservers()
    seen: list[int] = []

    def broken(*_):
        raise RuntimeError("boom")

    session.add_attribute_listener("telemetry", broken)
    session.add_attribute_listener("telemetry", lambda _, __, value: seen.append(value))

    session.notify_attribute_listeners("telemetry", 7)

    assert seen == [7]
    assert "Exception in attribute handler for telemetry" in caplog.text
