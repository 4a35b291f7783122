"""Tests covering the event bus adapters publish on."""

from __future__ import annotations

from universaldrone import (
    ConnectionLost,
    EventBus,
    EventPriority,
    FlightState,
    FlightStateChanged,
)


def test_handlers_run_in_priority_order() -> None:
    """HIGH handlers run before NORMAL before LOW."""

    bus = EventBus()
    order: list[str] = []
    bus.subscribe(ConnectionLost, lambda e: order.append("low"), EventPriority.LOW)
    bus.subscribe(ConnectionLost, lambda e: order.append("high"), EventPriority.HIGH)
    bus.subscribe(ConnectionLost, lambda e: order.append("normal"))

    bus.publish(ConnectionLost("test"))

    assert order == ["high", "normal", "low"]


def test_events_route_by_class() -> None:
    """A handler only sees the event class it subscribed to."""

    bus = EventBus()
    states: list[FlightStateChanged] = []
    bus.subscribe(FlightStateChanged, states.append)

    bus.publish(ConnectionLost("ignored"))
    bus.publish(FlightStateChanged(FlightState.ON_GROUND, "auto-land"))

    assert [e.state for e in states] == [FlightState.ON_GROUND]
    assert states[0].reason == "auto-land"


def test_unsubscribe_stops_delivery() -> None:
    """The returned callable removes the subscription."""

    bus = EventBus()
    seen: list[object] = []
    unsubscribe = bus.subscribe(ConnectionLost, seen.append)

    unsubscribe()
    bus.publish(ConnectionLost())

    assert seen == []


def test_failing_handler_does_not_stop_others() -> None:
    """One broken handler is logged; the rest still run."""

    bus = EventBus()
    seen: list[object] = []

    def explode(event: object) -> None:
        raise RuntimeError("handler bug")

    bus.subscribe(ConnectionLost, explode, EventPriority.HIGH)
    bus.subscribe(ConnectionLost, seen.append)

    bus.publish(ConnectionLost())

    assert len(seen) == 1


def test_clear_removes_everything() -> None:
    bus = EventBus()
    seen: list[object] = []
    bus.subscribe(ConnectionLost, seen.append)

    bus.clear()
    bus.publish(ConnectionLost())

    assert seen == []
