"""
Event Bus Implementation.

This module provides the event bus adapters use to push out-of-band
changes (auto-landing, link loss, unsolicited telemetry) into a session
without a command being in progress.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from enum import IntEnum
from typing import TYPE_CHECKING, Any, Callable

import monotonic

if TYPE_CHECKING:
    from universaldrone.models.state import FlightState
    from universaldrone.models.telemetry import RawTelemetry

logger = logging.getLogger(__name__)


class EventPriority(IntEnum):
    """Priority levels for event handlers."""

    HIGH = 0  # Processed first (e.g., flight state updates)
    NORMAL = 50  # Default priority
    LOW = 100  # Processed last (e.g., logging)


@dataclass(frozen=True)
class FlightStateChanged:
    """
    Event pushed when the hardware changed flight state on its own.

    Attributes:
        state: The flight state the drone is now in
        reason: Free-form description (e.g., "critical battery")
        timestamp: Monotonic timestamp when the change was detected
    """

    state: "FlightState"
    reason: str = ""
    timestamp: float = field(default_factory=monotonic.monotonic)


@dataclass(frozen=True)
class ConnectionLost:
    """Event pushed when the adapter lost its link to the drone."""

    reason: str = ""
    timestamp: float = field(default_factory=monotonic.monotonic)


@dataclass(frozen=True)
class TelemetryReceived:
    """
    Event pushed when the adapter received unsolicited telemetry.

    Attributes:
        telemetry: Raw telemetry in the adapter's native units
        timestamp: Monotonic timestamp when the telemetry was received
    """

    telemetry: "RawTelemetry"
    timestamp: float = field(default_factory=monotonic.monotonic)


@dataclass
class _Subscription:
    """Internal class representing a subscription."""

    handler: Callable[[Any], None]
    priority: EventPriority = EventPriority.NORMAL


class EventBus:
    """
    Central event bus routing adapter events to the session.

    Handlers subscribe to an event class; publishing an instance invokes
    every handler registered for that class, in priority order, outside the
    internal lock. A failing handler is logged and does not stop delivery.

    Example:
        >>> bus = EventBus()
        >>> def on_state(event: FlightStateChanged):
        ...     print(f"Drone is now {event.state}")
        >>> unsubscribe = bus.subscribe(FlightStateChanged, on_state)
        >>> # Later...
        >>> unsubscribe()  # Remove subscription
    """

    __slots__ = ("_handlers", "_lock")

    def __init__(self) -> None:
        self._lock = threading.RLock()
        # Map from event class to list of subscriptions
        self._handlers: dict[type, list[_Subscription]] = {}

    def subscribe(
        self,
        event_type: type,
        handler: Callable[[Any], None],
        priority: EventPriority = EventPriority.NORMAL,
    ) -> Callable[[], None]:
        """
        Subscribe to an event class.

        Args:
            event_type: The event class to subscribe to
                        (e.g., FlightStateChanged)
            handler: Callback function that receives the event
            priority: Handler priority (lower values = higher priority)

        Returns:
            Unsubscribe function - call it to remove the subscription
        """
        subscription = _Subscription(handler=handler, priority=priority)

        with self._lock:
            handlers = self._handlers.setdefault(event_type, [])
            handlers.append(subscription)
            handlers.sort(key=lambda s: s.priority)

        def unsubscribe() -> None:
            with self._lock:
                if event_type in self._handlers:
                    try:
                        self._handlers[event_type].remove(subscription)
                        if not self._handlers[event_type]:
                            del self._handlers[event_type]
                    except ValueError:
                        pass  # Already removed

        return unsubscribe

    def publish(self, event: Any) -> None:
        """
        Publish an event to all subscribers of its class.

        Args:
            event: The event instance to publish
        """
        with self._lock:
            handlers = list(self._handlers.get(type(event), []))

        # Invoke handlers outside the lock
        for subscription in handlers:
            try:
                subscription.handler(event)
            except Exception:
                logger.exception(
                    "Exception in event handler for %s",
                    type(event).__name__,
                )

    def clear(self) -> None:
        """Remove all subscriptions."""
        with self._lock:
            self._handlers.clear()
