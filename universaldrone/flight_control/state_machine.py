"""
Flight State Machine.

This module provides the single authority on which commands are legal for
a drone session. Commands are checked against the current state before any
hardware is touched; adapters can push state changes the hardware made on
its own (auto-landing, link loss) through :py:meth:`FlightStateMachine.force`.
"""

from __future__ import annotations

import logging
import threading
from enum import Enum
from typing import Callable

from universaldrone.core.exceptions import AlreadyConnected, InvalidStateTransition
from universaldrone.models.state import AIRBORNE_STATES, FlightState

logger = logging.getLogger(__name__)


class Trigger(Enum):
    """Events that move a session through its flight states."""

    CONNECT = "connect"
    TAKEOFF = "takeoff"
    TAKEOFF_ACK = "takeoff acknowledged"
    MOVE = "move"
    HOVER = "hover"
    COMMAND = "command"
    QUERY = "query"
    LAND = "land"
    LAND_ACK = "land acknowledged"
    DISCONNECT = "disconnect"

    def __str__(self) -> str:
        return self.value


_S = FlightState
_FLIGHT = (_S.HOVERING, _S.FLYING)

# (from, trigger) -> to. A missing pair is an illegal command.
TRANSITIONS: dict[tuple[FlightState, Trigger], FlightState] = {
    (_S.DISCONNECTED, Trigger.CONNECT): _S.CONNECTED,
    (_S.CONNECTED, Trigger.TAKEOFF): _S.TAKING_OFF,
    (_S.ON_GROUND, Trigger.TAKEOFF): _S.TAKING_OFF,
    (_S.TAKING_OFF, Trigger.TAKEOFF_ACK): _S.HOVERING,
    (_S.LANDING, Trigger.LAND_ACK): _S.ON_GROUND,
}
for _state in _FLIGHT:
    TRANSITIONS[(_state, Trigger.MOVE)] = _S.FLYING
    TRANSITIONS[(_state, Trigger.HOVER)] = _S.HOVERING
    TRANSITIONS[(_state, Trigger.COMMAND)] = _state
for _state in (_S.TAKING_OFF,) + _FLIGHT:
    TRANSITIONS[(_state, Trigger.LAND)] = _S.LANDING
for _state in FlightState:
    TRANSITIONS[(_state, Trigger.DISCONNECT)] = _S.DISCONNECTED
    if _state is not _S.DISCONNECTED:
        TRANSITIONS[(_state, Trigger.QUERY)] = _state
del _state


class FlightStateMachine:
    """
    Tracks the connection and flight lifecycle of one session.

    All methods are thread-safe. Every change of state, whether requested
    or forced, increments :py:attr:`revision`, which lets a caller detect
    that the state moved underneath a long-running command.

    Args:
        initial: Starting state
        on_change: Optional callback when the state changes.
                   Signature: callback(old_state, new_state)
    """

    __slots__ = ("_state", "_revision", "_lock", "_on_change")

    def __init__(
        self,
        initial: FlightState = FlightState.DISCONNECTED,
        on_change: Callable[[FlightState, FlightState], None] | None = None,
    ) -> None:
        self._state = initial
        self._revision = 0
        self._lock = threading.RLock()
        self._on_change = on_change

    @property
    def current(self) -> FlightState:
        """Get the current flight state."""
        with self._lock:
            return self._state

    @property
    def revision(self) -> int:
        """Number of state changes since creation."""
        with self._lock:
            return self._revision

    def check(self, trigger: Trigger) -> FlightState:
        """
        Validate a trigger against the current state without applying it.

        Args:
            trigger: The trigger to validate

        Returns:
            The state the trigger would lead to

        Raises:
            AlreadyConnected: For CONNECT on a connected session
            InvalidStateTransition: For any other illegal trigger
        """
        with self._lock:
            return self._target(self._state, trigger)

    def request_transition(
        self,
        trigger: Trigger,
        expected_revision: int | None = None,
    ) -> FlightState:
        """
        Apply a trigger to the current state.

        Args:
            trigger: The trigger to apply
            expected_revision: If given, the transition is only applied if
                               no state change happened since the caller
                               read this revision

        Returns:
            The new current state

        Raises:
            AlreadyConnected: For CONNECT on a connected session
            InvalidStateTransition: For any other illegal trigger, or if the
                                    state changed since ``expected_revision``
        """
        with self._lock:
            old = self._state
            if expected_revision is not None and expected_revision != self._revision:
                raise InvalidStateTransition(
                    f"Flight state changed to {old} while waiting to {trigger}",
                    state=old,
                    trigger=trigger,
                )
            new = self._target(old, trigger)
            if trigger is Trigger.DISCONNECT and old in AIRBORNE_STATES:
                logger.warning("Forced disconnect while %s", old)
            self._set(new)
        if new is not old:
            self._notify(old, new)
        return new

    def force(
        self,
        state: FlightState,
        reason: str = "",
        expected_revision: int | None = None,
    ) -> bool:
        """
        Push a state the hardware moved to on its own.

        No legality check is made: the hardware already did it.

        Args:
            state: The state the drone is in now
            reason: Description used for logging
            expected_revision: If given, only apply if no state change
                               happened since this revision

        Returns:
            True if the state was applied
        """
        with self._lock:
            if expected_revision is not None and expected_revision != self._revision:
                return False
            old = self._state
            self._set(state)
        if state is not old:
            logger.warning(
                "Flight state forced %s -> %s (%s)", old, state, reason or "no reason given"
            )
            self._notify(old, state)
        return True

    def _set(self, state: FlightState) -> None:
        self._state = state
        self._revision += 1

    def _notify(self, old: FlightState, new: FlightState) -> None:
        logger.debug("Flight state %s -> %s", old, new)
        if self._on_change:
            try:
                self._on_change(old, new)
            except Exception:
                logger.exception("Error in flight state change callback")

    @staticmethod
    def _target(state: FlightState, trigger: Trigger) -> FlightState:
        target = TRANSITIONS.get((state, trigger))
        if target is not None:
            return target
        if trigger is Trigger.CONNECT:
            raise AlreadyConnected(f"Drone is already connected ({state})")
        raise InvalidStateTransition(
            f"Cannot {trigger} while {state}",
            state=state,
            trigger=trigger,
        )
