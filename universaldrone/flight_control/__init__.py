"""
Flight Control Module.

This module provides the flight state machine that decides which commands
are legal in which state.
"""

from universaldrone.flight_control.state_machine import (
    TRANSITIONS,
    FlightStateMachine,
    Trigger,
)

__all__ = [
    "FlightStateMachine",
    "TRANSITIONS",
    "Trigger",
]
