"""
Core Infrastructure.

This module provides the foundational components used throughout universaldrone:
- Exception classes
- Observer pattern implementation
- Event bus for out-of-band adapter events
- Protocol/type definitions
"""

from universaldrone.core.exceptions import (
    AdapterConnectionError,
    AdapterError,
    AdapterPreconditionError,
    AlreadyConnected,
    APIException,
    CommandTimeout,
    ConnectionFailed,
    ErrorKind,
    HardwareFault,
    InvalidArgument,
    InvalidStateTransition,
    PreconditionFailed,
    PreconditionReason,
    SessionBusy,
    UnknownUnit,
    UnsupportedCapability,
)
from universaldrone.core.observer import HasObservers
from universaldrone.core.events import (
    ConnectionLost,
    EventBus,
    EventPriority,
    FlightStateChanged,
    TelemetryReceived,
)
from universaldrone.core.types import DroneAdapter

__all__ = [
    # Exceptions
    "APIException",
    "AdapterConnectionError",
    "AdapterError",
    "AdapterPreconditionError",
    "AlreadyConnected",
    "CommandTimeout",
    "ConnectionFailed",
    "ErrorKind",
    "HardwareFault",
    "InvalidArgument",
    "InvalidStateTransition",
    "PreconditionFailed",
    "PreconditionReason",
    "SessionBusy",
    "UnknownUnit",
    "UnsupportedCapability",
    # Observer
    "HasObservers",
    # Events
    "ConnectionLost",
    "EventBus",
    "EventPriority",
    "FlightStateChanged",
    "TelemetryReceived",
    # Types
    "DroneAdapter",
]
