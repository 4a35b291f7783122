"""
universaldrone API.

This is the API Reference for universaldrone, a hardware-agnostic control
layer for small drones.

The main API is the :py:class:`CommandDispatcher` class. The code snippet
below shows how to use :py:func:`connect` to obtain a connected session:

.. code:: python

    from universaldrone import connect

    # Connect to the simulator; "mavlink" drives a real autopilot
    drone = connect("sim")
    drone.take_off()
    drone.move_forward(50, "cm")
    drone.land()

Every drone family sits behind an adapter (:py:class:`SimulatedAdapter`,
:py:class:`MAVLinkAdapter`, or your own :py:class:`BaseAdapter` subclass).
The session checks each command against one flight state machine, the
capabilities the adapter declared, and converts units both ways, so code
written against it runs unchanged on any adapter.

Asynchronous notification of flight state, movement state and telemetry
changes is available by registering attribute listeners.

All the logging is handled through the builtin Python `logging` module.
"""

from __future__ import annotations

# Core infrastructure
from universaldrone.core.exceptions import (
    APIException,
    AdapterConnectionError,
    AdapterError,
    AdapterPreconditionError,
    AlreadyConnected,
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

# Data models
from universaldrone.models.units import LengthUnit, SpeedUnit
from universaldrone.models.position import Position
from universaldrone.models.state import FlightState, MovementState
from universaldrone.models.capability import Capability
from universaldrone.models.motion import MotionPrimitive
from universaldrone.models.telemetry import (
    UNSUPPORTED,
    RawTelemetry,
    TelemetrySnapshot,
    is_unsupported,
)

# Components
from universaldrone.conversion.units import (
    convert_length,
    convert_position,
    convert_speed,
    parse_length_unit,
    parse_speed_unit,
)
from universaldrone.capabilities.registry import CapabilityRegistry
from universaldrone.flight_control.state_machine import FlightStateMachine, Trigger
from universaldrone.telemetry.cache import TelemetryCache
from universaldrone.config import DispatcherConfig
from universaldrone.dispatch.dispatcher import CommandDispatcher

# Adapters
from universaldrone.adapters.base import BaseAdapter
from universaldrone.adapters.registry import ADAPTERS, AdapterRegistry
from universaldrone.adapters.sim import SimulatedAdapter
from universaldrone.adapters.mavlink import MAVLinkAdapter

# Logging utilities
from universaldrone.logs.handlers import ErrprinterHandler, setup_universaldrone_logging

# Main entry point
from universaldrone.compat.connect import connect

__all__ = [
    # Main API
    "connect",
    "CommandDispatcher",
    "DispatcherConfig",
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
    # Data models
    "Capability",
    "FlightState",
    "LengthUnit",
    "MotionPrimitive",
    "MovementState",
    "Position",
    "RawTelemetry",
    "SpeedUnit",
    "TelemetrySnapshot",
    "UNSUPPORTED",
    "is_unsupported",
    # Units
    "convert_length",
    "convert_position",
    "convert_speed",
    "parse_length_unit",
    "parse_speed_unit",
    # Components
    "CapabilityRegistry",
    "FlightStateMachine",
    "TelemetryCache",
    "Trigger",
    # Adapters
    "ADAPTERS",
    "AdapterRegistry",
    "BaseAdapter",
    "DroneAdapter",
    "MAVLinkAdapter",
    "SimulatedAdapter",
    # Observer
    "HasObservers",
    # Event system
    "ConnectionLost",
    "EventBus",
    "EventPriority",
    "FlightStateChanged",
    "TelemetryReceived",
    # Logging
    "ErrprinterHandler",
    "setup_universaldrone_logging",
]

# Version info
__version__ = "0.1.0"
