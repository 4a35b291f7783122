"""
Exception Classes.

This module defines the error taxonomy surfaced to callers of universaldrone,
and the exception types adapters raise towards the core.

Every caller-facing exception derives from :py:class:`APIException` and
carries an :py:class:`ErrorKind`, so callers can branch on ``exc.kind``
without matching class names. Adapter exceptions deliberately do *not*
derive from :py:class:`APIException`: they never cross the dispatcher
boundary untranslated.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from universaldrone.models.capability import Capability
    from universaldrone.models.state import FlightState


class ErrorKind(Enum):
    """Kinds of failure a caller can observe."""

    CONNECTION_FAILED = "connection_failed"
    ALREADY_CONNECTED = "already_connected"
    INVALID_STATE_TRANSITION = "invalid_state_transition"
    UNSUPPORTED_CAPABILITY = "unsupported_capability"
    INVALID_ARGUMENT = "invalid_argument"
    UNKNOWN_UNIT = "unknown_unit"
    HARDWARE_FAULT = "hardware_fault"
    PRECONDITION_FAILED = "precondition_failed"
    SESSION_BUSY = "session_busy"


class PreconditionReason(Enum):
    """Reason codes for commands the hardware refused to start."""

    LOW_BATTERY = "low_battery"
    OVERHEAT = "overheat"
    NOT_CALIBRATED = "not_calibrated"
    OBSTACLE = "obstacle"
    OTHER = "other"


class APIException(Exception):
    """
    Base class for universaldrone related exceptions.

    :param message: Message string describing the exception
    """

    kind: ErrorKind = ErrorKind.HARDWARE_FAULT


class ConnectionFailed(APIException):
    """Raised when the adapter could not establish a link to the drone."""

    kind = ErrorKind.CONNECTION_FAILED

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class AlreadyConnected(APIException):
    """Raised by ``connect()`` on a session that is not disconnected."""

    kind = ErrorKind.ALREADY_CONNECTED


class InvalidStateTransition(APIException):
    """
    Raised when a command is not legal in the current flight state.

    Attributes:
        state: The flight state the command was checked against.
        trigger: Name of the rejected trigger.
    """

    kind = ErrorKind.INVALID_STATE_TRANSITION

    def __init__(
        self,
        message: str,
        state: "FlightState | None" = None,
        trigger: Any = None,
    ) -> None:
        super().__init__(message)
        self.state = state
        self.trigger = trigger


class UnsupportedCapability(APIException):
    """Raised when the adapter does not declare a required capability."""

    kind = ErrorKind.UNSUPPORTED_CAPABILITY

    def __init__(self, capability: "Capability") -> None:
        super().__init__(f"Drone does not support {capability.name}")
        self.capability = capability


class InvalidArgument(APIException):
    """Raised when an argument falls outside its allowed domain."""

    kind = ErrorKind.INVALID_ARGUMENT


class UnknownUnit(APIException):
    """Raised when a unit token does not name a known unit."""

    kind = ErrorKind.UNKNOWN_UNIT

    def __init__(self, token: Any, dimension: str = "unit") -> None:
        super().__init__(f"Unknown {dimension}: {token!r}")
        self.token = token


class HardwareFault(APIException):
    """
    Raised when the adapter failed while executing a command.

    The adapter-native exception is kept on ``cause`` for diagnostics only;
    its type is not part of the public contract.
    """

    kind = ErrorKind.HARDWARE_FAULT

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class CommandTimeout(HardwareFault):
    """
    Raised by operations that have timeouts.

    The physical outcome of the command is unknown when this is raised;
    re-query the flight state before issuing further commands.
    """

    pass


class PreconditionFailed(APIException):
    """Raised when the hardware refused a command for a known reason."""

    kind = ErrorKind.PRECONDITION_FAILED

    def __init__(
        self,
        message: str,
        reason: PreconditionReason = PreconditionReason.OTHER,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.reason = reason
        self.cause = cause


class SessionBusy(APIException):
    """Raised when another command is already running on the session."""

    kind = ErrorKind.SESSION_BUSY


class AdapterError(Exception):
    """Base class for failures raised by adapters towards the core."""

    pass


class AdapterConnectionError(AdapterError):
    """The transport to the drone could not be opened or was lost."""

    pass


class AdapterPreconditionError(AdapterError):
    """
    The drone refused a command because a precondition did not hold.

    Args:
        message: Human readable description from the device
        reason: Reason code the core reports to the caller
    """

    def __init__(
        self,
        message: str,
        reason: PreconditionReason = PreconditionReason.OTHER,
    ) -> None:
        super().__init__(message)
        self.reason = reason
