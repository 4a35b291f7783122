"""
Adapter Error Translation.

This module maps whatever an adapter raised onto the caller-facing error
taxonomy. Device-specific exception types never cross this boundary; they
are kept on the translated error's ``cause`` and chained for tracebacks.
"""

from __future__ import annotations

from universaldrone.core.exceptions import (
    AdapterPreconditionError,
    APIException,
    ConnectionFailed,
    HardwareFault,
    PreconditionFailed,
)
from universaldrone.logs.handlers import get_adapter_logger

adapter_logger = get_adapter_logger()


def translate_adapter_error(
    exc: BaseException,
    operation: str,
    connecting: bool = False,
) -> APIException:
    """
    Translate an adapter failure.

    Args:
        exc: The exception raised by the adapter
        operation: Name of the failed operation, for messages
        connecting: True if the failure happened while connecting

    Returns:
        The exception to raise to the caller
    """
    if isinstance(exc, APIException) and not connecting:
        return exc

    adapter_logger.warning(
        "Adapter failed during %s: %s: %s",
        operation,
        type(exc).__name__,
        exc,
    )

    if connecting:
        return ConnectionFailed(f"Could not connect to drone: {exc}", cause=exc)
    if isinstance(exc, AdapterPreconditionError):
        return PreconditionFailed(
            f"Drone refused {operation}: {exc}",
            reason=exc.reason,
            cause=exc,
        )
    return HardwareFault(f"Drone failed during {operation}: {exc}", cause=exc)
