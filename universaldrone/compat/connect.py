"""
Connect Function.

This module provides the connect() function for opening a drone session
in one call.
"""

from __future__ import annotations

import logging
from typing import Any

from universaldrone.adapters.registry import ADAPTERS
from universaldrone.config import DispatcherConfig
from universaldrone.core.events import EventBus
from universaldrone.core.exceptions import InvalidArgument
from universaldrone.core.types import DroneAdapter
from universaldrone.dispatch.dispatcher import CommandDispatcher

logger = logging.getLogger(__name__)


def connect(
    adapter: DroneAdapter | str = "sim",
    config: DispatcherConfig | None = None,
    event_bus: EventBus | None = None,
    **adapter_options: Any,
) -> CommandDispatcher:
    """
    Connect to a drone.

    This function creates the adapter (when given by name), wraps it in a
    :py:class:`CommandDispatcher` and connects it.

    Args:
        adapter: An adapter instance, or the name of a registered adapter.
            Examples:
            - "sim" (in-memory simulator)
            - "mavlink" (MAVLink autopilot)
        config: Timeouts and telemetry settings
        event_bus: Event bus shared with the adapter
        **adapter_options: Constructor options of a named adapter
            (e.g., connection_string, baud, heartbeat_timeout)

    Returns:
        A connected CommandDispatcher

    Raises:
        InvalidArgument: If the adapter name is unknown, or options are
                         given along with an adapter instance
        ConnectionFailed: If the drone could not be reached

    Example:
        >>> from universaldrone import connect
        >>> drone = connect("mavlink", connection_string="tcp:127.0.0.1:5760")
        >>> drone.take_off()
    """
    if isinstance(adapter, str):
        try:
            instance = ADAPTERS.create(adapter, **adapter_options)
        except KeyError:
            available = ", ".join(ADAPTERS.available_adapters())
            raise InvalidArgument(
                f"Unknown drone adapter '{adapter}' (available: {available})"
            ) from None
    else:
        if adapter_options:
            raise InvalidArgument(
                "Adapter options only apply when the adapter is given by name"
            )
        instance = adapter

    dispatcher = CommandDispatcher(instance, config=config, event_bus=event_bus)
    try:
        dispatcher.connect()
    except Exception:
        dispatcher.close()
        raise
    return dispatcher
