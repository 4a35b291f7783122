"""
Session Configuration.

This module provides the settings that shape how a session waits on and
reacts to its adapter.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class DispatcherConfig:
    """
    Settings of a :py:class:`~universaldrone.dispatch.dispatcher.CommandDispatcher`.

    Attributes:
        command_timeout: Seconds to wait for an adapter command to finish.
                         None waits forever.
        connect_timeout: Seconds to wait for the adapter to connect.
                         None waits forever.
        telemetry_max_age: Seconds after which cached telemetry is refreshed
                           from the adapter on read. None keeps a snapshot
                           until the next command invalidates it.
        halt_on_timeout: If True, a physical motion that times out is
                         followed by a HOVER instruction.
    """

    command_timeout: float | None = 30.0
    connect_timeout: float | None = 30.0
    telemetry_max_age: float | None = 1.0
    halt_on_timeout: bool = True

    def __post_init__(self) -> None:
        for name in ("command_timeout", "connect_timeout", "telemetry_max_age"):
            value = getattr(self, name)
            if value is not None and value < 0:
                raise ValueError(f"{name} must be >= 0, got {value}")
