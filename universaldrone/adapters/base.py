"""
Adapter Base Class.

This module provides the base class drone backends extend. It implements
the event bus plumbing and the defaults for optional features, so a new
drone family only has to implement the motions and telemetry it has.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Iterable

from universaldrone.capabilities.registry import DEFAULT_SPEED_LEVEL_RANGE
from universaldrone.core.exceptions import AdapterError
from universaldrone.logs.handlers import get_adapter_logger
from universaldrone.models.capability import Capability
from universaldrone.models.units import LengthUnit, SpeedUnit

if TYPE_CHECKING:
    from universaldrone.core.events import EventBus
    from universaldrone.models.motion import MotionPrimitive
    from universaldrone.models.telemetry import RawTelemetry


class BaseAdapter(ABC):
    """
    Base implementation of the :py:class:`~universaldrone.core.types.DroneAdapter` protocol.

    Subclasses set :py:attr:`adapter_name` and implement ``connect``,
    ``disconnect``, ``execute_motion`` and ``read_telemetry``. Optional
    features raise :py:class:`AdapterError` unless overridden; the session
    never calls them without the matching capability anyway.

    Args:
        capabilities: Declared capabilities
        length_unit: Native length unit
        speed_unit: Native speed unit
    """

    adapter_name: str = "generic"

    def __init__(
        self,
        capabilities: Iterable[Capability] = (),
        length_unit: LengthUnit = LengthUnit.METER,
        speed_unit: SpeedUnit = SpeedUnit.METERS_PER_SECOND,
    ) -> None:
        self._capabilities = frozenset(capabilities)
        self._length_unit = length_unit
        self._speed_unit = speed_unit
        self._event_bus: EventBus | None = None
        self._logger: logging.Logger = get_adapter_logger(self.adapter_name)

    @property
    def name(self) -> str:
        """Adapter name."""
        return self.adapter_name

    def attach(self, event_bus: "EventBus") -> None:
        """Attach to the event bus out-of-band events are published on."""
        self._event_bus = event_bus
        self._logger.debug("%s adapter attached to event bus", self.adapter_name)

    def detach(self) -> None:
        """Detach from the event bus."""
        self._event_bus = None
        self._logger.debug("%s adapter detached from event bus", self.adapter_name)

    def publish(self, event: Any) -> None:
        """Publish an out-of-band event if attached."""
        if self._event_bus is not None:
            self._event_bus.publish(event)

    def declared_capabilities(self) -> frozenset[Capability]:
        return self._capabilities

    def native_units(self) -> tuple[LengthUnit, SpeedUnit]:
        return (self._length_unit, self._speed_unit)

    def speed_level_range(self) -> tuple[int, int]:
        return DEFAULT_SPEED_LEVEL_RANGE

    @abstractmethod
    def connect(self) -> None:
        """Open the link to the drone."""

    @abstractmethod
    def disconnect(self) -> None:
        """Close the link to the drone."""

    @abstractmethod
    def execute_motion(
        self,
        primitive: "MotionPrimitive",
        value: Any,
        speed: float | None,
    ) -> None:
        """Execute one motion and return when it has completed."""

    @abstractmethod
    def read_telemetry(self) -> "RawTelemetry":
        """Read telemetry in native units."""

    def set_speed(self, speed: float) -> None:
        raise AdapterError(f"{self.adapter_name} does not accept exact speeds")

    def set_speed_level(self, level: int) -> None:
        raise AdapterError(f"{self.adapter_name} does not accept speed levels")

    def start_video(self) -> None:
        raise AdapterError(f"{self.adapter_name} has no video stream")

    def stop_video(self) -> None:
        raise AdapterError(f"{self.adapter_name} has no video stream")
