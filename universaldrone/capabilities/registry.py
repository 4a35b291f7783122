"""
Capability Registry.

This module provides the per-session description of what the connected
drone supports, built once from the adapter's declaration.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable, Iterator

from universaldrone.core.exceptions import InvalidArgument, UnsupportedCapability
from universaldrone.models.capability import SPEED_CONTROL, Capability

if TYPE_CHECKING:
    from universaldrone.core.types import DroneAdapter

logger = logging.getLogger(__name__)

DEFAULT_SPEED_LEVEL_RANGE = (1, 10)


class CapabilityRegistry:
    """
    Immutable set of capabilities declared by one adapter.

    Args:
        capabilities: The declared capabilities
        speed_level_range: Inclusive (low, high) range of accepted speed
                           levels; only meaningful with SPEED_LEVELS

    Raises:
        InvalidArgument: If both EXACT_SPEED and SPEED_LEVELS are declared,
                         or the level range is empty
    """

    __slots__ = ("_capabilities", "_speed_level_range")

    def __init__(
        self,
        capabilities: Iterable[Capability],
        speed_level_range: tuple[int, int] | None = None,
    ) -> None:
        declared = frozenset(capabilities)
        if SPEED_CONTROL <= declared:
            raise InvalidArgument(
                "A drone declares at most one of EXACT_SPEED and SPEED_LEVELS"
            )

        level_range: tuple[int, int] | None = None
        if Capability.SPEED_LEVELS in declared:
            low, high = speed_level_range or DEFAULT_SPEED_LEVEL_RANGE
            if low > high:
                raise InvalidArgument(f"Empty speed level range ({low}, {high})")
            level_range = (int(low), int(high))

        self._capabilities = declared
        self._speed_level_range = level_range

    @classmethod
    def from_adapter(cls, adapter: "DroneAdapter") -> "CapabilityRegistry":
        """Build the registry from an adapter's declaration."""
        declared = frozenset(adapter.declared_capabilities())
        level_range = None
        if Capability.SPEED_LEVELS in declared:
            level_range = adapter.speed_level_range()
        registry = cls(declared, level_range)
        logger.debug(
            "Registered capabilities: %s",
            ", ".join(sorted(c.name for c in declared)) or "none",
        )
        return registry

    def supports(self, capability: Capability) -> bool:
        """Check if the drone declared ``capability``."""
        return capability in self._capabilities

    def require(self, capability: Capability) -> None:
        """
        Guard an operation on a capability.

        Raises:
            UnsupportedCapability: If the drone did not declare it
        """
        if capability not in self._capabilities:
            raise UnsupportedCapability(capability)

    @property
    def capabilities(self) -> frozenset[Capability]:
        """All declared capabilities."""
        return self._capabilities

    @property
    def speed_level_range(self) -> tuple[int, int] | None:
        """Inclusive speed level range, or None without SPEED_LEVELS."""
        return self._speed_level_range

    def __contains__(self, capability: object) -> bool:
        return capability in self._capabilities

    def __iter__(self) -> Iterator[Capability]:
        return iter(sorted(self._capabilities, key=lambda c: c.value))

    def __len__(self) -> int:
        return len(self._capabilities)

    def __repr__(self) -> str:
        names = ",".join(c.name for c in self)
        return f"CapabilityRegistry({names})"
