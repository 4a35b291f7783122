"""
Capability Module.

This module provides the registry of optional features a drone declares.
"""

from universaldrone.capabilities.registry import (
    DEFAULT_SPEED_LEVEL_RANGE,
    CapabilityRegistry,
)

__all__ = ["CapabilityRegistry", "DEFAULT_SPEED_LEVEL_RANGE"]
