"""
Drone adapters.

Importing this package registers the bundled adapters in :py:data:`ADAPTERS`.
"""

from universaldrone.adapters.base import BaseAdapter
from universaldrone.adapters.mavlink import MAVLinkAdapter
from universaldrone.adapters.registry import ADAPTERS, AdapterRegistry
from universaldrone.adapters.sim import SimulatedAdapter

__all__ = [
    "ADAPTERS",
    "AdapterRegistry",
    "BaseAdapter",
    "MAVLinkAdapter",
    "SimulatedAdapter",
]
