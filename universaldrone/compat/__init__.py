"""
Convenience entry points.

This module provides the connect() shortcut.
"""

from universaldrone.compat.connect import connect

__all__ = ["connect"]
