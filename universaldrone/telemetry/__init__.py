"""
Telemetry Module.

This module provides the session's telemetry cache.
"""

from universaldrone.telemetry.cache import TelemetryCache

__all__ = ["TelemetryCache"]
