"""
Telemetry Cache.

This module provides the last-known-good telemetry store of a session.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable

import monotonic

from universaldrone.models.telemetry import TelemetrySnapshot

logger = logging.getLogger(__name__)


class TelemetryCache:
    """
    Holds the latest telemetry snapshot and tracks its staleness.

    A snapshot is only ever replaced wholesale. Invalidating the cache keeps
    the last-known-good snapshot readable but reports it as stale, so a
    reader can still fall back to it while the drone is busy.

    Args:
        max_age: Seconds after capture at which a snapshot becomes stale.
                 None means snapshots only go stale through invalidate().
        clock: Monotonic clock returning seconds
        on_update: Optional callback when a new snapshot is stored.
                   Signature: callback(snapshot)
    """

    __slots__ = ("_snapshot", "_valid", "_max_age", "_clock", "_on_update", "_lock")

    def __init__(
        self,
        max_age: float | None = 1.0,
        clock: Callable[[], float] = monotonic.monotonic,
        on_update: Callable[[TelemetrySnapshot], None] | None = None,
    ) -> None:
        self._snapshot: TelemetrySnapshot | None = None
        self._valid = False
        self._max_age = max_age
        self._clock = clock
        self._on_update = on_update
        self._lock = threading.Lock()

    def get(self) -> TelemetrySnapshot | None:
        """
        Get the last-known-good snapshot.

        Returns:
            The latest snapshot, stale or not; None if nothing was ever stored
        """
        with self._lock:
            return self._snapshot

    def update(self, snapshot: TelemetrySnapshot) -> None:
        """Replace the cached snapshot."""
        with self._lock:
            self._snapshot = snapshot
            self._valid = True
        if self._on_update:
            try:
                self._on_update(snapshot)
            except Exception:
                logger.exception("Error in telemetry update callback")

    def invalidate(self) -> None:
        """Mark the cached snapshot stale."""
        with self._lock:
            self._valid = False

    def age(self) -> float | None:
        """
        Seconds since the cached snapshot was captured.

        Returns:
            None if nothing was ever stored
        """
        with self._lock:
            snapshot = self._snapshot
        if snapshot is None:
            return None
        return self._clock() - snapshot.captured_at

    def is_stale(self, max_age: float | None = None) -> bool:
        """
        Check if the cached snapshot should be refreshed.

        Args:
            max_age: Override of the cache's own maximum age

        Returns:
            True if empty, invalidated, or older than the maximum age
        """
        with self._lock:
            snapshot = self._snapshot
            valid = self._valid
        if snapshot is None or not valid:
            return True
        limit = self._max_age if max_age is None else max_age
        if limit is None:
            return False
        return (self._clock() - snapshot.captured_at) > limit

    @property
    def clock(self) -> Callable[[], float]:
        """The clock used to timestamp and age snapshots."""
        return self._clock
