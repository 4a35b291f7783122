"""Tests covering the telemetry cache's staleness rules."""

from __future__ import annotations

from universaldrone import FlightState, MovementState, TelemetryCache, TelemetrySnapshot


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self) -> None:
        self.now = 100.0

    def __call__(self) -> float:
        return self.now


def make_snapshot(captured_at: float, battery: int = 80) -> TelemetrySnapshot:
    return TelemetrySnapshot(
        battery=battery,
        height=1.0,
        temperature=40.0,
        position=None,
        speed=None,
        speed_level=None,
        flight_state=FlightState.HOVERING,
        movement_state=MovementState.STATIONARY,
        captured_at=captured_at,
    )


def test_empty_cache_is_stale() -> None:
    """Nothing stored means a refresh is needed."""

    cache = TelemetryCache()
    assert cache.get() is None
    assert cache.age() is None
    assert cache.is_stale()


def test_snapshot_goes_stale_with_age() -> None:
    """Snapshots expire after max_age seconds."""

    clock = FakeClock()
    cache = TelemetryCache(max_age=1.0, clock=clock)
    cache.update(make_snapshot(clock.now))

    assert not cache.is_stale()
    clock.now += 0.5
    assert cache.age() == 0.5
    assert not cache.is_stale()
    clock.now += 1.0
    assert cache.is_stale()
    assert not cache.is_stale(max_age=10.0)


def test_invalidate_keeps_last_known_good() -> None:
    """Invalidation marks stale but still serves the old snapshot."""

    clock = FakeClock()
    cache = TelemetryCache(max_age=None, clock=clock)
    snapshot = make_snapshot(clock.now)
    cache.update(snapshot)
    clock.now += 1000.0
    assert not cache.is_stale()

    cache.invalidate()

    assert cache.is_stale()
    assert cache.get() is snapshot


def test_update_replaces_wholesale_and_notifies() -> None:
    """Every update swaps the whole snapshot and calls the listener."""

    seen: list[TelemetrySnapshot] = []
    clock = FakeClock()
    cache = TelemetryCache(clock=clock, on_update=seen.append)
    first = make_snapshot(clock.now, battery=80)
    second = make_snapshot(clock.now, battery=79)

    cache.update(first)
    cache.update(second)

    assert cache.get() is second
    assert seen == [first, second]


def test_snapshot_battery_flags() -> None:
    """Low and critical battery thresholds."""

    assert make_snapshot(0.0, battery=50).is_low_battery is False
    assert make_snapshot(0.0, battery=15).is_low_battery is True
    assert make_snapshot(0.0, battery=15).is_critical_battery is False
    assert make_snapshot(0.0, battery=5).is_critical_battery is True
