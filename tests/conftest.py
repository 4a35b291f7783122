"""Shared fixtures: a simulated drone and sessions over it in various states."""

from __future__ import annotations

from typing import Iterator

import pytest

from universaldrone import CommandDispatcher, DispatcherConfig, SimulatedAdapter

# Short enough to keep failing tests fast, long enough for a loaded CI box.
TEST_CONFIG = DispatcherConfig(command_timeout=5.0, connect_timeout=5.0)


@pytest.fixture
def sim() -> SimulatedAdapter:
    """A simulated drone with the default capabilities, native cm and cm/s."""

    return SimulatedAdapter()


@pytest.fixture
def drone(sim: SimulatedAdapter) -> Iterator[CommandDispatcher]:
    """A disconnected session over ``sim``."""

    session = CommandDispatcher(sim, config=TEST_CONFIG)
    yield session
    session.close()


@pytest.fixture
def connected(drone: CommandDispatcher) -> CommandDispatcher:
    """A connected session, still on the ground."""

    drone.connect()
    return drone


@pytest.fixture
def airborne(connected: CommandDispatcher) -> CommandDispatcher:
    """A session hovering after takeoff."""

    connected.take_off()
    return connected


def make_session(**sim_options) -> tuple[CommandDispatcher, SimulatedAdapter]:
    """Build a session over a simulator configured with ``sim_options``."""

    adapter = SimulatedAdapter(**sim_options)
    return CommandDispatcher(adapter, config=TEST_CONFIG), adapter
