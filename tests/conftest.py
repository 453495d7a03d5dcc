"""Shared test fixtures."""

import random
from datetime import datetime, timezone

import pytest

from purplesim.engine.clock import ManualClock
from purplesim.engine.scenarios import Phase, Scenario
from purplesim.engine.simulation import SimulationEngine
from purplesim.models import (
    BlueTeamResponse,
    EventStatus,
    EventType,
    Severity,
    SimulationEvent,
)


class FixedRandom(random.Random):
    """Random source whose ``random()`` is pinned.

    With 0.0, ``choice``/``randint``/``sample`` pick the lowest option and
    ``uniform(a, b)`` returns ``a``, so every delay is at its minimum and every
    probability roll above 0 succeeds.
    """

    def __init__(self, value: float = 0.0):
        self._value = value
        super().__init__(0)

    def random(self):
        return self._value


def _make_phase(
    title="Test Phase",
    severity=Severity.CRITICAL,
    detection_probability=1.0,
    delay=0.0,
    attack_vector="Test Vector",
    target_system="Web Server",
):
    return Phase(
        title=title,
        description=f"{title} description",
        attack_vector=attack_vector,
        mitre_technique="T1000",
        severity=severity,
        target_system=target_system,
        delay=delay,
        detection_probability=detection_probability,
    )


def _make_scenario(name="Test Scenario", phases=None):
    return Scenario(name, tuple(phases or [_make_phase()]))


def _make_event(
    id="event-1",
    type=EventType.ATTACK,
    severity=Severity.HIGH,
    status=EventStatus.ACTIVE,
    title="Test Scenario: Test Phase",
    attack_vector="Test Vector",
    response_time=None,
    timestamp=None,
):
    blue = None
    if response_time is not None:
        blue = BlueTeamResponse(
            id=f"blue-{id}",
            detection_method="SIEM Correlation Engine",
            response_time=response_time,
            analyst="Alice Johnson (Senior SOC Analyst)",
        )
    return SimulationEvent(
        id=id,
        timestamp=timestamp or datetime(2025, 1, 1, tzinfo=timezone.utc),
        type=type,
        severity=severity,
        status=status,
        title=title,
        description="description",
        target_system="Web Server",
        attack_vector=attack_vector,
        blue_team_response=blue,
    )


def _make_engine(
    clock=None,
    rng=None,
    scenarios=None,
    initial_chain_delays=(1.0,),
    launch_probability=0.0,
    tick_interval=3.5,
    **kwargs,
):
    return SimulationEngine(
        clock=clock or ManualClock(),
        rng=rng or FixedRandom(0.0),
        scenarios=scenarios if scenarios is not None else [_make_scenario()],
        initial_chain_delays=initial_chain_delays,
        launch_probability=launch_probability,
        tick_interval=tick_interval,
        **kwargs,
    )


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def fixed_rng():
    return FixedRandom(0.0)


@pytest.fixture
def make_phase():
    return _make_phase


@pytest.fixture
def make_scenario():
    return _make_scenario


@pytest.fixture
def make_event():
    return _make_event


@pytest.fixture
def make_engine(clock):
    """Engine factory on the shared manual clock; one critical single-phase scenario by default."""

    def _factory(**kwargs):
        kwargs.setdefault("clock", clock)
        return _make_engine(**kwargs)

    return _factory


@pytest.fixture
def make_fixed_rng():
    """Factory for ``FixedRandom`` sources pinned at other values."""
    return FixedRandom
