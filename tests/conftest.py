"""Shared fixtures for the orbit trainer test suite."""
import math
import random

import pytest

from orbit_trainer.core import vector as vm
from orbit_trainer.core.config import TrainerCfg
from orbit_trainer.mission.simulation import Simulation


@pytest.fixture
def cfg():
    """Default trainer constants."""
    return TrainerCfg()


@pytest.fixture
def rng():
    """Deterministic random source."""
    return random.Random(1234)


@pytest.fixture
def easy_sim(cfg):
    return Simulation(cfg, "easy", seed=7)


@pytest.fixture
def hard_sim(cfg):
    return Simulation(cfg, "hard", seed=7)


@pytest.fixture
def circular_orbit():
    """Return a helper that puts the satellite on a circular orbit."""
    return place_on_circular_orbit


def place_on_circular_orbit(sim, radius, speed=None):
    """Put the satellite on a counter-clockwise orbit at ``radius``.

    The satellite is treated as having come from outside the band so that
    entering the band counts.
    """
    if speed is None:
        speed = math.sqrt(sim.cfg.mu / radius)
    sim.state.satellite.position = vm.vec(radius, 0.0)
    sim.state.satellite.velocity = vm.vec(0.0, speed)
    sim.state.flags.has_been_outside_band = True
    sim._refresh_math()
