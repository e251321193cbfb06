"""
Pytest configuration and fixtures for the Active Inference grid world tests.
"""

import logging

import pytest
import numpy as np

from ..core.params import SimulationParams
from ..utils.cycle_runner import SimulationState


@pytest.fixture
def rng():
    """Deterministic random number generator for reproducible tests."""
    return np.random.default_rng(42)


@pytest.fixture
def small_params():
    """4x4 world with one item of each kind and no step delay."""
    return SimulationParams(
        grid_size=4,
        food=[(1, 2)],
        predators=[(3, 0)],
        shelters=[(2, 2)],
        start_pos=(0, 0),
        step_delay_ms=0,
    )


@pytest.fixture
def deterministic_params():
    """Default 10x10 layout with deterministic moves and perfect observations."""
    return SimulationParams(
        p_success=1.0,
        p_stay=0.0,
        obs_noise=0.0,
        step_delay_ms=0,
    )


@pytest.fixture
def simulation(small_params):
    """Seeded simulation on the small world."""
    return SimulationState(small_params, seed=0)


@pytest.fixture(autouse=True)
def disable_logging():
    """Disable logging in tests unless explicitly needed."""
    logging.getLogger().setLevel(logging.CRITICAL)
    logging.getLogger('aif_gridworld').setLevel(logging.CRITICAL)
