"""
Core environment implementation for the Active Inference grid world.

This module contains the ground-truth world (grid, items, weather), the
gymnasium environment that executes policies and emits noisy observations,
the shared numeric helpers and the simulation parameters.
"""

from .grid import (
    ACTIONS,
    Action,
    CellKind,
    EnvironmentState,
    Weather,
    index_to_loc,
    initial_belief,
    loc_to_index,
)
from .foraging_env import ForagingGridWorld
from .params import PreferenceWeights, SimulationParams

__all__ = [
    "ACTIONS",
    "Action",
    "CellKind",
    "EnvironmentState",
    "Weather",
    "index_to_loc",
    "initial_belief",
    "loc_to_index",
    "ForagingGridWorld",
    "PreferenceWeights",
    "SimulationParams",
]
