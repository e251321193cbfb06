"""
Simulation runtime and helpers for the Active Inference grid world.

This module contains the cycle runner, the run / pause / step scheduler,
argument parsers and plotting utilities used across the package.
"""

from .cycle_runner import CycleResult, Phase, SimulationState, peak_belief_location, run_cycle
from .scheduler import SimulationScheduler
from .plotting import moving_average, plot_run_history
from .parsers import parse_pos, parse_pos_list

__all__ = [
    "CycleResult",
    "Phase",
    "SimulationState",
    "peak_belief_location",
    "run_cycle",
    "SimulationScheduler",
    "moving_average",
    "plot_run_history",
    "parse_pos",
    "parse_pos_list",
]
