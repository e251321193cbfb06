"""
Active Inference agent for the foraging grid world.

This module provides the belief transition model, preference scoring,
expected free energy, policy selection, perception and memory, plus a
factory that assembles them into a ``GridWorldAgent``.
"""

from .agent import GridWorldAgent
from .efe import EFEResult, calculate_efe
from .factory import build_gridworld_agent
from .memory import KnownLocations
from .perception import bayesian_update, update_belief
from .policies import calculate_softmax, enumerate_policies, sample_index, top_policies
from .preferences import PreferenceModel
from .transition import TransitionModel

__all__ = [
    "GridWorldAgent",
    "EFEResult",
    "calculate_efe",
    "build_gridworld_agent",
    "KnownLocations",
    "bayesian_update",
    "update_belief",
    "calculate_softmax",
    "enumerate_policies",
    "sample_index",
    "top_policies",
    "PreferenceModel",
    "TransitionModel",
]
