"""
Active Inference agent factory for the foraging grid world.

This module validates the simulation parameters and assembles the agent's
generative model (transition tensor, policy set, initial belief).
"""

import logging
from typing import Optional

from ..core.params import SimulationParams
from .agent import GridWorldAgent
from .policies import enumerate_policies
from .transition import TransitionModel

logger = logging.getLogger(__name__)


def build_gridworld_agent(params: Optional[SimulationParams] = None) -> GridWorldAgent:
    """
    Build an Active Inference agent for the foraging grid world.

    Args:
        params: Simulation parameters. Defaults are used when omitted.

    Returns:
        GridWorldAgent with a precomputed transition model, the full policy
        set and a belief peaked at the start location

    Raises:
        ValueError: If the transition probabilities or policy length are invalid
    """
    params = params if params is not None else SimulationParams()

    logger.info(
        f"Building GridWorld agent: {params.grid_size}×{params.grid_size} grid, "
        f"start={params.start_pos}, policy_len={params.policy_length}, "
        f"p_success={params.p_success}, p_stay={params.p_stay}"
    )

    transition = TransitionModel(params.grid_size, params.p_success, params.p_stay)
    policies = enumerate_policies(params.policy_length)
    logger.debug(f"Enumerated {len(policies)} policies of length {params.policy_length}")

    return GridWorldAgent(params, transition, policies)
