"""
Active Inference agent for the foraging grid world.

The agent never sees its true location. It plans from its belief, commits to
a sampled policy, and afterwards folds the environment's noisy observation
back into its belief and its memory of item locations.
"""

import logging
from typing import List, Optional, Sequence, Tuple

import numpy as np

from ..core.grid import EnvironmentState, Pos, initial_belief
from ..core.params import SimulationParams
from .efe import EFEResult, calculate_efe
from .memory import KnownLocations
from .perception import update_belief
from .policies import Policy, calculate_softmax, sample_index
from .preferences import PreferenceModel
from .transition import TransitionModel

logger = logging.getLogger(__name__)


class GridWorldAgent:
    """
    Belief, memory and planning machinery of the grid-world agent.

    Args:
        params: Simulation parameters (read live on every call)
        transition: Transition model used for prediction
        policies: Policy set, enumerated once and reused

    Attributes:
        belief: Current probability vector over cells
        memory: Confirmed item locations
    """

    def __init__(
        self,
        params: SimulationParams,
        transition: TransitionModel,
        policies: Sequence[Policy],
    ) -> None:
        self.params = params
        self.transition = transition
        self.policies: List[Policy] = list(policies)
        self.memory = KnownLocations()
        self.belief = initial_belief(params.start_pos, params.grid_size)

    def reset(self, start_pos: Optional[Pos] = None) -> None:
        """Peaked belief at the start location and an empty memory."""
        start = self.params.start_pos if start_pos is None else start_pos
        self.belief = initial_belief(start, self.params.grid_size)
        self.memory.clear()
        logger.debug(f"Agent reset with belief peaked at {start}")

    # ------------------------------ Planning ------------------------------ #

    def preference_model(self, environment: EnvironmentState, hunger: float) -> PreferenceModel:
        return PreferenceModel(
            environment,
            hunger,
            weights=self.params.weights,
            memory=self.memory,
            max_hunger=self.params.max_hunger,
        )

    def evaluate_policies(self, environment: EnvironmentState, hunger: float) -> List[EFEResult]:
        """EFE of every policy under the current belief and preferences."""
        prefs = self.preference_model(environment, hunger).vector()
        return [
            calculate_efe(policy, self.belief, prefs, self.transition, self.params.futility_cost)
            for policy in self.policies
        ]

    def select_policy(
        self,
        efe_results: Sequence[EFEResult],
        rng: np.random.Generator,
    ) -> Tuple[np.ndarray, int]:
        """
        Softmax the EFEs and sample a policy.

        Returns:
            (probabilities, selected_index)
        """
        efe_values = [r.efe for r in efe_results]
        probs = calculate_softmax(efe_values, self.params.precision)
        return probs, sample_index(probs, efe_values, rng)

    # ----------------------------- Perception ----------------------------- #

    def predict_prior(self, policy: Policy, planning_belief: Optional[np.ndarray] = None) -> np.ndarray:
        """Belief after the policy's transitions, before any observation."""
        start = self.belief if planning_belief is None else planning_belief
        beliefs, _ = self.transition.predict_belief_sequence(policy, start, self.params.futility_cost)
        return beliefs[-1]

    def perceive(self, prior: np.ndarray, obs_index: int, environment: EnvironmentState) -> List[Pos]:
        """
        Bayesian update from the observation, then memory update.

        Returns:
            Locations newly added to memory
        """
        self.belief = update_belief(prior, obs_index, self.params.grid_size, self.params.obs_noise)
        return self.memory.update(self.belief, environment, self.params.memory_threshold)

    def __repr__(self) -> str:
        peak = int(np.argmax(self.belief))
        return f"GridWorldAgent(policies={len(self.policies)}, peak={peak}, memory={len(self.memory)})"
