"""
One Active Inference cycle over the foraging grid world.

``SimulationState`` owns everything a cycle mutates (environment, agent,
shared random generator, counters). ``run_cycle`` performs planning,
execution and perception synchronously and returns a ``CycleResult`` with
everything a front end needs to display.
"""

import logging
from collections import deque
from enum import Enum
from typing import Any, Deque, Dict, List, Optional

import numpy as np

from ..agents.agent import GridWorldAgent
from ..agents.efe import EFEResult
from ..agents.factory import build_gridworld_agent
from ..agents.policies import Policy, policy_label, top_policies
from ..core.foraging_env import ForagingGridWorld
from ..core.grid import Pos, index_to_loc
from ..core.numerics import entropy
from ..core.params import SimulationParams

logger = logging.getLogger(__name__)

HISTORY_LENGTH = 1000


class Phase(str, Enum):
    IDLE = "idle"
    PLANNING = "planning"
    EXECUTING = "executing"
    SCHEDULED = "scheduled"
    PAUSED = "paused"


def peak_belief_location(belief: np.ndarray, grid_size: int) -> Pos:
    """Cell holding the most belief mass."""
    return index_to_loc(int(np.argmax(belief)), grid_size)


class AgentState:
    """Snapshot of the agent: true location, belief, hunger."""

    def __init__(
        self,
        true_location: Pos,
        belief: np.ndarray,
        hunger: int,
        previous_true_location: Pos,
    ):
        self.true_location = true_location
        self.belief = belief
        self.hunger = hunger
        self.previous_true_location = previous_true_location

    def __repr__(self) -> str:
        return (
            f"AgentState(true={self.true_location}, prev={self.previous_true_location}, "
            f"hunger={self.hunger}, peak={int(np.argmax(self.belief))})"
        )


class CycleResult:
    """Outputs of one planning / execution / perception cycle."""

    def __init__(
        self,
        cycle: int,
        policies: List[Policy],
        efe_results: List[EFEResult],
        probabilities: np.ndarray,
        selected_index: int,
        observation: int,
        prior: np.ndarray,
        posterior: np.ndarray,
        true_location: Pos,
        previous_true_location: Pos,
        hunger: int,
        ate_food: bool,
        reward: float,
        truncated: bool,
        memorized: List[Pos],
        grid_size: int,
    ):
        self.cycle = cycle
        self.policies = policies
        self.efe_results = efe_results
        self.probabilities = probabilities
        self.selected_index = selected_index
        self.observation = observation
        self.prior = prior
        self.posterior = posterior
        self.true_location = true_location
        self.previous_true_location = previous_true_location
        self.hunger = hunger
        self.ate_food = ate_food
        self.reward = reward
        self.truncated = truncated
        self.memorized = memorized
        self.grid_size = grid_size

    @property
    def selected_policy(self) -> Policy:
        return self.policies[self.selected_index]

    @property
    def selected_efe(self) -> EFEResult:
        return self.efe_results[self.selected_index]

    @property
    def first_action(self):
        return self.selected_policy[0]

    @property
    def observed_location(self) -> Pos:
        return index_to_loc(self.observation, self.grid_size)

    @property
    def peak_location(self) -> Pos:
        return peak_belief_location(self.posterior, self.grid_size)

    @property
    def posterior_entropy(self) -> float:
        return entropy(self.posterior)

    def top_policies(self, n: int = 5) -> List[Dict[str, Any]]:
        return top_policies(self.policies, self.probabilities, self.efe_results, n, self.selected_index)

    def to_dict(self) -> Dict[str, Any]:
        """Summary for logging and plotting."""
        efe = self.selected_efe
        return {
            "cycle": self.cycle,
            "policy": policy_label(self.selected_policy),
            "prob": float(self.probabilities[self.selected_index]),
            "efe": efe.efe,
            "instrumental": efe.instrumental,
            "epistemic": efe.epistemic,
            "futility": efe.futility,
            "true_location": self.true_location,
            "observed_location": self.observed_location,
            "peak_location": self.peak_location,
            "entropy": self.posterior_entropy,
            "hunger": self.hunger,
            "ate_food": self.ate_food,
        }

    def __repr__(self) -> str:
        return (
            f"CycleResult(cycle={self.cycle}, policy={policy_label(self.selected_policy)}, "
            f"true={self.true_location}, obs={self.observed_location}, hunger={self.hunger})"
        )


class SimulationState:
    """
    Everything one simulation mutates, owned by a single runner.

    Args:
        params: Simulation parameters (live controls are read every cycle)
        seed: Seed for the shared random generator

    Attributes:
        env: Ground-truth gymnasium environment
        agent: Active Inference agent (belief, memory, policies)
        cycle: Number of completed cycles since the last reset
        phase: Current scheduler phase label
        last_result: Most recent CycleResult, or None
        history: Recent CycleResults (bounded)
    """

    def __init__(self, params: Optional[SimulationParams] = None, seed: Optional[int] = None) -> None:
        self.params = params if params is not None else SimulationParams()
        self.env = ForagingGridWorld(
            grid_size=self.params.grid_size,
            food=self.params.food,
            predators=self.params.predators,
            shelters=self.params.shelters,
            start_pos=self.params.start_pos,
            weather=self.params.weather.value,
            policy_length=self.params.policy_length,
            max_hunger=self.params.max_hunger,
            obs_noise=self.params.obs_noise,
            max_steps=self.params.max_steps,
        )
        self.env.reset(seed=seed)
        self.agent: GridWorldAgent = build_gridworld_agent(self.params)
        self.cycle = 0
        self.phase = Phase.IDLE
        self.last_result: Optional[CycleResult] = None
        self.history: Deque[CycleResult] = deque(maxlen=HISTORY_LENGTH)

    @property
    def rng(self) -> np.random.Generator:
        """Shared random source for policy and observation sampling."""
        return self.env.np_random

    @property
    def environment(self):
        return self.env.state

    @property
    def memory(self):
        return self.agent.memory

    @property
    def agent_state(self) -> AgentState:
        return AgentState(
            true_location=self.env.pos,
            belief=self.agent.belief,
            hunger=self.env.hunger,
            previous_true_location=self.env.prev_pos,
        )

    @property
    def belief_entropy(self) -> float:
        return entropy(self.agent.belief)

    @property
    def peak_location(self) -> Pos:
        return peak_belief_location(self.agent.belief, self.params.grid_size)

    def reset(self) -> None:
        """Restore agent, environment and memory to their initial conditions."""
        self.env.reset()
        self.agent.reset()
        self.cycle = 0
        self.phase = Phase.IDLE
        self.last_result = None
        self.history.clear()
        logger.info("Simulation reset")


def run_cycle(state: SimulationState) -> CycleResult:
    """
    Run one full Active Inference cycle.

    Planning scores every policy from the current belief, a policy is
    sampled from the softmax, the environment executes it on the true
    location, and the agent updates its belief from the resulting noisy
    observation.
    """
    params = state.params
    env = state.env
    agent = state.agent
    env.obs_noise = params.obs_noise

    # Planning
    state.phase = Phase.PLANNING
    planning_belief = agent.belief
    efe_results = agent.evaluate_policies(env.state, env.hunger)
    probs, idx = agent.select_policy(efe_results, state.rng)
    policy = agent.policies[idx]

    # Execution & perception
    state.phase = Phase.EXECUTING
    obs, reward, _, truncated, info = env.step(policy)
    prior = agent.predict_prior(policy, planning_belief)
    memorized = agent.perceive(prior, obs, env.state)

    state.cycle += 1
    result = CycleResult(
        cycle=state.cycle,
        policies=agent.policies,
        efe_results=efe_results,
        probabilities=probs,
        selected_index=idx,
        observation=obs,
        prior=prior,
        posterior=agent.belief,
        true_location=info["pos"],
        previous_true_location=info["prev_pos"],
        hunger=info["hunger"],
        ate_food=info["ate_food"],
        reward=reward,
        truncated=truncated,
        memorized=memorized,
        grid_size=params.grid_size,
    )
    state.last_result = result
    state.history.append(result)
    state.phase = Phase.IDLE

    logger.debug(
        f"Cycle {state.cycle}: {policy_label(policy)} (p={probs[idx]:.3f}, "
        f"EFE={efe_results[idx].efe:.3f}) true={result.true_location} "
        f"obs={result.observed_location} peak={result.peak_location} hunger={result.hunger}"
    )
    return result
