"""
Tests for the grid-world agent and its factory.
"""

import pytest
import numpy as np

from ..agents import GridWorldAgent, build_gridworld_agent
from ..core.grid import Action, EnvironmentState, loc_to_index
from ..core.params import SimulationParams


class TestBuildGridWorldAgent:
    """Test build_gridworld_agent."""

    def test_default_agent(self):
        """Default agent has 125 policies and a belief peaked at the start."""
        agent = build_gridworld_agent()
        assert isinstance(agent, GridWorldAgent)
        assert len(agent.policies) == 125
        assert agent.transition.grid_size == 10
        assert int(np.argmax(agent.belief)) == 0
        assert agent.belief.sum() == pytest.approx(1.0)

    def test_custom_params(self, small_params):
        """Policy length and grid size follow the parameters."""
        small_params.policy_length = 2
        agent = build_gridworld_agent(small_params)
        assert len(agent.policies) == 25
        assert agent.belief.shape == (16,)

    def test_transition_probabilities_forwarded(self):
        """The transition model uses the configured probabilities."""
        params = SimulationParams(p_success=0.7, p_stay=0.2)
        agent = build_gridworld_agent(params)
        assert agent.transition.p_success == 0.7
        assert agent.transition.p_slip == pytest.approx(0.1)


class TestGridWorldAgent:
    """Test planning and perception on the agent."""

    @pytest.fixture
    def agent(self, small_params):
        return build_gridworld_agent(small_params)

    @pytest.fixture
    def world(self, small_params):
        return EnvironmentState(
            small_params.grid_size,
            food=small_params.food,
            predators=small_params.predators,
            shelters=small_params.shelters,
        )

    def test_evaluate_policies(self, agent, world):
        """One EFE result per policy."""
        results = agent.evaluate_policies(world, hunger=0)
        assert len(results) == len(agent.policies)
        assert all(np.isfinite(r.efe) for r in results)

    def test_select_policy(self, agent, world, rng):
        """Probabilities sum to one and the index is valid."""
        results = agent.evaluate_policies(world, hunger=0)
        probs, idx = agent.select_policy(results, rng)
        assert probs.sum() == pytest.approx(1.0)
        assert 0 <= idx < len(agent.policies)

    def test_hungry_agent_prefers_food(self, agent, world):
        """A hungry agent next to food favours stepping onto it."""
        agent.belief = np.zeros(16)
        agent.belief[loc_to_index((1, 1), 4)] = 1.0
        results = agent.evaluate_policies(world, hunger=20)
        best = agent.policies[int(np.argmin([r.efe for r in results]))]
        assert Action.RIGHT in best

    def test_predict_prior_uses_planning_belief(self, agent):
        """Prediction starts from the given belief, not the current one."""
        planning = np.zeros(16)
        planning[0] = 1.0
        agent.belief = np.full(16, 1.0 / 16)
        prior = agent.predict_prior((Action.STAY,) * 3, planning)
        np.testing.assert_allclose(prior, planning)

    def test_perceive_updates_belief_and_memory(self, agent, world):
        """An exact observation on a food cell is memorized."""
        agent.params.obs_noise = 0.0
        prior = np.full(16, 1.0 / 16)
        added = agent.perceive(prior, loc_to_index((1, 2), 4), world)
        assert added == [(1, 2)]
        assert agent.belief[loc_to_index((1, 2), 4)] == pytest.approx(1.0)
        assert (1, 2) in agent.memory.food

    def test_reset(self, agent, world):
        """Reset restores the start belief and clears memory."""
        agent.memory.food.add((1, 2))
        agent.belief = np.full(16, 1.0 / 16)
        agent.reset()
        assert len(agent.memory) == 0
        assert int(np.argmax(agent.belief)) == 0
        agent.reset(start_pos=(3, 3))
        assert int(np.argmax(agent.belief)) == 15
