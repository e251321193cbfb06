"""
Tests for the simulation state and the Active Inference cycle.
"""

import pytest
import numpy as np

from ..core.grid import Action, CellKind, loc_to_index
from ..core.params import SimulationParams
from ..utils.cycle_runner import (
    CycleResult,
    Phase,
    SimulationState,
    peak_belief_location,
    run_cycle,
)


class TestSimulationState:
    """Test construction and reset of the simulation state."""

    def test_initial_state(self, simulation):
        """Fresh simulation sits at the start with an idle phase."""
        snapshot = simulation.agent_state
        assert snapshot.true_location == (0, 0)
        assert snapshot.previous_true_location == (0, 0)
        assert snapshot.hunger == 0
        assert simulation.cycle == 0
        assert simulation.phase == Phase.IDLE
        assert simulation.last_result is None
        assert simulation.peak_location == (0, 0)

    def test_environment_from_params(self, simulation, small_params):
        """The environment is built from the parameter layout."""
        env = simulation.environment
        assert env.grid_size == 4
        assert env.cell((1, 2)) == CellKind.FOOD
        assert env.cell((3, 0)) == CellKind.PREDATOR
        assert env.cell((2, 2)) == CellKind.SHELTER

    def test_reset(self, simulation):
        """Reset restores location, hunger, belief, memory and counters."""
        for _ in range(3):
            run_cycle(simulation)
        simulation.memory.food.add((1, 2))

        simulation.reset()
        assert simulation.cycle == 0
        assert simulation.env.pos == (0, 0)
        assert simulation.env.hunger == 0
        assert len(simulation.memory) == 0
        assert simulation.last_result is None
        assert len(simulation.history) == 0
        assert int(np.argmax(simulation.agent.belief)) == 0


class TestRunCycle:
    """Test one planning / execution / perception cycle."""

    def test_cycle_outputs(self, simulation):
        """A cycle returns a complete result and advances the counter."""
        result = run_cycle(simulation)
        assert isinstance(result, CycleResult)
        assert result.cycle == 1
        assert simulation.cycle == 1
        assert simulation.last_result is result
        assert simulation.phase == Phase.IDLE
        assert len(result.efe_results) == len(result.policies) == 125
        assert result.probabilities.sum() == pytest.approx(1.0)
        assert result.posterior.sum() == pytest.approx(1.0)
        assert result.prior.sum() == pytest.approx(1.0)
        assert 0 <= result.observation < 16
        assert result.hunger == 3

    def test_hunger_grows(self, small_params):
        """Hunger rises by the policy length per cycle without food."""
        small_params.food = []
        state = SimulationState(small_params, seed=1)
        run_cycle(state)
        run_cycle(state)
        assert state.env.hunger == 6

    def test_deterministic_right_moves(self, deterministic_params):
        """[right, right, right] from a certain start ends one-hot at (0, 3)."""
        state = SimulationState(deterministic_params, seed=0)
        state.agent.policies = [(Action.RIGHT,) * 3]
        state.agent.belief = np.zeros(100)
        state.agent.belief[0] = 1.0

        result = run_cycle(state)
        assert result.true_location == (0, 3)
        assert result.previous_true_location == (0, 0)
        assert result.observation == loc_to_index((0, 3), 10)
        expected = np.zeros(100)
        expected[3] = 1.0
        np.testing.assert_allclose(result.prior, expected)
        np.testing.assert_allclose(result.posterior, expected)
        assert result.peak_location == (0, 3)
        assert result.first_action == Action.RIGHT

    def test_memory_confirmation(self):
        """A confident posterior on a food cell is memorized after one cycle."""
        params = SimulationParams(obs_noise=1e6, step_delay_ms=0)
        state = SimulationState(params, seed=0)
        state.agent.policies = [(Action.STAY,) * 3]
        state.agent.belief = np.zeros(100)
        state.agent.belief[loc_to_index((2, 7), 10)] = 1.0

        result = run_cycle(state)
        assert result.memorized == [(2, 7)]
        assert (2, 7) in state.memory.food

    def test_live_noise_change_is_used(self, deterministic_params):
        """Observation noise changes take effect on the next cycle."""
        state = SimulationState(deterministic_params, seed=0)
        deterministic_params.obs_noise = 2.5
        run_cycle(state)
        assert state.env.obs_noise == 2.5

    def test_reproducible_with_seed(self, small_params):
        """Same seed, same trajectory."""
        def trajectory(seed):
            state = SimulationState(small_params, seed=seed)
            return [(r.true_location, r.observation, r.selected_index) for r in
                    (run_cycle(state) for _ in range(5))]

        assert trajectory(7) == trajectory(7)

    def test_result_summary(self, simulation):
        """to_dict and top_policies expose the cycle for display."""
        result = run_cycle(simulation)
        summary = result.to_dict()
        assert summary["cycle"] == 1
        assert summary["policy"].startswith("[")
        assert summary["efe"] == result.selected_efe.efe
        assert summary["entropy"] >= 0.0

        top = result.top_policies(5)
        assert len(top) == 5
        probs = [row["prob"] for row in top]
        assert probs == sorted(probs, reverse=True)

    def test_history(self, simulation):
        """Results are kept in order."""
        results = [run_cycle(simulation) for _ in range(3)]
        assert list(simulation.history) == results


class TestPeakBeliefLocation:
    """Test peak_belief_location."""

    def test_peak(self):
        """The most probable cell is returned as (row, col)."""
        belief = np.full(100, 0.001)
        belief[57] = 0.9
        assert peak_belief_location(belief, 10) == (5, 7)
