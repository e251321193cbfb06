"""
Tests for preference scoring and expected free energy.
"""

import math

import pytest
import numpy as np

from ..agents.efe import MAX_EFE_CLAMP, EFEResult, calculate_efe
from ..agents.memory import KnownLocations
from ..agents.preferences import (
    BASELINE_PREFERENCE,
    CLOUDY_RADII,
    SUNNY_RADII,
    PreferenceModel,
    food_preference,
)
from ..agents.transition import TransitionModel
from ..core.grid import Action, EnvironmentState, Weather, loc_to_index
from ..core.params import PreferenceWeights


def one_hot(loc, grid_size):
    b = np.zeros(grid_size * grid_size)
    b[loc_to_index(loc, grid_size)] = 1.0
    return b


@pytest.fixture
def world():
    """Default 10×10 layout."""
    return EnvironmentState(10, food=[(2, 7)], predators=[(8, 2)], shelters=[(5, 5)])


class TestFoodPreference:
    """Test the hunger-driven food drive."""

    def test_not_hungry(self):
        """Below half of max hunger the drive is the baseline."""
        assert food_preference(5, PreferenceWeights()) == BASELINE_PREFERENCE
        assert food_preference(10, PreferenceWeights()) == BASELINE_PREFERENCE

    def test_hungry_is_quadratic(self):
        """Past half of max hunger the drive grows quadratically."""
        w = PreferenceWeights(food=5.0)
        assert food_preference(15, w) == pytest.approx(5.0 * 0.75 ** 2)
        assert food_preference(20, w) == pytest.approx(5.0)

    def test_custom_max_hunger(self):
        """The threshold follows max_hunger."""
        w = PreferenceWeights(food=4.0)
        assert food_preference(8, w, max_hunger=10) == pytest.approx(4.0 * 0.64)


class TestPreferenceModel:
    """Test per-cell preference scores."""

    def test_drives_sunny(self, world):
        """Sunny weather has no weather penalty and a baseline shelter drive."""
        drives = PreferenceModel(world, hunger=0).drives()
        assert drives["weather"] == 0.0
        assert drives["shelter"] == BASELINE_PREFERENCE
        assert drives["predator"] == -10.0

    def test_drives_cloudy(self, world):
        """Cloudy weather turns on the shelter drive and the weather penalty."""
        world.weather = Weather.CLOUDY
        drives = PreferenceModel(world, hunger=0).drives()
        assert drives["shelter"] == 5.0
        assert drives["weather"] == -2.0

    def test_perception_radii_shrink_when_cloudy(self, world):
        """Visibility drops in bad weather."""
        assert PreferenceModel(world, 0).perception_radii() == SUNNY_RADII
        world.weather = Weather.CLOUDY
        assert PreferenceModel(world, 0).perception_radii() == CLOUDY_RADII

    def test_hungry_agent_prefers_food(self, world):
        """A hungry agent scores the food cell above an empty far cell."""
        prefs = PreferenceModel(world, hunger=20)
        assert prefs.score(loc_to_index((2, 7), 10)) > prefs.score(loc_to_index((0, 0), 10))

    def test_predator_cell_is_worst(self, world):
        """The predator cell has the lowest score."""
        vec = PreferenceModel(world, hunger=0).vector()
        pred = loc_to_index((8, 2), 10)
        assert vec[pred] <= vec.min() + 1e-9
        assert vec[pred] < vec[loc_to_index((0, 0), 10)]

    def test_cloudy_prefers_shelter(self, world):
        """In bad weather the shelter beats an empty cell."""
        world.weather = Weather.CLOUDY
        prefs = PreferenceModel(world, hunger=0)
        assert prefs.score(loc_to_index((5, 5), 10)) > prefs.score(loc_to_index((0, 9), 10))

    def test_perception_of_nearby_food(self, world):
        """Cells next to food inherit part of its drive."""
        prefs = PreferenceModel(world, hunger=20)
        near = prefs.score(loc_to_index((2, 6), 10))
        far = prefs.score(loc_to_index((0, 0), 10))
        assert near > far

    def test_memory_adds_contribution(self, world):
        """Remembered food raises scores even outside the perception radius."""
        memory = KnownLocations()
        memory.food.add((2, 7))
        without = PreferenceModel(world, hunger=20).vector()
        with_memory = PreferenceModel(world, hunger=20, memory=memory).vector()
        idx = loc_to_index((9, 0), 10)
        assert with_memory[idx] > without[idx]

    def test_vector_cached(self, world):
        """The score vector is computed once per model."""
        prefs = PreferenceModel(world, hunger=3)
        assert prefs.vector() is prefs.vector()
        assert prefs.vector().shape == (100,)

    def test_empty_world(self):
        """A world with no items scores every cell the same in sunny weather."""
        vec = PreferenceModel(EnvironmentState(5), hunger=20).vector()
        np.testing.assert_allclose(vec, 0.0)


class TestEFE:
    """Test expected free energy of policies."""

    def test_all_stay_from_certain_belief(self):
        """All-stay from a one-hot belief only has the instrumental term."""
        model = TransitionModel(grid_size=5)
        prefs = np.arange(25, dtype=float)
        start = one_hot((1, 1), 5)
        result = calculate_efe([Action.STAY] * 3, start, prefs, model)
        assert result.epistemic == pytest.approx(0.0)
        assert result.futility == 0.0
        assert result.instrumental == pytest.approx(-prefs[6])
        assert result.efe == pytest.approx(-prefs[6])

    def test_components_add_up(self):
        """Total EFE is the sum of its terms."""
        model = TransitionModel(grid_size=5)
        prefs = np.linspace(-1, 1, 25)
        result = calculate_efe([Action.UP, Action.LEFT, Action.RIGHT], one_hot((0, 0), 5), prefs, model)
        assert result.efe == pytest.approx(result.instrumental + result.epistemic + result.futility)
        assert result.futility > 0.0

    def test_spreading_belief_costs_epistemic(self):
        """Noisy moves from a certain belief raise the entropy term."""
        model = TransitionModel(grid_size=5)
        result = calculate_efe([Action.RIGHT] * 3, one_hot((2, 2), 5), np.zeros(25), model)
        assert result.epistemic > 0.0

    def test_moving_toward_preferred_cell_is_better(self):
        """A policy ending on the preferred cell has lower EFE."""
        model = TransitionModel(grid_size=5, p_success=1.0, p_stay=0.0)
        prefs = np.zeros(25)
        prefs[loc_to_index((0, 3), 5)] = 5.0
        start = one_hot((0, 0), 5)
        toward = calculate_efe([Action.RIGHT] * 3, start, prefs, model)
        stay = calculate_efe([Action.STAY] * 3, start, prefs, model)
        assert toward.efe < stay.efe

    def test_clamped(self):
        """Huge preferences are clamped to the EFE bound."""
        model = TransitionModel(grid_size=3)
        prefs = np.full(9, 1e9)
        result = calculate_efe([Action.STAY] * 3, one_hot((1, 1), 3), prefs, model)
        assert result.efe == -MAX_EFE_CLAMP

    def test_nan_maps_to_inf(self):
        """NaN preferences produce the +inf sentinel."""
        model = TransitionModel(grid_size=3)
        prefs = np.full(9, np.nan)
        result = calculate_efe([Action.STAY] * 3, one_hot((1, 1), 3), prefs, model)
        assert math.isinf(result.efe) and result.efe > 0

    def test_to_dict(self):
        """Test EFEResult serialization."""
        d = EFEResult(1.0, 0.5, 0.25, 0.25).to_dict()
        assert d == {"efe": 1.0, "instrumental": 0.5, "epistemic": 0.25, "futility": 0.25}
