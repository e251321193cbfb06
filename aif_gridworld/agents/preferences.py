"""
Preference (log-prior over states) scoring.

Each cell gets a scalar desirability built from three parts:

1. Direct features at the cell: food, predator proximity, shelter and being
   unsheltered in bad weather.
2. Perception: items within a near / far radius of the cell add a fraction
   of their drive. Visibility, and with it both radii, shrinks when cloudy.
3. Memory: remembered item locations add a contribution decaying
   exponentially with distance.

Drive strengths depend on the agent's hunger, the weather and the
user-tunable ``PreferenceWeights``.
"""

import logging
from typing import Dict, Iterable, Optional, Tuple

import numpy as np

from ..core.grid import CellKind, EnvironmentState, Pos, Weather
from ..core.observation import cell_coords
from ..core.params import MAX_HUNGER, PreferenceWeights
from .memory import KnownLocations

logger = logging.getLogger(__name__)

BASELINE_PREFERENCE = 0.1

# Perception radii (Euclidean, in cells)
SUNNY_RADII = (1.5, 3.0)
CLOUDY_RADII = (1.0, 2.0)
NEAR_GAIN = 0.5
FAR_GAIN = 0.2

MEMORY_GAIN = 0.3
MEMORY_DECAY = 2.0


def food_preference(hunger: float, weights: PreferenceWeights, max_hunger: int = MAX_HUNGER) -> float:
    """Food drive: quadratic in hunger once past half of max_hunger, small otherwise."""
    if hunger > max_hunger / 2:
        return weights.food * (hunger / max_hunger) ** 2
    return BASELINE_PREFERENCE


class PreferenceModel:
    """
    Scores grid cells for one planning phase.

    Args:
        environment: Current ground-truth world
        hunger: Agent hunger
        weights: Drive strengths
        memory: Known item locations (optional)
        max_hunger: Starvation threshold
    """

    def __init__(
        self,
        environment: EnvironmentState,
        hunger: float,
        weights: Optional[PreferenceWeights] = None,
        memory: Optional[KnownLocations] = None,
        max_hunger: int = MAX_HUNGER,
    ) -> None:
        self.environment = environment
        self.hunger = hunger
        self.weights = weights if weights is not None else PreferenceWeights()
        self.memory = memory
        self.max_hunger = max_hunger
        self._vector: Optional[np.ndarray] = None

    @property
    def cloudy(self) -> bool:
        return self.environment.weather == Weather.CLOUDY

    def drives(self) -> Dict[str, float]:
        """Log-preference weight attached to each feature."""
        return {
            "food": food_preference(self.hunger, self.weights, self.max_hunger),
            "predator": -self.weights.predator,
            "shelter": self.weights.shelter if self.cloudy else BASELINE_PREFERENCE,
            "weather": -self.weights.weather if self.cloudy else 0.0,
        }

    def perception_radii(self) -> Tuple[float, float]:
        return CLOUDY_RADII if self.cloudy else SUNNY_RADII

    def score(self, state_index: int) -> float:
        return float(self.vector()[int(state_index)])

    def vector(self) -> np.ndarray:
        """Scores for every cell, computed once per model."""
        if self._vector is None:
            self._vector = self._compute()
        return self._vector

    def _compute(self) -> np.ndarray:
        env = self.environment
        coords = cell_coords(env.grid_size)
        cells = env.grid.reshape(-1)
        drives = self.drives()
        kind_drive = {
            CellKind.FOOD: drives["food"],
            CellKind.PREDATOR: drives["predator"],
            CellKind.SHELTER: drives["shelter"],
        }

        # Direct features
        food = (cells == CellKind.FOOD).astype(np.float64)
        shelter = (cells == CellKind.SHELTER).astype(np.float64)
        if env.predator_locations:
            d_pred = np.min(_distances(coords, env.predator_locations), axis=0)
            predator = np.maximum(0.0, 1.0 - d_pred / 2.0)
        else:
            predator = np.zeros(len(cells))
        bad_weather = (shelter < 0.5).astype(np.float64) if self.cloudy else np.zeros(len(cells))

        scores = (
            drives["food"] * food
            + drives["predator"] * predator
            + drives["shelter"] * shelter
            + drives["weather"] * bad_weather
        )

        # Perception of nearby items
        near, far = self.perception_radii()
        for kind, drive in kind_drive.items():
            locs = env.locations(kind)
            if not locs:
                continue
            d = _distances(coords, locs)
            scores += NEAR_GAIN * drive * np.sum((d > 0) & (d <= near), axis=0)
            scores += FAR_GAIN * drive * np.sum((d > near) & (d <= far), axis=0)

        # Memory of confirmed items
        if self.memory is not None:
            for kind, drive in kind_drive.items():
                known = self.memory.of_kind(kind)
                if not known:
                    continue
                d = _distances(coords, sorted(known))
                scores += MEMORY_GAIN * drive * np.sum(np.exp(-d / MEMORY_DECAY), axis=0)

        logger.debug(
            f"Preference vector: hunger={self.hunger}, weather={env.weather.value}, "
            f"range=[{scores.min():.2f}, {scores.max():.2f}]"
        )
        return scores


def _distances(coords: np.ndarray, locs: Iterable[Pos]) -> np.ndarray:
    """Euclidean distance from each location (rows) to every cell (columns)."""
    pts = np.asarray(list(locs), dtype=np.float64).reshape(-1, 2)
    return np.sqrt(np.sum((pts[:, None, :] - coords[None, :, :]) ** 2, axis=2))
