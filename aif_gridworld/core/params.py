"""
Simulation configuration.

``SimulationParams`` gathers every tunable of the grid-world simulation:
structural settings fixed at construction (grid size, policy length,
transition probabilities, initial layout, initial weather) and live
controls that may be changed between cycles (precision, observation noise,
preference weights, step delay, futility cost, memory threshold).

Weather is only read when a simulation is built; toggling it afterwards
goes through ``EnvironmentState.toggle_weather``.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

from .grid import GRID_SIZE, Pos, Weather, validate_pos

logger = logging.getLogger(__name__)

MAX_HUNGER = 20
HUNGER_BUFFER = 5
POLICY_LENGTH = 3

DEFAULT_FOOD: List[Pos] = [(2, 7)]
DEFAULT_PREDATORS: List[Pos] = [(8, 2)]
DEFAULT_SHELTERS: List[Pos] = [(5, 5)]
DEFAULT_START: Pos = (0, 0)


class PreferenceWeights:
    """
    Drive strengths used by the preference model.

    Args:
        food: Scale of the hunger-driven food preference
        predator: Magnitude of predator avoidance
        shelter: Shelter preference in bad weather
        weather: Magnitude of bad-weather avoidance when unsheltered
    """

    def __init__(
        self,
        food: float = 5.0,
        predator: float = 10.0,
        shelter: float = 5.0,
        weather: float = 2.0,
    ) -> None:
        self.food = float(food)
        self.predator = float(predator)
        self.shelter = float(shelter)
        self.weather = float(weather)

    def to_dict(self) -> Dict[str, float]:
        return {
            "food": self.food,
            "predator": self.predator,
            "shelter": self.shelter,
            "weather": self.weather,
        }

    def __repr__(self) -> str:
        return (
            f"PreferenceWeights(food={self.food}, predator={self.predator}, "
            f"shelter={self.shelter}, weather={self.weather})"
        )


class SimulationParams:
    """
    Parameters for one grid-world simulation.

    Args:
        grid_size: Side length N of the N×N grid
        max_hunger: Hunger level treated as "starving"; hunger is capped at max_hunger + 5
        policy_length: Number of actions in every policy
        precision: Softmax precision γ over policies
        obs_noise: Observation noise σ (0 means perfect observation)
        step_delay_ms: Delay between scheduled cycles while running
        p_success: Probability that a move lands on the intended cell
        p_stay: Probability that a move leaves the agent in place
        futility_cost: Weight applied to probability mass pushed into walls
        memory_threshold: Posterior mass needed to confirm an item location
        weights: Preference drive strengths
        start_pos: Agent start location (also used by reset)
        food: Initial food locations
        predators: Initial predator locations
        shelters: Initial shelter locations
        weather: Initial weather ("sunny" or "cloudy")
        max_steps: Optional cycle limit after which the environment truncates

    Raises:
        ValueError: If any value is out of range
    """

    def __init__(
        self,
        grid_size: int = GRID_SIZE,
        max_hunger: int = MAX_HUNGER,
        policy_length: int = POLICY_LENGTH,
        precision: float = 3.0,
        obs_noise: float = 1.0,
        step_delay_ms: int = 500,
        p_success: float = 0.85,
        p_stay: float = 0.10,
        futility_cost: float = 2.0,
        memory_threshold: float = 0.6,
        weights: Optional[PreferenceWeights] = None,
        start_pos: Pos = DEFAULT_START,
        food: Optional[Iterable[Pos]] = None,
        predators: Optional[Iterable[Pos]] = None,
        shelters: Optional[Iterable[Pos]] = None,
        weather: str = "sunny",
        max_steps: Optional[int] = None,
    ) -> None:
        if grid_size < 2:
            raise ValueError("Grid must be at least 2×2 for meaningful dynamics")
        if max_hunger <= 0:
            raise ValueError(f"max_hunger must be positive, got {max_hunger}")
        if policy_length < 1:
            raise ValueError(f"policy_length must be at least 1, got {policy_length}")
        if not (0.0 <= p_success <= 1.0 and 0.0 <= p_stay <= 1.0) or p_success + p_stay > 1.0 + 1e-12:
            raise ValueError(
                f"Invalid transition probabilities p_success={p_success}, p_stay={p_stay}"
            )
        if not 0.0 < memory_threshold <= 1.0:
            raise ValueError(f"memory_threshold must be in (0, 1], got {memory_threshold}")
        if max_steps is not None and max_steps < 1:
            raise ValueError(f"max_steps must be positive, got {max_steps}")

        self.grid_size = int(grid_size)
        self.max_hunger = int(max_hunger)
        self.policy_length = int(policy_length)
        self.p_success = float(p_success)
        self.p_stay = float(p_stay)
        self.memory_threshold = float(memory_threshold)
        self.weights = weights if weights is not None else PreferenceWeights()
        self.weather = Weather(weather)
        self.max_steps = max_steps

        self.start_pos = validate_pos(start_pos, self.grid_size)
        self.food = [validate_pos(p, self.grid_size) for p in (DEFAULT_FOOD if food is None else food)]
        self.predators = [
            validate_pos(p, self.grid_size) for p in (DEFAULT_PREDATORS if predators is None else predators)
        ]
        self.shelters = [
            validate_pos(p, self.grid_size) for p in (DEFAULT_SHELTERS if shelters is None else shelters)
        ]

        # Live controls go through the validating properties
        self.precision = precision
        self.obs_noise = obs_noise
        self.step_delay_ms = step_delay_ms
        self.futility_cost = futility_cost

    # --------------------------- live controls --------------------------- #

    @property
    def precision(self) -> float:
        return self._precision

    @precision.setter
    def precision(self, value: float) -> None:
        if value < 0:
            raise ValueError(f"precision must be non-negative, got {value}")
        self._precision = float(value)

    @property
    def obs_noise(self) -> float:
        return self._obs_noise

    @obs_noise.setter
    def obs_noise(self, value: float) -> None:
        if value < 0:
            raise ValueError(f"obs_noise must be non-negative, got {value}")
        self._obs_noise = float(value)

    @property
    def step_delay_ms(self) -> int:
        return self._step_delay_ms

    @step_delay_ms.setter
    def step_delay_ms(self, value: int) -> None:
        if value < 0:
            raise ValueError(f"step_delay_ms must be non-negative, got {value}")
        self._step_delay_ms = int(value)

    @property
    def futility_cost(self) -> float:
        return self._futility_cost

    @futility_cost.setter
    def futility_cost(self, value: float) -> None:
        if value < 0:
            raise ValueError(f"futility_cost must be non-negative, got {value}")
        self._futility_cost = float(value)

    @property
    def hunger_cap(self) -> int:
        return self.max_hunger + HUNGER_BUFFER

    @property
    def n_cells(self) -> int:
        return self.grid_size * self.grid_size

    def to_dict(self) -> Dict[str, Any]:
        return {
            "grid_size": self.grid_size,
            "max_hunger": self.max_hunger,
            "policy_length": self.policy_length,
            "precision": self.precision,
            "obs_noise": self.obs_noise,
            "step_delay_ms": self.step_delay_ms,
            "p_success": self.p_success,
            "p_stay": self.p_stay,
            "futility_cost": self.futility_cost,
            "memory_threshold": self.memory_threshold,
            "weights": self.weights.to_dict(),
            "start_pos": self.start_pos,
            "food": list(self.food),
            "predators": list(self.predators),
            "shelters": list(self.shelters),
            "weather": self.weather.value,
            "max_steps": self.max_steps,
        }

    def __repr__(self) -> str:
        return f"SimulationParams({self.to_dict()})"
