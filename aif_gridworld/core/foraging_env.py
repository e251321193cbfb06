"""
Foraging GridWorld Environment (generative process).

An N×N grid holding food, predators and shelters under changing weather.
The agent commits to a whole policy (a fixed-length action sequence) per
step; the environment moves the agent's true location, lets it eat, grows
its hunger and returns a noisy observation of where it ended up.

Actions (per policy element):
    0 = STAY, 1 = UP, 2 = DOWN, 3 = LEFT, 4 = RIGHT

Observations:
    Single discrete index [0, N×N-1], sampled around the true cell with
    Gaussian-like noise σ (σ = 0 is exact).

Dynamics:
    - Off-grid moves leave the agent in place
    - Standing on food eats it (hunger resets to 0, the cell empties)
    - Hunger grows by the policy length per step, capped at max_hunger + 5
    - No terminal states; optional truncation after max_steps

Example:
    >>> from aif_gridworld.core import ForagingGridWorld, Action
    >>>
    >>> env = ForagingGridWorld(grid_size=10, food=[(2, 7)], obs_noise=1.0)
    >>> obs, info = env.reset(seed=0)
    >>> obs, r, terminated, truncated, info = env.step([Action.RIGHT] * 3)
    >>> print(info["pos"], info["hunger"])
"""

import logging
from typing import Any, Dict, Iterable, Optional, Sequence

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from .grid import (
    ACTIONS,
    GRID_SIZE,
    Action,
    CellKind,
    EnvironmentState,
    Pos,
    Weather,
    index_to_loc,
    loc_to_index,
    move,
    validate_pos,
)
from .observation import observation_distribution, sample_observation
from .params import HUNGER_BUFFER, MAX_HUNGER, POLICY_LENGTH

logger = logging.getLogger(__name__)


class ForagingGridWorld(gym.Env):
    """
    Ground-truth world for the Active Inference grid simulation.

    Args:
        grid_size: Side length of the square grid
        food: Initial food locations
        predators: Initial predator locations
        shelters: Initial shelter locations
        start_pos: Agent start (row, col)
        weather: Initial weather ("sunny" or "cloudy")
        policy_length: Number of actions per step
        max_hunger: Starvation threshold; hunger is capped at max_hunger + 5
        obs_noise: Observation noise σ
        max_steps: Truncate after this many steps. None means never
        render_mode: "ansi" for a text board, "rgb_array" for an image

    Attributes:
        action_space: MultiDiscrete([5] * policy_length)
        observation_space: Discrete(N×N)
    """

    metadata = {"render_modes": ["ansi", "rgb_array"], "render_fps": 2}

    def __init__(
        self,
        grid_size: int = GRID_SIZE,
        food: Iterable[Pos] = (),
        predators: Iterable[Pos] = (),
        shelters: Iterable[Pos] = (),
        start_pos: Pos = (0, 0),
        weather: str = "sunny",
        policy_length: int = POLICY_LENGTH,
        max_hunger: int = MAX_HUNGER,
        obs_noise: float = 1.0,
        max_steps: Optional[int] = None,
        render_mode: Optional[str] = None,
    ) -> None:
        super().__init__()

        if grid_size < 2:
            raise ValueError("Grid must be at least 2×2 for meaningful dynamics")
        if obs_noise < 0:
            raise ValueError(f"obs_noise must be non-negative, got {obs_noise}")

        self.grid_size = int(grid_size)
        self.start_pos = validate_pos(start_pos, self.grid_size)
        self.policy_length = int(policy_length)
        self.max_hunger = int(max_hunger)
        self.hunger_cap = self.max_hunger + HUNGER_BUFFER
        self.obs_noise = float(obs_noise)
        self.max_steps = max_steps
        self.render_mode = render_mode

        # Layout restored on every reset
        self._layout = {
            "food": [validate_pos(p, self.grid_size) for p in food],
            "predators": [validate_pos(p, self.grid_size) for p in predators],
            "shelters": [validate_pos(p, self.grid_size) for p in shelters],
        }

        # Spaces
        self.action_space = spaces.MultiDiscrete([len(ACTIONS)] * self.policy_length)
        self.observation_space = spaces.Discrete(self.grid_size * self.grid_size)

        # State
        self.state = self._build_layout(Weather(weather))
        self.pos: Pos = self.start_pos
        self.prev_pos: Pos = self.start_pos
        self.hunger = 0
        self.last_obs: Optional[int] = None
        self._steps = 0

        logger.info(
            f"Created {self.grid_size}×{self.grid_size} ForagingGridWorld: "
            f"food={self._layout['food']}, predators={self._layout['predators']}, "
            f"shelters={self._layout['shelters']}, start={self.start_pos}, weather={self.state.weather.value}"
        )

    # ------------------------- Gymnasium core API ------------------------- #

    def reset(self, *, seed: Optional[int] = None, options: Optional[Dict[str, Any]] = None):
        """
        Restore the initial layout, start position and hunger.

        The current weather is kept unless ``options["weather"]`` overrides it.
        The returned observation is the exact start index.
        """
        super().reset(seed=seed)

        weather = self.state.weather
        if options and "weather" in options:
            weather = Weather(options["weather"])

        self.state = self._build_layout(weather)
        self.pos = self.start_pos
        self.prev_pos = self.start_pos
        self.hunger = 0
        self._steps = 0
        self.last_obs = self._pos_to_idx(self.pos)

        logger.info(f"Environment reset to position {self.pos} (weather={weather.value})")
        return self.last_obs, self._info(ate_food=False)

    def step(self, action: Sequence[int]):
        policy = self._validate_policy(action)
        self._steps += 1

        # Work on a copy so the grid only changes once the whole policy is done
        working = self.state.copy()
        loc = self.pos
        hunger = self.hunger
        ate_food = False

        for a in policy:
            loc, valid = move(loc, a, self.grid_size)
            if not valid:
                logger.debug(f"Move {a.name} from {loc} blocked by the grid edge")
            if working.consume_food(loc):
                hunger = 0
                ate_food = True
                logger.debug(f"Ate food at {loc}")

        hunger = min(hunger + len(policy), self.hunger_cap)

        self.state = working
        self.prev_pos = self.pos
        self.pos = loc
        self.hunger = hunger

        obs = self.observe()
        predator_contact = self.state.cell(self.pos) == CellKind.PREDATOR

        reward = 0.0
        if ate_food:
            reward += 1.0
        if predator_contact:
            reward -= 1.0

        terminated = False
        truncated = self.max_steps is not None and self._steps >= self.max_steps

        logger.debug(
            f"Step {self._steps}: {self.prev_pos} -> {self.pos} via "
            f"{[a.name for a in policy]}, hunger={self.hunger}, obs={index_to_loc(obs, self.grid_size)}"
        )
        return obs, float(reward), terminated, bool(truncated), self._info(ate_food, predator_contact)

    def observe(self) -> int:
        """Sample a noisy observation of the current true location."""
        true_idx = self._pos_to_idx(self.pos)
        dist = observation_distribution(true_idx, self.grid_size, self.obs_noise)
        self.last_obs = sample_observation(dist, self.np_random, default=true_idx)
        return self.last_obs

    def render(self):
        """
        Render the board:
          - 'rgb_array' -> HxWx3 uint8 image
          - otherwise   -> ANSI string board (A = agent)
        """
        if self.render_mode == "rgb_array":
            cell = 16
            colors = {
                CellKind.EMPTY: (255, 255, 255),
                CellKind.FOOD: (0, 200, 0),
                CellKind.PREDATOR: (200, 0, 0),
                CellKind.SHELTER: (0, 0, 200),
            }
            img = np.zeros((self.grid_size, self.grid_size, 3), dtype=np.uint8)
            for kind, color in colors.items():
                img[self.state.grid == kind] = color
            img[self.pos] = (128, 128, 128)

            img = np.kron(img, np.ones((cell, cell, 1), dtype=np.uint8))
            img[::cell, :, :] = 0
            img[:, ::cell, :] = 0
            return img

        return self.state.render_ansi(agent_pos=self.pos)

    def close(self):
        pass

    # ----------------------------- Helpers ------------------------------ #

    def _build_layout(self, weather: Weather) -> EnvironmentState:
        return EnvironmentState(
            self.grid_size,
            food=self._layout["food"],
            predators=self._layout["predators"],
            shelters=self._layout["shelters"],
            weather=weather,
        )

    def _validate_policy(self, action: Sequence[int]):
        arr = np.asarray([int(a) for a in action], dtype=np.int64)
        if not self.action_space.contains(arr):
            raise ValueError(f"Invalid policy {list(action)}, must be in {self.action_space}")
        return [Action(int(a)) for a in arr]

    def _info(self, ate_food: bool, predator_contact: bool = False) -> Dict[str, Any]:
        return {
            "pos": self.pos,
            "prev_pos": self.prev_pos,
            "hunger": self.hunger,
            "ate_food": ate_food,
            "predator_contact": predator_contact,
        }

    def _pos_to_idx(self, pos: Pos) -> int:
        return loc_to_index(pos, self.grid_size)

    def _idx_to_pos(self, idx: int) -> Pos:
        return index_to_loc(idx, self.grid_size)


# Optional: lightweight registration helper for gymnasium.make
try:
    from gymnasium.envs.registration import register

    register(
        id="ForagingGridWorld-AIF-v0",
        entry_point="aif_gridworld.core.foraging_env:ForagingGridWorld",
        kwargs={},
        max_episode_steps=None,
    )
except Exception:
    # Safe to ignore if registration is called multiple times or in notebooks
    pass
