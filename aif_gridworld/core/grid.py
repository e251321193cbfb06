"""
Grid, cell, action and weather types for the foraging grid world.

The environment is an N×N grid of cell tags. Item positions are also kept as
per-kind location lists; every mutation goes through ``EnvironmentState`` so
that the grid and the lists never disagree.
"""

import logging
from enum import Enum, IntEnum
from typing import Dict, Iterable, List, Optional, Tuple

import numpy as np

logger = logging.getLogger(__name__)

Pos = Tuple[int, int]

GRID_SIZE = 10


class CellKind(IntEnum):
    EMPTY = 0
    FOOD = 1
    PREDATOR = 2
    SHELTER = 3


class Action(IntEnum):
    STAY = 0
    UP = 1
    DOWN = 2
    LEFT = 3
    RIGHT = 4


class Weather(str, Enum):
    SUNNY = "sunny"
    CLOUDY = "cloudy"


ACTIONS: Tuple[Action, ...] = tuple(Action)

ACTION_DELTAS: Dict[Action, Tuple[int, int]] = {
    Action.STAY: (0, 0),
    Action.UP: (-1, 0),
    Action.DOWN: (1, 0),
    Action.LEFT: (0, -1),
    Action.RIGHT: (0, 1),
}

# Perpendicular moves an intended action can slip into
SLIP_ACTIONS: Dict[Action, Tuple[Action, ...]] = {
    Action.STAY: (),
    Action.UP: (Action.LEFT, Action.RIGHT),
    Action.DOWN: (Action.LEFT, Action.RIGHT),
    Action.LEFT: (Action.UP, Action.DOWN),
    Action.RIGHT: (Action.UP, Action.DOWN),
}

ITEM_KINDS: Tuple[CellKind, ...] = (CellKind.FOOD, CellKind.PREDATOR, CellKind.SHELTER)

CELL_SYMBOLS = {
    CellKind.EMPTY: ".",
    CellKind.FOOD: "F",
    CellKind.PREDATOR: "P",
    CellKind.SHELTER: "S",
}


# ----------------------------- Location helpers ----------------------------- #

def is_valid(loc: Pos, grid_size: int = GRID_SIZE) -> bool:
    r, c = loc
    return 0 <= r < grid_size and 0 <= c < grid_size


def validate_pos(loc: Pos, grid_size: int = GRID_SIZE) -> Pos:
    """Return ``loc`` as an int tuple, raising ValueError when off-grid."""
    r, c = int(loc[0]), int(loc[1])
    if not is_valid((r, c), grid_size):
        raise ValueError(f"Position {tuple(loc)} out of bounds for {grid_size}×{grid_size} grid")
    return (r, c)


def loc_to_index(loc: Pos, grid_size: int = GRID_SIZE) -> int:
    r, c = loc
    return r * grid_size + c


def index_to_loc(index: int, grid_size: int = GRID_SIZE) -> Pos:
    return (int(index) // grid_size, int(index) % grid_size)


def move(loc: Pos, action: Action, grid_size: int = GRID_SIZE) -> Tuple[Pos, bool]:
    """
    Apply an action to a location.

    Returns:
        (next_loc, valid) where an off-grid move leaves the agent in place and
        reports ``valid=False``.
    """
    dr, dc = ACTION_DELTAS[Action(action)]
    nxt = (loc[0] + dr, loc[1] + dc)
    if is_valid(nxt, grid_size):
        return nxt, True
    return loc, False


# ----------------------------- Environment state ---------------------------- #

class EnvironmentState:
    """
    Ground-truth world: cell grid, weather and per-kind item locations.

    Args:
        grid_size: Side length of the square grid
        food: Initial food locations
        predators: Initial predator locations
        shelters: Initial shelter locations
        weather: Initial weather

    Raises:
        ValueError: If any location is off-grid
    """

    def __init__(
        self,
        grid_size: int = GRID_SIZE,
        food: Iterable[Pos] = (),
        predators: Iterable[Pos] = (),
        shelters: Iterable[Pos] = (),
        weather: Weather = Weather.SUNNY,
    ) -> None:
        self.grid_size = int(grid_size)
        self.grid = np.full((self.grid_size, self.grid_size), CellKind.EMPTY, dtype=np.int8)
        self.weather = Weather(weather)
        self.food_locations: List[Pos] = []
        self.predator_locations: List[Pos] = []
        self.shelter_locations: List[Pos] = []

        for kind, locs in ((CellKind.FOOD, food), (CellKind.PREDATOR, predators), (CellKind.SHELTER, shelters)):
            for loc in locs:
                self.set_cell(loc, kind)

    # -- queries --

    def cell(self, loc: Pos) -> CellKind:
        return CellKind(int(self.grid[loc[0], loc[1]]))

    def locations(self, kind: CellKind) -> List[Pos]:
        if kind == CellKind.FOOD:
            return self.food_locations
        if kind == CellKind.PREDATOR:
            return self.predator_locations
        if kind == CellKind.SHELTER:
            return self.shelter_locations
        raise ValueError(f"No location list for cell kind {kind!r}")

    def is_consistent(self) -> bool:
        """Check that every item list matches the grid tags exactly."""
        for kind in ITEM_KINDS:
            on_grid = {(int(r), int(c)) for r, c in zip(*np.nonzero(self.grid == kind))}
            listed = self.locations(kind)
            if len(listed) != len(set(listed)) or set(listed) != on_grid:
                return False
        return True

    # -- mutations --

    def set_cell(self, loc: Pos, kind: CellKind) -> None:
        """Overwrite one cell, keeping the location lists in sync."""
        loc = validate_pos(loc, self.grid_size)
        kind = CellKind(kind)
        current = self.cell(loc)
        if current != CellKind.EMPTY:
            self.locations(current).remove(loc)
        self.grid[loc] = kind
        if kind != CellKind.EMPTY:
            self.locations(kind).append(loc)

    def place(self, kind: CellKind, loc: Pos) -> CellKind:
        """
        Placement tool semantics.

        Placing ``EMPTY`` or the kind already present clears the cell; any
        other kind replaces whatever was there.

        Returns:
            The cell kind after the edit
        """
        loc = validate_pos(loc, self.grid_size)
        kind = CellKind(kind)
        if kind == CellKind.EMPTY or kind == self.cell(loc):
            self.set_cell(loc, CellKind.EMPTY)
        else:
            self.set_cell(loc, kind)
        logger.debug(f"Placed {kind.name} at {loc} -> {self.cell(loc).name}")
        return self.cell(loc)

    def consume_food(self, loc: Pos) -> bool:
        """Remove food at ``loc``. Returns True when something was eaten."""
        if self.cell(loc) != CellKind.FOOD:
            return False
        self.set_cell(loc, CellKind.EMPTY)
        return True

    def clear(self) -> None:
        self.grid[:, :] = CellKind.EMPTY
        self.food_locations.clear()
        self.predator_locations.clear()
        self.shelter_locations.clear()

    def toggle_weather(self) -> Weather:
        self.weather = Weather.CLOUDY if self.weather == Weather.SUNNY else Weather.SUNNY
        return self.weather

    def copy(self) -> "EnvironmentState":
        other = EnvironmentState(self.grid_size, weather=self.weather)
        other.grid = self.grid.copy()
        other.food_locations = list(self.food_locations)
        other.predator_locations = list(self.predator_locations)
        other.shelter_locations = list(self.shelter_locations)
        return other

    def render_ansi(self, agent_pos: Optional[Pos] = None) -> str:
        rows = []
        for r in range(self.grid_size):
            line = []
            for c in range(self.grid_size):
                if agent_pos is not None and (r, c) == tuple(agent_pos):
                    line.append("A")
                else:
                    line.append(CELL_SYMBOLS[self.cell((r, c))])
            rows.append(" ".join(line))
        return "\n".join(rows)

    def __repr__(self) -> str:
        return (
            f"EnvironmentState(size={self.grid_size}, weather={self.weather.value}, "
            f"food={self.food_locations}, predators={self.predator_locations}, "
            f"shelters={self.shelter_locations})"
        )


def initial_belief(start: Pos, grid_size: int = GRID_SIZE, confidence: float = 0.99) -> np.ndarray:
    """Near-deterministic belief: ``confidence`` at ``start``, the rest spread uniformly."""
    n_cells = grid_size * grid_size
    belief = np.full(n_cells, (1.0 - confidence) / (n_cells - 1), dtype=np.float64)
    belief[loc_to_index(start, grid_size)] = confidence
    return belief / belief.sum()
