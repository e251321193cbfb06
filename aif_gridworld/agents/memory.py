"""
Known-locations memory.

The agent remembers where it has confidently seen food, predators and
shelters. Food is transient: remembered food that is no longer on the grid
is forgotten on the next update.
"""

import logging
from typing import Dict, List, Set

import numpy as np

from ..core.grid import ITEM_KINDS, CellKind, EnvironmentState, Pos, index_to_loc

logger = logging.getLogger(__name__)


class KnownLocations:
    """Sets of confirmed food / predator / shelter locations."""

    def __init__(self) -> None:
        self.food: Set[Pos] = set()
        self.predator: Set[Pos] = set()
        self.shelter: Set[Pos] = set()

    def of_kind(self, kind: CellKind) -> Set[Pos]:
        if kind == CellKind.FOOD:
            return self.food
        if kind == CellKind.PREDATOR:
            return self.predator
        if kind == CellKind.SHELTER:
            return self.shelter
        raise ValueError(f"Nothing to remember for cell kind {kind!r}")

    def update(self, posterior: np.ndarray, environment: EnvironmentState, threshold: float = 0.6) -> List[Pos]:
        """
        Confirm items under confident belief and forget consumed food.

        Args:
            posterior: Belief over cells after perception
            environment: Ground truth used to cross-check confident cells
            threshold: Minimum posterior mass for a confirmation

        Returns:
            Locations newly added to memory
        """
        added: List[Pos] = []
        for idx in np.nonzero(posterior > threshold)[0]:
            loc = index_to_loc(int(idx), environment.grid_size)
            kind = environment.cell(loc)
            if kind == CellKind.EMPTY:
                continue
            known = self.of_kind(kind)
            if loc not in known:
                known.add(loc)
                added.append(loc)
                logger.info(f"Memorized {kind.name.lower()} at {loc} (belief={posterior[idx]:.2f})")

        stale = {loc for loc in self.food if environment.cell(loc) != CellKind.FOOD}
        if stale:
            self.food -= stale
            logger.info(f"Forgot food at {sorted(stale)}")

        return added

    def clear(self) -> None:
        self.food.clear()
        self.predator.clear()
        self.shelter.clear()

    def to_dict(self) -> Dict[str, List[Pos]]:
        return {kind.name.lower(): sorted(self.of_kind(kind)) for kind in ITEM_KINDS}

    def __len__(self) -> int:
        return len(self.food) + len(self.predator) + len(self.shelter)

    def __repr__(self) -> str:
        return f"KnownLocations({self.to_dict()})"
