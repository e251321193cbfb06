"""
Stochastic transition model used to roll beliefs forward under a policy.

The model is precomputed once as a column-stochastic tensor
``B[next, prev, action]`` plus a futility table ``F[prev, action]`` holding the
probability mass that an action pushes into the grid edge.
"""

import logging
from typing import List, Sequence, Tuple

import numpy as np

from ..core.grid import ACTIONS, GRID_SIZE, SLIP_ACTIONS, Action, index_to_loc, loc_to_index, move
from ..core.numerics import normalize

logger = logging.getLogger(__name__)


class TransitionModel:
    """
    Move / stay / slip dynamics over grid cells.

    For every action other than STAY, ``p_success`` of the mass reaches the
    intended cell, ``p_stay`` stays put and the remainder is split evenly
    between the valid perpendicular neighbours (or stays, when there are
    none). An intended move off the grid keeps its ``p_success`` mass in
    place and records it as futile. STAY never moves or slips.

    Args:
        grid_size: Side length of the grid
        p_success: Probability of reaching the intended cell
        p_stay: Probability of staying in place

    Raises:
        ValueError: If the probabilities are invalid
    """

    def __init__(self, grid_size: int = GRID_SIZE, p_success: float = 0.85, p_stay: float = 0.10) -> None:
        if not (0.0 <= p_success <= 1.0 and 0.0 <= p_stay <= 1.0) or p_success + p_stay > 1.0 + 1e-12:
            raise ValueError(f"Invalid transition probabilities p_success={p_success}, p_stay={p_stay}")

        self.grid_size = int(grid_size)
        self.p_success = float(p_success)
        self.p_stay = float(p_stay)
        self.p_slip = max(0.0, 1.0 - self.p_success - self.p_stay)

        self.B, self.F = self._build()
        logger.debug(
            f"Built transition model for {self.grid_size}×{self.grid_size} grid "
            f"(p_success={self.p_success}, p_stay={self.p_stay}, p_slip={self.p_slip:.3f})"
        )

    @property
    def n_states(self) -> int:
        return self.grid_size * self.grid_size

    def _build(self) -> Tuple[np.ndarray, np.ndarray]:
        S = self.n_states
        U = len(ACTIONS)
        B = np.zeros((S, S, U), dtype=np.float64)
        F = np.zeros((S, U), dtype=np.float64)

        for s_prev in range(S):
            loc = index_to_loc(s_prev, self.grid_size)
            for a in ACTIONS:
                if a == Action.STAY:
                    B[s_prev, s_prev, a] = 1.0
                    continue

                target, valid = move(loc, a, self.grid_size)
                if valid:
                    B[loc_to_index(target, self.grid_size), s_prev, a] += self.p_success
                else:
                    B[s_prev, s_prev, a] += self.p_success
                    F[s_prev, a] = self.p_success

                B[s_prev, s_prev, a] += self.p_stay

                if self.p_slip > 0:
                    slips = []
                    for side in SLIP_ACTIONS[a]:
                        nxt, ok = move(loc, side, self.grid_size)
                        if ok:
                            slips.append(loc_to_index(nxt, self.grid_size))
                    if slips:
                        for s_next in slips:
                            B[s_next, s_prev, a] += self.p_slip / len(slips)
                    else:
                        B[s_prev, s_prev, a] += self.p_slip

        return B, F

    def step(self, belief: np.ndarray, action: Action) -> Tuple[np.ndarray, float]:
        """
        Propagate a belief through one action.

        Returns:
            (next_belief, futile_mass) where futile_mass is the probability
            mass that tried to leave the grid
        """
        a = int(action)
        futile_mass = float(self.F[:, a] @ belief)
        next_belief = normalize(self.B[:, :, a] @ belief, context="belief prediction")
        return next_belief, futile_mass

    def predict_belief_sequence(
        self,
        policy: Sequence[Action],
        initial_belief: np.ndarray,
        futility_cost: float = 2.0,
    ) -> Tuple[List[np.ndarray], float]:
        """
        Roll a belief forward through every action of a policy.

        Args:
            policy: Ordered actions
            initial_belief: Belief before the first action
            futility_cost: Weight applied to the accumulated futile mass

        Returns:
            (beliefs, futility_penalty) where ``beliefs[0]`` is the initial
            belief and ``beliefs[k]`` the belief after k actions
        """
        current = np.asarray(initial_belief, dtype=np.float64)
        beliefs = [current]
        futile_total = 0.0

        for action in policy:
            current, futile_mass = self.step(current, action)
            futile_total += futile_mass
            beliefs.append(current)

        return beliefs, futility_cost * futile_total
