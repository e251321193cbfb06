"""
Expected Free Energy (EFE) of a policy.

    EFE = instrumental + epistemic + futility

    instrumental = -E_q(s_T)[preference(s_T)]     (risk; lower is better)
    epistemic    = H[q(s_T)] - H[q(s_0)]          (negative when uncertainty shrinks)
    futility     = cost of probability mass pushed into the grid edge
"""

import logging
import math
from typing import Dict, Sequence

import numpy as np

from ..core.grid import Action
from ..core.numerics import EPSILON, entropy
from .transition import TransitionModel

logger = logging.getLogger(__name__)

MAX_EFE_CLAMP = 1000.0


class EFEResult:
    """EFE of one policy with its components."""

    def __init__(self, efe: float, instrumental: float, epistemic: float, futility: float = 0.0):
        self.efe = efe
        self.instrumental = instrumental
        self.epistemic = epistemic
        self.futility = futility

    def to_dict(self) -> Dict[str, float]:
        return {
            "efe": self.efe,
            "instrumental": self.instrumental,
            "epistemic": self.epistemic,
            "futility": self.futility,
        }

    def __repr__(self) -> str:
        return (
            f"EFEResult(efe={self.efe:.3f}, instrumental={self.instrumental:.3f}, "
            f"epistemic={self.epistemic:.3f}, futility={self.futility:.3f})"
        )


def _finite_or_inf(x: float) -> float:
    return math.inf if math.isnan(x) else x


def calculate_efe(
    policy: Sequence[Action],
    initial_belief: np.ndarray,
    preferences: np.ndarray,
    transition: TransitionModel,
    futility_cost: float = 2.0,
) -> EFEResult:
    """
    Score a policy by expected free energy.

    Args:
        policy: Actions to evaluate
        initial_belief: Current belief over cells
        preferences: Log-preference score of every cell
        transition: Model used to predict beliefs under the policy
        futility_cost: Weight of the futility penalty

    Returns:
        EFEResult with the total clamped to [-1000, 1000]; NaN maps to +inf
    """
    beliefs, futility = transition.predict_belief_sequence(policy, initial_belief, futility_cost)
    final = beliefs[-1]

    support = final > EPSILON
    with np.errstate(invalid="ignore", over="ignore"):
        expected_score = float(np.sum(final[support] * preferences[support]))
    instrumental = -expected_score

    epistemic = entropy(final) - entropy(initial_belief)

    efe = instrumental + epistemic + futility
    if not math.isnan(efe):
        efe = max(-MAX_EFE_CLAMP, min(MAX_EFE_CLAMP, efe))

    return EFEResult(
        efe=_finite_or_inf(efe),
        instrumental=_finite_or_inf(instrumental),
        epistemic=_finite_or_inf(epistemic),
        futility=_finite_or_inf(futility),
    )
