"""
Policy enumeration, softmax over EFE and policy sampling.
"""

import itertools
import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np

from ..core.grid import ACTIONS, Action
from ..core.numerics import EPSILON

logger = logging.getLogger(__name__)

Policy = Tuple[Action, ...]


def enumerate_policies(policy_length: int, actions: Sequence[Action] = ACTIONS) -> List[Policy]:
    """All action sequences of the given length, in lexicographic action order."""
    if policy_length < 1:
        raise ValueError(f"policy_length must be at least 1, got {policy_length}")
    return [tuple(p) for p in itertools.product(actions, repeat=policy_length)]


def calculate_softmax(values: Sequence[float], precision: float) -> np.ndarray:
    """
    Policy probabilities ``p[i] ∝ exp(-γ (G[i] - min G))``.

    Non-finite EFEs get probability 0. If no EFE is finite the result is
    uniform; a single finite EFE gets probability 1.

    Args:
        values: EFE per policy
        precision: Inverse temperature γ

    Returns:
        Probability vector with the same length as ``values``
    """
    efe = np.asarray(values, dtype=np.float64)
    n = efe.size
    if n == 0:
        return np.zeros(0)

    finite = np.isfinite(efe)
    n_finite = int(finite.sum())
    if n_finite == 0:
        return np.full(n, 1.0 / n)
    if n_finite == 1:
        return finite.astype(np.float64)

    shift = float(np.min(efe[finite]))
    weights = np.zeros(n, dtype=np.float64)
    weights[finite] = np.exp(-precision * (efe[finite] - shift))
    total = float(weights.sum())
    if total < EPSILON:
        logger.warning("Softmax weights underflowed, using uniform policy distribution")
        return np.full(n, 1.0 / n)
    return weights / total


def sample_index(probs: np.ndarray, efe_values: Sequence[float], rng: np.random.Generator) -> int:
    """
    Inverse-CDF sample of a policy index.

    Falls back to the minimum finite EFE (or 0) if rounding leaves the CDF
    short of the uniform draw.
    """
    if len(probs) == 0:
        raise ValueError("Cannot sample from an empty policy distribution")

    u = rng.random()
    hits = np.nonzero(u < np.cumsum(probs))[0]
    if hits.size > 0:
        return int(hits[0])

    efe = np.asarray(efe_values, dtype=np.float64)
    finite = np.isfinite(efe)
    fallback = int(np.argmin(np.where(finite, efe, np.inf))) if finite.any() else 0
    logger.debug(f"Policy sampling fell through (u={u:.6f}), using index {fallback}")
    return fallback


def policy_label(policy: Sequence[Action]) -> str:
    return "[" + ",".join(Action(a).name.lower() for a in policy) + "]"


def top_policies(
    policies: Sequence[Policy],
    probs: np.ndarray,
    efe_results: Sequence[Any],
    n: int = 5,
    selected: Optional[int] = None,
) -> List[Dict[str, Any]]:
    """
    The ``n`` most probable policies with their EFE breakdown.

    Returns:
        List of dicts with keys index, policy, prob, efe, instrumental,
        epistemic, selected (sorted by probability, highest first)
    """
    order = sorted(range(len(policies)), key=lambda i: probs[i], reverse=True)[:n]
    rows = []
    for i in order:
        res = efe_results[i]
        rows.append({
            "index": i,
            "policy": policy_label(policies[i]),
            "prob": float(probs[i]),
            "efe": res.efe,
            "instrumental": res.instrumental,
            "epistemic": res.epistemic,
            "selected": i == selected,
        })
    return rows
