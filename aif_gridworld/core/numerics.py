"""
Numeric helpers shared by the belief, perception and policy code.

All epsilon handling lives here so that every component treats tiny masses,
log(0) and normalization underflow the same way.
"""

import logging
from typing import Optional

import numpy as np

logger = logging.getLogger(__name__)

EPSILON = 1e-9
LOG_EPSILON = 1e-16


def uniform(n: int) -> np.ndarray:
    """Uniform distribution over n outcomes."""
    if n <= 0:
        raise ValueError(f"Cannot build a uniform distribution over {n} outcomes")
    return np.full(n, 1.0 / n, dtype=np.float64)


def normalize(x: np.ndarray, eps: float = EPSILON, context: Optional[str] = None) -> np.ndarray:
    """
    Normalize a non-negative vector to sum to one.

    Falls back to a uniform distribution (and logs a warning) when the total
    mass is below ``eps`` or not finite.

    Args:
        x: Unnormalized non-negative weights
        eps: Minimum total mass accepted before falling back
        context: Optional label used in the fallback warning

    Returns:
        Probability vector with the same length as ``x``
    """
    x = np.asarray(x, dtype=np.float64)
    total = float(np.sum(x))
    if not np.isfinite(total) or total <= eps:
        logger.warning(
            f"Normalization failed ({context or 'distribution'}, mass={total:.3g}), "
            f"resetting to uniform"
        )
        return uniform(x.size)
    return x / total


def safe_log(x, eps: float = LOG_EPSILON) -> np.ndarray:
    """Logarithm with inputs floored at ``eps``."""
    x = np.asarray(x, dtype=np.float64)
    return np.log(np.maximum(x, eps))


def entropy(p: np.ndarray, eps: float = EPSILON) -> float:
    """Shannon entropy (nats). Entries at or below ``eps`` contribute nothing."""
    p = np.asarray(p, dtype=np.float64)
    mask = p > eps
    return float(-np.sum(p[mask] * np.log(p[mask])))


def kl_divergence(q: np.ndarray, p: np.ndarray, eps: float = EPSILON) -> float:
    """
    KL[q || p] in nats.

    Returns ``inf`` when q puts mass where p has (effectively) none. Small
    negative values from rounding are clipped to zero.
    """
    q = np.asarray(q, dtype=np.float64)
    p = np.asarray(p, dtype=np.float64)
    if q.shape != p.shape:
        raise ValueError(f"Shape mismatch: q{q.shape} vs p{p.shape}")

    support = q > eps
    if np.any(p[support] <= eps):
        return float("inf")
    kl = float(np.sum(q[support] * (np.log(q[support]) - np.log(p[support]))))
    return kl if kl > 0 else 0.0
