"""
Perception: Bayesian belief update from a location observation.
"""

import logging

import numpy as np

from ..core.numerics import EPSILON, uniform
from ..core.observation import observation_likelihood

logger = logging.getLogger(__name__)


def bayesian_update(prior: np.ndarray, likelihood: np.ndarray) -> np.ndarray:
    """
    posterior(s) ∝ p(o | s) · prior(s)

    Args:
        prior: Predicted belief before the observation
        likelihood: p(o | s) for the received observation, over all states

    Returns:
        Normalized posterior. Falls back to uniform (with a warning) when the
        product underflows.
    """
    prior = np.asarray(prior, dtype=np.float64)
    posterior = np.where(prior > EPSILON, np.asarray(likelihood, dtype=np.float64) * prior, 0.0)
    total = float(posterior.sum())
    if not np.isfinite(total) or total <= EPSILON:
        logger.warning("Posterior belief normalization failed, resetting to uniform.")
        return uniform(prior.size)
    return posterior / total


def update_belief(prior: np.ndarray, obs_index: int, grid_size: int, noise_sigma: float) -> np.ndarray:
    """Bayesian update of ``prior`` with the noisy location observation ``obs_index``."""
    likelihood = observation_likelihood(obs_index, grid_size, noise_sigma)
    return bayesian_update(prior, likelihood)
