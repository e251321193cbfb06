"""
Noisy location observations.

The agent observes a cell index drawn around its true location with a
Gaussian-like falloff ``exp(-d² / 2σ²)``. σ = 0 is a perfect observation.
"""

import logging

import numpy as np

from .numerics import EPSILON, uniform

logger = logging.getLogger(__name__)

_COORD_CACHE = {}


def cell_coords(grid_size: int) -> np.ndarray:
    coords = _COORD_CACHE.get(grid_size)
    if coords is None:
        idx = np.arange(grid_size * grid_size)
        coords = np.stack([idx // grid_size, idx % grid_size], axis=1).astype(np.float64)
        _COORD_CACHE[grid_size] = coords
    return coords


def observation_likelihood(obs_index: int, grid_size: int, noise_sigma: float) -> np.ndarray:
    """
    Unnormalized p(o | s) for a fixed observation ``o`` and every state ``s``.

    Args:
        obs_index: Observed cell index
        grid_size: Side length of the grid
        noise_sigma: Observation noise σ

    Returns:
        Vector of length grid_size² with values in [0, 1]
    """
    n_cells = grid_size * grid_size
    if noise_sigma <= 0:
        lik = np.zeros(n_cells, dtype=np.float64)
        lik[int(obs_index)] = 1.0
        return lik

    coords = cell_coords(grid_size)
    dist_sq = np.sum((coords - coords[int(obs_index)]) ** 2, axis=1)
    return np.exp(-dist_sq / (2.0 * noise_sigma ** 2))


def observation_distribution(true_index: int, grid_size: int, noise_sigma: float) -> np.ndarray:
    """
    Normalized p(o | s_true) over every possible observation.

    The Gaussian kernel is symmetric, so this is the likelihood vector centred
    on the true cell, normalized over observations.
    """
    n_cells = grid_size * grid_size
    weights = observation_likelihood(true_index, grid_size, noise_sigma)
    total = float(weights.sum())
    if total > EPSILON:
        return weights / total

    if noise_sigma <= 0:
        dist = np.zeros(n_cells, dtype=np.float64)
        dist[int(true_index)] = 1.0
        return dist
    logger.warning("Observation distribution underflowed, falling back to uniform")
    return uniform(n_cells)


def sample_observation(dist: np.ndarray, rng: np.random.Generator, default: int) -> int:
    """
    Inverse-CDF sample from an observation distribution.

    Returns ``default`` (the true index) if rounding leaves the cumulative sum
    short of the uniform draw.
    """
    u = rng.random()
    cumulative = np.cumsum(dist)
    hits = np.nonzero(u < cumulative)[0]
    if hits.size == 0:
        logger.debug(f"Observation sampling fell through (u={u:.6f}), using true index {default}")
        return int(default)
    return int(hits[0])
