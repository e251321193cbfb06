"""
Plotting utilities for grid-world simulations.

This module provides functions for visualizing a run: hunger, belief
entropy and the expected free energy of the selected policies over cycles.
"""

import logging
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

logger = logging.getLogger(__name__)


def moving_average(x: np.ndarray, w: int) -> np.ndarray:
    """
    Compute moving average of array with window size w.

    Args:
        x: Input array
        w: Window size for moving average

    Returns:
        Array with moving average applied, padded with NaN for alignment
    """
    x = np.asarray(x, dtype=float)
    if w <= 1 or x.size < w:
        return x

    cumsum = np.cumsum(np.insert(x, 0, 0.0))
    ma = (cumsum[w:] - cumsum[:-w]) / float(w)

    # Pad to original length for nicer plotting
    pad = np.full(w - 1, np.nan)
    return np.concatenate([pad, ma])


def history_arrays(history: Sequence[Dict]) -> Dict[str, np.ndarray]:
    """
    Stack ``CycleResult.to_dict()`` summaries into per-metric arrays.

    Returns:
        Dictionary with 'cycle', 'hunger', 'entropy', 'efe', 'instrumental',
        'epistemic', 'futility' and 'ate_food' arrays
    """
    keys = ["cycle", "hunger", "entropy", "efe", "instrumental", "epistemic", "futility", "ate_food"]
    return {k: np.array([float(row[k]) for row in history]) for k in keys}


def plot_run_history(
    history: Sequence[Dict],
    ma_window: int = 5,
    figsize: Tuple[int, int] = (12, 7),
    savefig: Optional[str] = None,
    title_prefix: str = "Active Inference Grid World",
) -> None:
    """
    Plot one run: hunger, belief entropy and the selected policy's EFE terms.

    Args:
        history: Sequence of ``CycleResult.to_dict()`` summaries
        ma_window: Moving average window for the EFE curve
        figsize: Figure size
        savefig: Optional save path
        title_prefix: Prefix for plot title
    """
    if not history:
        logger.warning("Empty run history, nothing to plot")
        return

    try:
        import matplotlib.pyplot as plt
    except ImportError:
        logger.warning("matplotlib not available, skipping plotting")
        return

    data = history_arrays(history)
    t = data["cycle"]
    meals: List[float] = list(t[data["ate_food"] > 0])

    fig = plt.figure(figsize=figsize)

    # 1. Hunger, with meals marked
    ax1 = plt.subplot(2, 2, 1)
    ax1.plot(t, data["hunger"], lw=1.5)
    for m in meals:
        ax1.axvline(m, color="green", alpha=0.3, lw=1)
    ax1.set_title("Hunger (green = ate food)")
    ax1.set_xlabel("Cycle")
    ax1.set_ylabel("Hunger")
    ax1.grid(True, alpha=0.3)

    # 2. Posterior entropy
    ax2 = plt.subplot(2, 2, 2)
    ax2.plot(t, data["entropy"], lw=1.5)
    ax2.set_title("Belief Entropy")
    ax2.set_xlabel("Cycle")
    ax2.set_ylabel("Entropy (nats)")
    ax2.grid(True, alpha=0.3)

    # 3. Selected EFE with moving average
    ax3 = plt.subplot(2, 2, 3)
    ax3.plot(t, data["efe"], lw=0.8, alpha=0.5)
    ax3.plot(t, moving_average(data["efe"], ma_window), lw=2)
    ax3.set_title(f"Selected Policy EFE (MA window={ma_window})")
    ax3.set_xlabel("Cycle")
    ax3.set_ylabel("EFE")
    ax3.grid(True, alpha=0.3)

    # 4. EFE decomposition
    ax4 = plt.subplot(2, 2, 4)
    ax4.plot(t, data["instrumental"], lw=1.5, label="Instrumental")
    ax4.plot(t, data["epistemic"], lw=1.5, label="Epistemic")
    ax4.plot(t, data["futility"], lw=1.5, label="Futility")
    ax4.set_title("EFE Terms")
    ax4.set_xlabel("Cycle")
    ax4.grid(True, alpha=0.3)
    ax4.legend()

    fig.suptitle(
        f"{title_prefix}\n"
        f"Cycles={len(t)}, Meals={len(meals)}, FinalHunger={data['hunger'][-1]:.0f}, "
        f"FinalEntropy={data['entropy'][-1]:.3f}",
        fontsize=11
    )
    fig.tight_layout(rect=[0, 0.03, 1, 0.93])

    if savefig:
        plt.savefig(savefig, dpi=150, bbox_inches='tight')
        logger.info(f"Saved figure to: {savefig}")

    plt.show()
