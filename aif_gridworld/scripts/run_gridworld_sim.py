"""
Run the Active Inference grid world headlessly.

This script drives a simulation through the timer-based scheduler for a
fixed number of cycles, logs one line per cycle, and optionally prints the
board and plots the run history.
"""

import asyncio
import logging
from typing import List, NoReturn

from ..core.params import SimulationParams
from ..utils.cycle_runner import CycleResult, SimulationState
from ..utils.parsers import create_simulation_parser, parse_simulation_args
from ..utils.plotting import plot_run_history
from ..utils.scheduler import SimulationScheduler

logger = logging.getLogger(__name__)


def run_simulation(
    params: SimulationParams,
    cycles: int = 30,
    seed: int = 0,
    render: bool = False,
) -> List[CycleResult]:
    """
    Run ``cycles`` Active Inference cycles.

    Args:
        params: Simulation parameters
        cycles: Number of cycles to run
        seed: Random seed
        render: Print the board after every cycle

    Returns:
        CycleResults in order
    """
    logger.info(f"Running {cycles} cycles on {params.grid_size}×{params.grid_size} grid (seed={seed})")

    state = SimulationState(params, seed=seed)

    def report(result: CycleResult) -> None:
        summary = result.to_dict()
        logger.info(
            f"Cycle {summary['cycle']:3d}: {summary['policy']:<24} p={summary['prob']:.3f} "
            f"EFE={summary['efe']:8.3f} true={summary['true_location']} "
            f"obs={summary['observed_location']} peak={summary['peak_location']} "
            f"H={summary['entropy']:.3f} hunger={summary['hunger']}"
            + (" ate food" if summary["ate_food"] else "")
            + (f" memorized {result.memorized}" if result.memorized else "")
        )
        if render:
            print(state.env.render())
            print()

    scheduler = SimulationScheduler(state, on_cycle=report)
    results = asyncio.run(scheduler.run_cycles(cycles))

    meals = sum(1 for r in results if r.ate_food)
    print(f"Cycles:          {len(results)}")
    print(f"Meals:           {meals}")
    print(f"Final location:  {state.env.pos}")
    print(f"Final hunger:    {state.env.hunger}")
    print(f"Belief entropy:  {state.belief_entropy:.3f}")
    print(f"Memory:          {state.memory.to_dict()}")

    logger.info(f"Simulation completed: {len(results)} cycles, {meals} meals")
    return results


def main() -> NoReturn:
    """Main entry point with argument parsing."""
    parser = create_simulation_parser(
        description="Run the Active Inference grid world simulation",
        add_experiment=True,
        add_plotting=True,
    )

    args = parser.parse_args()

    # Configure logging
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    params = parse_simulation_args(args)

    results = run_simulation(
        params,
        cycles=args.cycles,
        seed=args.seed,
        render=args.render,
    )

    if args.plot or args.savefig:
        plot_run_history(
            [r.to_dict() for r in results],
            ma_window=args.ma_window,
            savefig=args.savefig if args.savefig else None,
            title_prefix=f"Active Inference Grid World ({params.grid_size}×{params.grid_size}, γ={params.precision})",
        )


if __name__ == "__main__":
    main()
