"""
Argument parsing utilities for grid-world simulations.

This module provides the argument groups shared by the simulation scripts
and turns parsed arguments into ``SimulationParams``.
"""

import argparse
from typing import List, Tuple

from ..core.params import SimulationParams, PreferenceWeights


def parse_pos(s: str) -> Tuple[int, int]:
    """
    Parse position string into (row, col) tuple.

    Args:
        s: Position string in format "row,col"

    Returns:
        Tuple of (row, col) integers

    Raises:
        ValueError: If position string format is invalid
    """
    try:
        r, c = s.split(",")
        return (int(r.strip()), int(c.strip()))
    except ValueError as e:
        raise ValueError(f"Invalid position format '{s}'. Expected 'row,col'") from e


def parse_pos_list(s: str) -> List[Tuple[int, int]]:
    """
    Parse a ';'-separated list of positions, e.g. "2,7;4,4".

    An empty string or "none" yields an empty list.
    """
    if not s.strip() or s.strip().lower() == "none":
        return []
    return [parse_pos(part) for part in s.split(";") if part.strip()]


def add_gridworld_arguments(parser: argparse.ArgumentParser) -> None:
    """
    Add grid layout arguments to parser.

    Args:
        parser: ArgumentParser instance to add arguments to
    """
    grid_group = parser.add_argument_group('Grid World')

    grid_group.add_argument(
        "--grid-size",
        type=int,
        default=10,
        help="Side length of the square grid"
    )
    grid_group.add_argument(
        "--food",
        type=str,
        default="2,7",
        help="Food locations as 'row,col;row,col' ('none' for no food)"
    )
    grid_group.add_argument(
        "--predator",
        type=str,
        default="8,2",
        help="Predator locations as 'row,col;row,col' ('none' for no predators)"
    )
    grid_group.add_argument(
        "--shelter",
        type=str,
        default="5,5",
        help="Shelter locations as 'row,col;row,col' ('none' for no shelters)"
    )
    grid_group.add_argument(
        "--start-pos",
        type=str,
        default="0,0",
        help="Starting position as 'row,col'"
    )
    grid_group.add_argument(
        "--weather",
        type=str,
        default="sunny",
        choices=["sunny", "cloudy"],
        help="Initial weather (cloudy shrinks perception and favours shelter)"
    )
    grid_group.add_argument(
        "--max-hunger",
        type=int,
        default=20,
        help="Hunger level treated as starving"
    )


def add_agent_arguments(parser: argparse.ArgumentParser) -> None:
    """
    Add Active Inference agent arguments to parser.

    Args:
        parser: ArgumentParser instance to add arguments to
    """
    agent_group = parser.add_argument_group('Active Inference Agent')

    agent_group.add_argument(
        "--policy-len",
        type=int,
        default=3,
        help="Policy length (planning horizon)"
    )
    agent_group.add_argument(
        "--precision",
        type=float,
        default=3.0,
        help="Policy precision γ"
    )
    agent_group.add_argument(
        "--obs-noise",
        type=float,
        default=1.0,
        help="Observation noise σ (0 = perfect observation)"
    )
    agent_group.add_argument(
        "--futility-cost",
        type=float,
        default=2.0,
        help="Penalty weight for probability mass pushed into walls"
    )
    agent_group.add_argument(
        "--memory-threshold",
        type=float,
        default=0.6,
        help="Posterior mass needed to memorize an item location"
    )
    agent_group.add_argument(
        "--w-food",
        type=float,
        default=5.0,
        help="Food drive weight"
    )
    agent_group.add_argument(
        "--w-predator",
        type=float,
        default=10.0,
        help="Predator avoidance weight"
    )
    agent_group.add_argument(
        "--w-shelter",
        type=float,
        default=5.0,
        help="Shelter drive weight (cloudy weather only)"
    )
    agent_group.add_argument(
        "--w-weather",
        type=float,
        default=2.0,
        help="Weather sensitivity weight"
    )


def add_experiment_arguments(parser: argparse.ArgumentParser) -> None:
    """
    Add run control arguments to parser.

    Args:
        parser: ArgumentParser instance to add arguments to
    """
    exp_group = parser.add_argument_group('Run Settings')

    exp_group.add_argument(
        "--cycles",
        type=int,
        default=30,
        help="Number of Active Inference cycles to run"
    )
    exp_group.add_argument(
        "--seed",
        type=int,
        default=0,
        help="Random seed for reproducibility"
    )
    exp_group.add_argument(
        "--delay-ms",
        type=int,
        default=0,
        help="Delay between cycles in milliseconds"
    )
    exp_group.add_argument(
        "--render",
        action="store_true",
        help="Print the board after every cycle"
    )


def add_plotting_arguments(parser: argparse.ArgumentParser) -> None:
    """
    Add plotting arguments to parser.

    Args:
        parser: ArgumentParser instance to add arguments to
    """
    plot_group = parser.add_argument_group('Plotting')

    plot_group.add_argument(
        "--plot",
        action="store_true",
        help="Plot hunger, belief entropy and EFE history after the run"
    )
    plot_group.add_argument(
        "--ma-window",
        type=int,
        default=5,
        help="Moving average window for plots"
    )
    plot_group.add_argument(
        "--savefig",
        type=str,
        default="",
        help="Optional path to save figure (PNG)"
    )


def parse_simulation_args(args: argparse.Namespace) -> SimulationParams:
    """
    Build validated simulation parameters from parsed arguments.

    Args:
        args: Parsed command line arguments

    Returns:
        SimulationParams

    Raises:
        ValueError: If positions or parameter values are invalid
    """
    try:
        food = parse_pos_list(args.food)
        predators = parse_pos_list(args.predator)
        shelters = parse_pos_list(args.shelter)
        start_pos = parse_pos(args.start_pos)
    except ValueError as e:
        raise ValueError(f"Position parsing error: {e}") from e

    weights = PreferenceWeights(
        food=args.w_food,
        predator=args.w_predator,
        shelter=args.w_shelter,
        weather=args.w_weather,
    )
    return SimulationParams(
        grid_size=args.grid_size,
        max_hunger=args.max_hunger,
        policy_length=args.policy_len,
        precision=args.precision,
        obs_noise=args.obs_noise,
        step_delay_ms=getattr(args, "delay_ms", 0),
        futility_cost=args.futility_cost,
        memory_threshold=args.memory_threshold,
        weights=weights,
        start_pos=start_pos,
        food=food,
        predators=predators,
        shelters=shelters,
        weather=args.weather,
    )


def create_simulation_parser(
    description: str = "Active Inference grid world simulation",
    add_experiment: bool = True,
    add_plotting: bool = False,
) -> argparse.ArgumentParser:
    """
    Create a configured argument parser for grid-world simulations.

    Args:
        description: Parser description
        add_experiment: Whether to add run control arguments
        add_plotting: Whether to add plotting arguments

    Returns:
        Configured ArgumentParser instance
    """
    parser = argparse.ArgumentParser(description=description)

    add_gridworld_arguments(parser)
    add_agent_arguments(parser)

    if add_experiment:
        add_experiment_arguments(parser)

    if add_plotting:
        add_plotting_arguments(parser)

    return parser
