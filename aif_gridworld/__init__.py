"""
Active Inference Grid World Package

A small discrete-time Active Inference simulation: an agent keeps a belief
over its location on a 10×10 grid, scores fixed-length policies by expected
free energy, acts, observes its position through noise and updates its
belief and memory.

Modules:
    core: Grid world state, gymnasium environment and parameters
    agents: Belief prediction, preferences, EFE, policy selection and perception
    utils: Simulation cycle, scheduler, argument parsing and plotting helpers
    scripts: Executable entry points for headless runs
"""

__version__ = "1.0.0"
