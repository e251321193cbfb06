"""
Executable scripts for the Active Inference grid world.

This module contains the entry points for running simulations from the
command line.
"""

# Scripts are intended to be run directly, not imported
