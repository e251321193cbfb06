"""
Test suite for the Active Inference grid world.
"""
