"""Utility functions for the duel engine."""

from ninjaduel.utils.rng import generate_seed, random_choice

__all__ = [
    "generate_seed",
    "random_choice",
]
