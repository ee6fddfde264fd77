"""Concurrent best-of-N ninja duel engine."""

__version__ = "0.1.0"
