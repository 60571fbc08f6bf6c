"""Mastertrack: learner progress analytics."""

__version__ = "0.1.0"
