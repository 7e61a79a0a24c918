"""Deterministic retirement projection engine."""

__version__ = "0.1.0"
