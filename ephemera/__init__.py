"""Ephemera - input guarding for the ephemera catalogue server actions."""

__version__ = "0.1.0"
