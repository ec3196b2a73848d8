"""Command line interface."""

from .args import parse_args
from .display import display_config, display_startup_screen

__all__ = [
    "parse_args",
    "display_config",
    "display_startup_screen",
]
