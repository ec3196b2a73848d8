"""Command line argument parsing."""

import argparse
from collections.abc import Sequence

from ephemera import __version__


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments.

    Returns:
        Parsed arguments namespace with:
        - config: Path to the YAML config file (optional)
        - host / port: Overrides for the configured bind address
        - verbose: Whether to show debug logs
        - check_config: Whether to only validate and print the configuration
    """
    parser = argparse.ArgumentParser(
        description="Ephemera - hardened catalogue API server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-c",
        "--config",
        default=None,
        help="Path to config file (default: $EPHEMERA_CONFIG_PATH or config.yaml)",
    )
    parser.add_argument(
        "--host",
        default=None,
        help="Bind address, overrides server.host",
    )
    parser.add_argument(
        "-p",
        "--port",
        type=int,
        default=None,
        help="Bind port, overrides server.port",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show debug logs",
    )
    parser.add_argument(
        "--check-config",
        action="store_true",
        help="Validate the configuration, print it and exit",
    )

    return parser.parse_args(argv)
