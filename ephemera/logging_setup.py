"""Logging configuration."""

import logging
import os
import sys

LOG_LEVEL_ENV = "EPHEMERA_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def setup_logging(level: str | int = logging.INFO) -> None:
    """Attach a stream handler to the `ephemera` logger.

    Safe to call more than once; the handler is only added the first time.
    """
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        level = resolved if isinstance(resolved, int) else logging.INFO

    root = logging.getLogger("ephemera")
    root.setLevel(level)

    if not any(getattr(h, "_ephemera", False) for h in root.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._ephemera = True
        root.addHandler(handler)


def setup_logging_from_env() -> None:
    """Configure logging from EPHEMERA_LOG_LEVEL (default INFO)."""
    setup_logging(os.environ.get(LOG_LEVEL_ENV, "INFO"))
