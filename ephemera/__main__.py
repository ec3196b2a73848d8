"""Entry point: python -m ephemera."""

import logging
import os
import sys

from pydantic import ValidationError

from ephemera.cli import display_config, display_startup_screen, parse_args
from ephemera.config import CONFIG_PATH_ENV, config_path_from_env, load_config
from ephemera.logging_setup import LOG_LEVEL_ENV, setup_logging_from_env

logger = logging.getLogger("ephemera")


def main() -> int:
    """Parse arguments, validate config and run the server under uvicorn."""
    args = parse_args()

    if args.verbose:
        os.environ[LOG_LEVEL_ENV] = "DEBUG"
    if args.config:
        # The ASGI factory reads the path from the environment
        os.environ[CONFIG_PATH_ENV] = args.config
    setup_logging_from_env()

    try:
        config = load_config(config_path_from_env())
    except (ValueError, ValidationError) as e:
        logger.error("Invalid configuration: %s", e)
        return 1

    if args.check_config:
        display_config(config)
        return 0

    host = args.host or config.server.host
    port = args.port or config.server.port
    display_startup_screen(f"http://{host}:{port}", config)

    import uvicorn

    uvicorn.run(
        "ephemera.asgi:create_app_from_env",
        factory=True,
        host=host,
        port=port,
        log_level="debug" if args.verbose else "info",
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
