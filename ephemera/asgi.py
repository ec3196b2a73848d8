"""ASGI application factory for uvicorn.

Usage:
    uvicorn ephemera.asgi:create_app_from_env --factory
"""

from ephemera.composition import create_container
from ephemera.config import config_path_from_env


def create_app_from_env():
    """Create FastAPI app from environment variables.

    This is called by uvicorn when using the --factory flag.
    Environment variables:
        EPHEMERA_CONFIG_PATH: Path to config file (default: config.yaml)
        EPHEMERA_LOG_LEVEL: Log level (default: INFO)
    """
    from ephemera.app import create_app

    container = create_container(config_path=config_path_from_env())
    return create_app(container)
