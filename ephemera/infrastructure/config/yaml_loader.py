"""YAML configuration loader."""

import logging
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)


class YAMLConfigLoader:
    """Load raw configuration mappings from a YAML file."""

    def __init__(self, config_path: Path | str = "config.yaml") -> None:
        self._config_path = Path(config_path)

    def load(self) -> dict[str, Any]:
        """Load raw configuration data from YAML.

        Returns:
            Configuration dictionary, empty dict if the file is missing or empty.

        Raises:
            ValueError: If the file is not valid YAML or its top level is not a mapping.
        """
        if not self._config_path.exists():
            logger.debug("Config file not found path=%s, using defaults", self._config_path)
            return {}

        with open(self._config_path, encoding="utf-8") as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid YAML in {self._config_path}: {e}") from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ValueError(f"Config file {self._config_path} must contain a mapping")
        return data

    @property
    def path(self) -> Path:
        """Get configuration file path."""
        return self._config_path
