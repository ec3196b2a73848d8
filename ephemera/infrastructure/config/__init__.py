"""Configuration infrastructure."""

from .yaml_loader import YAMLConfigLoader

__all__ = ["YAMLConfigLoader"]
