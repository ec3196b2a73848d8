"""Configuration loading and validation using Pydantic."""

import os
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from ephemera.infrastructure.config import YAMLConfigLoader

CONFIG_PATH_ENV = "EPHEMERA_CONFIG_PATH"
DEFAULT_CONFIG_PATH = "config.yaml"

DEFAULT_CONTENT_TYPES = ["image/jpeg", "image/png", "image/gif", "image/webp"]


class ServerConfig(BaseModel):
    """Server configuration."""

    host: str = "127.0.0.1"
    port: int = Field(default=8000, ge=1, le=65535)
    # Enables CSP and HSTS response headers
    production: bool = False


class RateLimitSettings(BaseModel):
    """Rate limiter toggle and sweep cadence. Presets are fixed."""

    enabled: bool = True
    sweep_interval_seconds: int = Field(default=300, gt=0)


class AuditConfig(BaseModel):
    """Audit log output."""

    format: Literal["json", "text"] = "text"
    logger_name: str = "ephemera.audit"


class UploadConfig(BaseModel):
    """Page image upload limits."""

    max_file_size: int = Field(default=10 * 1024 * 1024, gt=0)
    allowed_content_types: list[str] = Field(default_factory=lambda: list(DEFAULT_CONTENT_TYPES))

    @field_validator("allowed_content_types")
    @classmethod
    def validate_image_types(cls, v: list[str]) -> list[str]:
        """Only image MIME types may be allowed."""
        if not v:
            raise ValueError("At least one content type must be allowed")
        for content_type in v:
            if not content_type.startswith("image/"):
                raise ValueError(f"Not an image content type: {content_type}")
        return v


class Config(BaseModel):
    """Application configuration."""

    server: ServerConfig = Field(default_factory=ServerConfig)
    rate_limit: RateLimitSettings = Field(default_factory=RateLimitSettings)
    audit: AuditConfig = Field(default_factory=AuditConfig)
    uploads: UploadConfig = Field(default_factory=UploadConfig)


def load_config(config_path: Path | str = DEFAULT_CONFIG_PATH) -> Config:
    """Load configuration from YAML file, defaults for anything missing."""
    data = YAMLConfigLoader(config_path).load()
    return Config.model_validate(data)


def config_path_from_env() -> str:
    return os.environ.get(CONFIG_PATH_ENV, DEFAULT_CONFIG_PATH)
