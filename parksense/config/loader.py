"""Configuration loader for ParkSense.

Loads configuration from YAML files and environment variables.
Environment variables override YAML values using the PARKSENSE_ prefix.
Nested keys use double underscores: PARKSENSE_ANALYSIS__MODEL=gpt-4o-mini
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class AnalysisConfig(BaseModel):
    """Provider and request settings."""

    provider: str = Field(default="openai", pattern="^(anthropic|openai)$")
    model: str = Field(default="gpt-4o")
    max_tokens: int = Field(default=500, ge=1, le=100000)
    temperature: float = Field(default=0.1, ge=0.0, le=2.0)
    detail: str = Field(default="high", pattern="^(low|high|auto)$")
    max_retries: int = Field(default=3, ge=1, le=10, description="Maximum attempts per request")
    retry_delay: float = Field(default=1.0, ge=0.0, le=60.0)
    timeout: float = Field(default=60.0, ge=1.0, le=600.0, description="Timeout in seconds")
    base_url: str | None = Field(default=None, description="OpenAI-compatible endpoint override")
    allow_mock: bool = Field(default=True, description="Serve mock results without an API key")


class ImageConfig(BaseModel):
    """Upload image settings."""

    max_width: int = Field(default=1024, ge=64, le=4096)
    quality: float = Field(default=0.8, gt=0.0, le=1.0)


class MockConfig(BaseModel):
    """Mock oracle settings."""

    strategy: str = Field(default="time", pattern="^(time|catalog)$")
    delay_seconds: float = Field(default=1.5, ge=0.0, le=30.0)


class CameraSettings(BaseModel):
    """Camera stream constraints."""

    facing_mode: str = Field(default="environment", pattern="^(environment|user)$")
    ideal_width: int = Field(default=1280, ge=160, le=7680)
    ideal_height: int = Field(default=720, ge=120, le=4320)


class LoggingConfig(BaseModel):
    """Logging settings."""

    level: str = Field(default="INFO", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")
    format: str = Field(default="readable", pattern="^(readable|json)$")


class Config(BaseModel):
    """Root configuration model."""

    analysis: AnalysisConfig = Field(default_factory=AnalysisConfig)
    image: ImageConfig = Field(default_factory=ImageConfig)
    mock: MockConfig = Field(default_factory=MockConfig)
    camera: CameraSettings = Field(default_factory=CameraSettings)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def _get_env_value(key: str) -> str | None:
    """Get environment variable with PARKSENSE_ prefix."""
    env_key = f"PARKSENSE_{key.upper()}"
    return os.environ.get(env_key)


def _apply_env_overrides(data: dict[str, Any], prefix: str = "") -> dict[str, Any]:
    """Apply environment variable overrides to config data.

    Only keys present in ``data`` can be overridden, so the defaults are
    merged in first by the caller.
    """
    result = data.copy()

    for key, value in result.items():
        env_key = f"{prefix}__{key}" if prefix else key

        if isinstance(value, dict):
            result[key] = _apply_env_overrides(value, env_key)
        else:
            env_value = _get_env_value(env_key)
            if env_value is not None:
                if isinstance(value, bool):
                    result[key] = env_value.lower() in ("true", "1", "yes")
                elif isinstance(value, int):
                    result[key] = int(env_value)
                elif isinstance(value, float):
                    result[key] = float(env_value)
                else:
                    result[key] = env_value

    return result


def _deep_merge(base: dict[str, Any], updates: dict[str, Any]) -> dict[str, Any]:
    """Deep merge updates into base dict."""
    result = base.copy()

    for key, value in updates.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def default_config_path() -> Path:
    """Path of the bundled default configuration."""
    return Path(__file__).resolve().parent.parent.parent / "configs" / "default.yaml"


def load_config(config_path: str | Path | None = None) -> Config:
    """Load configuration from YAML file with environment variable overrides.

    Args:
        config_path: Path to YAML config file. If None, uses
            configs/default.yaml when present, otherwise built-in defaults.

    Returns:
        Validated Config object.

    Raises:
        FileNotFoundError: If an explicit config file doesn't exist.
        ValidationError: If config values are invalid.
    """
    if config_path is None:
        path = default_config_path()
        if not path.exists():
            logger.debug(f"No default config at {path}; using built-in defaults")
            return Config.model_validate(_apply_env_overrides(Config().model_dump()))
    else:
        path = Path(config_path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

    with open(path) as f:
        data = yaml.safe_load(f) or {}

    # Merge onto defaults so every key can be overridden from the environment.
    data = _deep_merge(Config().model_dump(), data)
    data = _apply_env_overrides(data)

    return Config.model_validate(data)
