"""Configuration management for ParkSense."""

from parksense.config.loader import Config, load_config
from parksense.config.secrets import load_environment_secrets, read_provider_api_key
from parksense.config.settings import ParkSenseSettings

__all__ = [
    "Config",
    "ParkSenseSettings",
    "load_config",
    "load_environment_secrets",
    "read_provider_api_key",
]
