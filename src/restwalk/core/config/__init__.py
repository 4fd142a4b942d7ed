"""Configuration loading and validation."""

from .loader import DEFAULT_CONFIG_PATH, ConfigError, load_app_config
from .models import AppConfig, ClientConfig, LoggingConfig

__all__ = [
    # Config models
    "AppConfig",
    "ClientConfig",
    "LoggingConfig",
    # Loaders
    "ConfigError",
    "DEFAULT_CONFIG_PATH",
    "load_app_config",
]
