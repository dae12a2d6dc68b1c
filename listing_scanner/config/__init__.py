"""Configuration management for the listing scanner."""

from .environment import EnvironmentConfig, load_environment_config
from .exceptions import ConfigurationError
from .loader import load_config, parse_app_config
from .models import (
    PAGE_SIZE,
    AdvancedConfig,
    AppConfig,
    EmailConfig,
    LogFormat,
    LoggingConfig,
    LogLevel,
    MatchingConfig,
)

__all__ = [
    "load_config",
    "parse_app_config",
    "load_environment_config",
    "AppConfig",
    "EmailConfig",
    "MatchingConfig",
    "LoggingConfig",
    "AdvancedConfig",
    "EnvironmentConfig",
    "LogLevel",
    "LogFormat",
    "PAGE_SIZE",
    "ConfigurationError",
]
