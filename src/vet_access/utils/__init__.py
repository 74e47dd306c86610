"""
Utility functions and helper modules.

This module provides datetime handling and configuration management
shared by the access-control core and the resource services.
"""

from .config import (
    AccessControlConfig,
    ConfigError,
    DatabaseURLValidator,
    EnvironmentConfig,
    LoggingConfigurator,
    LogLevel,
    get_access_config,
    set_access_config,
)
from .datetime_utils import calculate_pet_age, ensure_utc, get_current_utc

__all__ = [
    # DateTime utilities
    "get_current_utc",
    "ensure_utc",
    "calculate_pet_age",
    # Configuration utilities
    "ConfigError",
    "LogLevel",
    "EnvironmentConfig",
    "DatabaseURLValidator",
    "LoggingConfigurator",
    "AccessControlConfig",
    "get_access_config",
    "set_access_config",
]
