"""
Configuration management utilities.

This module provides environment variable handling with type conversion,
database URL validation, logging configuration and the access-control
settings that tune grant and revoke behaviour.
"""

import logging
import os
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Union
from urllib.parse import parse_qs, urlparse

from ..exceptions import ConfigurationException


class ConfigError(Exception):
    """Exception raised for configuration-related errors."""

    pass


class LogLevel(Enum):
    """Enumeration for log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class EnvironmentConfig:
    """Utility class for handling environment variables with type conversion."""

    @staticmethod
    def get_str(
        key: str, default: Optional[str] = None, required: bool = False
    ) -> Optional[str]:
        """
        Get a string environment variable.

        Args:
            key: Environment variable key
            default: Default value if not found
            required: Whether the variable is required

        Returns:
            String value or default

        Raises:
            ConfigError: If required variable is missing
        """
        value = os.getenv(key, default)

        if required and value is None:
            raise ConfigError(f"Required environment variable '{key}' is not set")

        return value

    @staticmethod
    def get_int(
        key: str, default: Optional[int] = None, required: bool = False
    ) -> Optional[int]:
        """
        Get an integer environment variable.

        Raises:
            ConfigError: If required variable is missing or invalid
        """
        value = os.getenv(key)

        if value is None:
            if required:
                raise ConfigError(f"Required environment variable '{key}' is not set")
            return default

        try:
            return int(value)
        except ValueError:
            raise ConfigError(
                f"Environment variable '{key}' must be an integer, got: {value}"
            )

    @staticmethod
    def get_bool(
        key: str, default: Optional[bool] = None, required: bool = False
    ) -> Optional[bool]:
        """
        Get a boolean environment variable.

        Accepts true/1/yes/on/enabled and false/0/no/off/disabled
        (case-insensitive).

        Raises:
            ConfigError: If required variable is missing or not a boolean
        """
        value = os.getenv(key)

        if value is None:
            if required:
                raise ConfigError(f"Required environment variable '{key}' is not set")
            return default

        normalized = value.strip().lower()
        if normalized in ("true", "1", "yes", "on", "enabled"):
            return True
        if normalized in ("false", "0", "no", "off", "disabled"):
            return False
        raise ConfigError(
            f"Environment variable '{key}' must be a boolean, got: {value}"
        )


class DatabaseURLValidator:
    """Utility class for validating database URLs."""

    SUPPORTED_DRIVERS = {
        "postgresql": ["postgresql", "postgresql+asyncpg"],
        "sqlite": ["sqlite", "sqlite+aiosqlite"],
    }

    @classmethod
    def validate_url(cls, url: str) -> Dict[str, Any]:
        """
        Validate a database URL and return parsed components.

        Args:
            url: Database URL to validate

        Returns:
            Dictionary with validation results and parsed components

        Raises:
            ConfigError: If URL is invalid
        """
        if not url:
            raise ConfigError("Database URL cannot be empty")

        parsed = urlparse(url)

        if not parsed.scheme:
            raise ConfigError(
                "Database URL must include a scheme (e.g., postgresql+asyncpg://)"
            )

        supported = [d for drivers in cls.SUPPORTED_DRIVERS.values() for d in drivers]
        if parsed.scheme not in supported:
            raise ConfigError(
                f"Unsupported database driver '{parsed.scheme}'. Supported: {', '.join(supported)}"
            )

        is_sqlite = parsed.scheme.startswith("sqlite")
        if not is_sqlite and not parsed.hostname:
            raise ConfigError("Database URL must include a hostname")

        if not is_sqlite and not parsed.path.lstrip("/"):
            raise ConfigError("Database URL must include a database name")

        return {
            "valid": True,
            "scheme": parsed.scheme,
            "hostname": parsed.hostname,
            "port": parsed.port,
            "database": parsed.path.lstrip("/") if parsed.path else "",
            "username": parsed.username,
            "password": parsed.password,
            "query": dict(parse_qs(parsed.query)),
        }


class LoggingConfigurator:
    """Utility class for configuring logging."""

    DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    @staticmethod
    def configure_basic_logging(
        level: Union[str, LogLevel] = LogLevel.INFO,
        format_string: Optional[str] = None,
        log_file: Optional[str] = None,
    ) -> None:
        """
        Configure basic logging for the application.

        Args:
            level: Logging level
            format_string: Custom format string
            log_file: Optional log file path
        """
        if isinstance(level, LogLevel):
            level = level.value

        basic_config_args: Dict[str, Any] = {
            "level": level,
            "format": format_string or LoggingConfigurator.DEFAULT_FORMAT,
            "datefmt": "%Y-%m-%d %H:%M:%S",
        }

        if log_file:
            basic_config_args["filename"] = log_file
            basic_config_args["filemode"] = "a"

        logging.basicConfig(**basic_config_args)


@dataclass
class AccessControlConfig:
    """
    Tunable behaviour of the grant store and sharing workflows.

    Attributes:
        require_complete_profile: Owners must complete their profile before
            registering pets or granting access.
        admin_can_revoke: Allow platform admins to revoke grants they did not
            create. Off by default; only the grantor may revoke.
        double_revoke_is_success: Treat revoking an already revoked grant as a
            successful no-op in the sharing workflow instead of an error.
    """

    require_complete_profile: bool = True
    admin_can_revoke: bool = False
    double_revoke_is_success: bool = False

    ENV_PREFIX = "VET_ACCESS_"

    @classmethod
    def from_environment(cls) -> "AccessControlConfig":
        """
        Create config from ``VET_ACCESS_*`` environment variables.

        Raises:
            ConfigurationException: If a variable is set to a non-boolean value
        """
        defaults = cls()
        values: Dict[str, bool] = {}
        for name in (
            "require_complete_profile",
            "admin_can_revoke",
            "double_revoke_is_success",
        ):
            key = f"{cls.ENV_PREFIX}{name.upper()}"
            try:
                values[name] = EnvironmentConfig.get_bool(key, getattr(defaults, name))
            except ConfigError as e:
                raise ConfigurationException(
                    str(e), config_key=key, config_value=os.getenv(key)
                ) from e
        return cls(**values)


# Global access-control configuration (lazily loaded from the environment)
_access_config: Optional[AccessControlConfig] = None


def get_access_config() -> AccessControlConfig:
    """Get the global access-control configuration."""
    global _access_config
    if _access_config is None:
        _access_config = AccessControlConfig.from_environment()
    return _access_config


def set_access_config(config: Optional[AccessControlConfig]) -> None:
    """Replace the global access-control configuration (``None`` reloads it)."""
    global _access_config
    _access_config = config
