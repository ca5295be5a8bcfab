"""
Config Module - Black Box Interface

Purpose: Application configuration management
Interface: get_config(), ConfigModule.get(), ConfigModule.set()
Hidden: Config sources, validation logic, environment parsing
"""

import os
from typing import Any, Dict, Optional


# Keys the rest of the service may rely on being present

REQUIRED_CONFIG_KEYS = {
    "host": "API server bind address",
    "port": "API server port",
    "log_level": "Logging level (DEBUG, INFO, WARNING, ERROR)",
    "session_ttl": "Session time-to-live in seconds",
    "session_cookie_name": "Name of the cookie carrying the session id",
    "max_sessions": "Maximum number of live sessions held in memory",
    "session_cleanup_interval": "Seconds between sweeps that drop expired sessions",
}

OPTIONAL_CONFIG_KEYS = {
    "debug": {
        "description": "Enable debug mode (uvicorn reload)",
        "default": False,
    },
    "api_prefix": {
        "description": "Path prefix for the session routes (e.g. /api)",
        "default": "",
    },
    "session_log_level": {
        "description": "Logging level for the session module (defaults to log_level)",
        "default": None,
    },
    "session_cookie_secure": {
        "description": "Send the session cookie with the Secure attribute",
        "default": True,
    },
}

# 7 days, same as the cookie maxAge used by the web client
DEFAULT_SESSION_TTL = 7 * 24 * 60 * 60

POSITIVE_INT_KEYS = ("port", "session_ttl", "max_sessions", "session_cleanup_interval")


def _env_upper(name: str) -> Optional[str]:
    value = os.getenv(name)
    return value.upper() if value else None


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


class ConfigModule:
    """Configuration management module."""

    def __init__(self):
        """Initialize with environment variables."""
        self._config = self._load_from_env()
        self._validate_required_keys()
        self._validate_values()

    def _validate_required_keys(self) -> None:
        """
        Validate that all required configuration keys are present.

        Raises:
            ValueError: If required keys are missing
        """
        missing_keys = []
        for key in REQUIRED_CONFIG_KEYS:
            if key not in self._config or self._config[key] is None:
                missing_keys.append(key)

        if missing_keys:
            raise ValueError(
                f"Missing required configuration keys: {', '.join(missing_keys)}. "
                f"Check environment variables and deployment configuration."
            )

    def _validate_values(self) -> None:
        for key in POSITIVE_INT_KEYS:
            if self._config[key] <= 0:
                raise ValueError(f"Configuration key '{key}' must be a positive integer")

        prefix = self._config["api_prefix"]
        if prefix and (not prefix.startswith("/") or prefix.endswith("/")):
            raise ValueError(
                f"Configuration key 'api_prefix' must start with '/' and not end with it: {prefix!r}"
            )

    def _load_from_env(self) -> Dict[str, Any]:
        """Load configuration from environment."""
        try:
            return {
                # API settings
                "host": os.getenv("API_HOST", "0.0.0.0"),
                "port": int(os.getenv("API_PORT", "8080")),
                "log_level": os.getenv("LOG_LEVEL", "INFO").upper(),
                "debug": _env_bool("DEBUG", "false"),
                "session_log_level": _env_upper("SESSION_LOG_LEVEL"),
                "api_prefix": os.getenv("API_PREFIX", ""),
                # Session settings
                "session_ttl": int(os.getenv("SESSION_TTL", str(DEFAULT_SESSION_TTL))),
                "session_cookie_name": os.getenv("SESSION_COOKIE_NAME", "sessionId"),
                "session_cookie_secure": _env_bool("SESSION_COOKIE_SECURE", "true"),
                "max_sessions": int(os.getenv("MAX_SESSIONS", "10000")),
                "session_cleanup_interval": int(os.getenv("SESSION_CLEANUP_INTERVAL", "300")),
            }
        except ValueError as e:
            raise ValueError(f"Invalid numeric configuration value: {e}") from e

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value."""
        return self._config.get(key, default)

    def set(self, key: str, value: Any) -> None:
        """Set configuration value."""
        self._config[key] = value

    def get_all(self) -> Dict[str, Any]:
        """Get all configuration values."""
        return self._config.copy()

    @staticmethod
    def get_config_schema() -> Dict[str, Any]:
        """
        Get the configuration schema (contract) for this module.

        Returns:
            Dictionary with 'required' and 'optional' key specifications

        Example:
            >>> schema = ConfigModule.get_config_schema()
            >>> schema['required']['session_ttl']
            'Session time-to-live in seconds'
        """
        return {
            "required": REQUIRED_CONFIG_KEYS.copy(),
            "optional": OPTIONAL_CONFIG_KEYS.copy(),
        }


# Singleton instance
_instance = None


def get_config() -> ConfigModule:
    """Get the configuration module singleton."""
    global _instance
    if _instance is None:
        _instance = ConfigModule()
    return _instance


__all__ = ["get_config", "ConfigModule", "DEFAULT_SESSION_TTL"]
