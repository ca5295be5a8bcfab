"""
Logging configuration shared by the application and uvicorn

Application records go through the "megavibe" logger. The session
module logs every create, end and eviction, so it can be given its own
level (SESSION_LOG_LEVEL) to quieten or expand that trail separately.
"""

import logging
import logging.config
from typing import Any, Dict, Iterable, Optional

APP_LOGGER = "megavibe"
SESSION_LOGGER = "megavibe.modules.session"

HEALTH_CHECK_PATHS = ("/healthz",)


class HealthCheckFilter(logging.Filter):
    """Drop uvicorn access lines for health checks."""

    def __init__(self, paths: Iterable[str] = HEALTH_CHECK_PATHS):
        super().__init__()
        self.paths = tuple(paths)

    def _is_health_check(self, record: logging.LogRecord) -> bool:
        # uvicorn passes (client, method, path, http_version, status)
        if isinstance(record.args, tuple) and len(record.args) == 5:
            method, path = record.args[1], record.args[2]
            return method == "GET" and str(path).split("?", 1)[0] in self.paths
        message = record.getMessage()
        return "GET" in message and any(path in message for path in self.paths)

    def filter(self, record: logging.LogRecord) -> bool:
        return record.name != "uvicorn.access" or not self._is_health_check(record)


def _stream_handler(formatter: str, filters: Optional[list] = None) -> Dict[str, Any]:
    handler = {
        "class": "logging.StreamHandler",
        "formatter": formatter,
        "stream": "ext://sys.stdout",
    }
    if filters:
        handler["filters"] = filters
    return handler


def _logger(handler: str, level: str) -> Dict[str, Any]:
    return {"handlers": [handler], "level": level, "propagate": False}


def get_logging_config(level: str = "INFO", session_level: Optional[str] = None) -> Dict[str, Any]:
    """
    Build the dictConfig used by the app and passed to uvicorn.

    Args:
        level: Level for application loggers and the root logger
        session_level: Level for the session module (defaults to level)

    Returns:
        Dictionary for logging.config.dictConfig
    """
    level = level.upper()
    session_level = (session_level or level).upper()
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {"health_check_filter": {"()": HealthCheckFilter}},
        "formatters": {
            "default": {"format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"},
            "access": {"format": "%(message)s"},
        },
        "handlers": {
            "default": _stream_handler("default"),
            "access": _stream_handler("access", filters=["health_check_filter"]),
        },
        "loggers": {
            "uvicorn": _logger("default", "INFO"),
            "uvicorn.error": _logger("default", "INFO"),
            "uvicorn.access": _logger("access", "INFO"),
            APP_LOGGER: _logger("default", level),
            # Propagates to the app logger's handler; only the threshold differs
            SESSION_LOGGER: {"level": session_level},
        },
        "root": {"level": level, "handlers": ["default"]},
    }


def configure_logging(level: str = "INFO", session_level: Optional[str] = None) -> None:
    """Apply the logging configuration to the running process."""
    logging.config.dictConfig(get_logging_config(level, session_level))
