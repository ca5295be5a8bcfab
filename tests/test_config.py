"""
Unit tests for configuration and logging setup.
"""

import logging
import logging.config

import pytest

from megavibe.logging_config import SESSION_LOGGER, HealthCheckFilter, get_logging_config
from megavibe.modules.config import DEFAULT_SESSION_TTL, ConfigModule
from session_utils import WEEK


class TestConfigModule:
    def test_defaults(self, config):
        assert config.get("host") == "0.0.0.0"
        assert config.get("port") == 8080
        assert config.get("log_level") == "INFO"
        assert config.get("debug") is False
        assert config.get("api_prefix") == ""
        assert config.get("session_ttl") == DEFAULT_SESSION_TTL == WEEK
        assert config.get("session_cookie_name") == "sessionId"
        assert config.get("session_cookie_secure") is True
        assert config.get("max_sessions") == 10000
        assert config.get("session_cleanup_interval") == 300
        assert config.get("session_log_level") is None

    def test_environment_overrides(self, make_config):
        config = make_config(
            API_PORT="9000",
            LOG_LEVEL="debug",
            DEBUG="true",
            API_PREFIX="/api",
            SESSION_TTL="60",
            SESSION_COOKIE_SECURE="false",
            MAX_SESSIONS="5",
            SESSION_LOG_LEVEL="warning",
        )

        assert config.get("port") == 9000
        assert config.get("log_level") == "DEBUG"
        assert config.get("debug") is True
        assert config.get("api_prefix") == "/api"
        assert config.get("session_ttl") == 60
        assert config.get("session_cookie_secure") is False
        assert config.get("max_sessions") == 5
        assert config.get("session_log_level") == "WARNING"

    @pytest.mark.parametrize(
        "name,value",
        [
            ("SESSION_TTL", "0"),
            ("MAX_SESSIONS", "-1"),
            ("SESSION_CLEANUP_INTERVAL", "0"),
        ],
    )
    def test_non_positive_values_rejected(self, make_config, name, value):
        with pytest.raises(ValueError, match="positive integer"):
            make_config(**{name: value})

    def test_non_numeric_value_rejected(self, make_config):
        with pytest.raises(ValueError, match="Invalid numeric"):
            make_config(SESSION_TTL="a week")

    @pytest.mark.parametrize("prefix", ["api", "/api/"])
    def test_bad_prefix_rejected(self, make_config, prefix):
        with pytest.raises(ValueError, match="api_prefix"):
            make_config(API_PREFIX=prefix)

    def test_set_and_get_all(self, config):
        config.set("max_sessions", 3)

        snapshot = config.get_all()
        assert snapshot["max_sessions"] == 3
        snapshot["max_sessions"] = 99
        assert config.get("max_sessions") == 3

    def test_get_default_for_unknown_key(self, config):
        assert config.get("missing", "fallback") == "fallback"

    def test_schema(self):
        schema = ConfigModule.get_config_schema()

        assert schema["required"]["session_ttl"] == "Session time-to-live in seconds"
        assert "session_cookie_secure" in schema["optional"]


class TestLoggingConfig:
    def _record(self, name, message):
        return logging.LogRecord(name, logging.INFO, __file__, 1, message, None, None)

    def test_health_checks_filtered_from_access_log(self):
        log_filter = HealthCheckFilter()

        assert not log_filter.filter(self._record("uvicorn.access", 'GET /healthz HTTP/1.1" 200'))
        assert log_filter.filter(self._record("uvicorn.access", 'GET /retrieve-session-data" 200'))
        assert log_filter.filter(self._record("megavibe.main", "GET /healthz"))

    def test_level_applies_to_application_loggers(self):
        config = get_logging_config("debug")

        assert config["loggers"]["megavibe"]["level"] == "DEBUG"
        assert config["root"]["level"] == "DEBUG"
        assert config["loggers"]["uvicorn.access"]["level"] == "INFO"
        assert config["loggers"][SESSION_LOGGER]["level"] == "DEBUG"

    def test_session_loggers_have_their_own_level(self):
        config = get_logging_config("info", session_level="warning")

        assert config["loggers"]["megavibe"]["level"] == "INFO"
        assert config["loggers"][SESSION_LOGGER]["level"] == "WARNING"

        logging.config.dictConfig(config)
        try:
            assert not logging.getLogger("megavibe.modules.session.session").isEnabledFor(logging.INFO)
            assert logging.getLogger("megavibe.modules.api.routes").isEnabledFor(logging.INFO)
        finally:
            logging.config.dictConfig(get_logging_config("info"))

    def test_access_records_matched_on_request_path(self):
        log_filter = HealthCheckFilter()

        def access(path):
            return logging.LogRecord(
                "uvicorn.access",
                logging.INFO,
                __file__,
                1,
                '%s - "%s %s HTTP/%s" %d',
                ("127.0.0.1:5000", "GET", path, "1.1", 200),
                None,
            )

        assert not log_filter.filter(access("/healthz"))
        assert not log_filter.filter(access("/healthz?verbose=1"))
        assert log_filter.filter(access("/retrieve-session-data?next=/healthz"))
