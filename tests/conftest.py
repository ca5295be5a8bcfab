"""
Shared pytest fixtures for MegaVibe session tests.

This module provides common fixtures including:
- FakeClock: controllable time source for TTL expiry
- Session store / module instances isolated per test
- FastAPI app and TestClient built by the application factory
"""

import os
import sys
from datetime import UTC, datetime, timedelta
from typing import Optional

import pytest
from fastapi.testclient import TestClient

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from megavibe.modules.config import ConfigModule
from megavibe.modules.session import MemorySessionStore, SessionModule
from session_utils import WEEK

CONFIG_ENV_VARS = (
    "API_HOST",
    "API_PORT",
    "LOG_LEVEL",
    "DEBUG",
    "API_PREFIX",
    "SESSION_TTL",
    "SESSION_COOKIE_NAME",
    "SESSION_COOKIE_SECURE",
    "MAX_SESSIONS",
    "SESSION_CLEANUP_INTERVAL",
    "SESSION_LOG_LEVEL",
)



# =============================================================================
# Time
# =============================================================================


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: Optional[datetime] = None):
        self.now = start or datetime(2025, 3, 1, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        """Move the clock forward by timedelta(**kwargs)."""
        self.now += timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


# =============================================================================
# Session modules
# =============================================================================


@pytest.fixture
def store(clock):
    """Session store with room for plenty of sessions."""
    return MemorySessionStore(maxsize=100, clock=clock)


@pytest.fixture
def session_module(store, clock):
    """SessionModule with a one week TTL on the fake clock."""
    return SessionModule(store, default_ttl=WEEK, clock=clock)


# =============================================================================
# Configuration and application
# =============================================================================


@pytest.fixture
def clean_env(monkeypatch):
    """Remove service settings from the environment so defaults apply."""
    for name in CONFIG_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


@pytest.fixture
def make_config(clean_env):
    """Build a ConfigModule from the given environment overrides."""

    def _make(**env):
        for name, value in env.items():
            clean_env.setenv(name, str(value))
        return ConfigModule()

    return _make


@pytest.fixture
def config(make_config):
    return make_config()


@pytest.fixture
def app(config, clock):
    from megavibe.main import create_app

    return create_app(config, clock=clock)


@pytest.fixture
def client(app):
    return TestClient(app)


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: Tests that take a long time to run"
    )
