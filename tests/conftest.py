"""Shared pytest fixtures for waitfor tests."""

from __future__ import annotations

import pytest

from waitfor.clock.fake import FakeTimeKeeper
from waitfor.config.config_manager import reset_config, set_config
from waitfor.core.models.config import RaceConfig, WaitConfig

_ENV_VARS = (
    "WAITFOR_CONFIG_FILE",
    "WAITFOR_POLLING_INTERVAL",
    "WAITFOR_JOIN_TIMEOUT",
    "WAITFOR_LOG_LEVEL",
    "WAITFOR_LOG_DIR",
)


@pytest.fixture(autouse=True)
def _fresh_config(monkeypatch):
    """Every test starts from built-in defaults, whatever the environment says."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def fake_clock() -> FakeTimeKeeper:
    """Logical clock starting at instant 0."""
    return FakeTimeKeeper()


@pytest.fixture
def fast_config() -> WaitConfig:
    """Active config with a short branch join timeout."""
    config = WaitConfig(race=RaceConfig(join_timeout=1.0))
    set_config(config)
    return config
