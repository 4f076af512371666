"""Shared fixtures for unit and feature tests."""

from __future__ import annotations

import pytest

from ghdispatch.dispatch import TOKEN_ENV_VARS, DispatchPollingConfig

_CONFIG_ENV_VARS = (
    "GHDISPATCH_RUN_DISCOVERY_ATTEMPTS",
    "GHDISPATCH_RUN_DISCOVERY_INTERVAL_S",
    "GHDISPATCH_COMPLETION_ATTEMPTS",
    "GHDISPATCH_COMPLETION_INTERVAL_S",
    "GHDISPATCH_GITHUB_API_URL",
    "GHDISPATCH_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep ambient tokens and overrides out of every test."""
    for name in (*TOKEN_ENV_VARS, *_CONFIG_ENV_VARS):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def fast_config() -> DispatchPollingConfig:
    """Return the default attempt budgets with no waiting between attempts."""
    return DispatchPollingConfig(run_discovery_interval_s=0, completion_interval_s=0)
