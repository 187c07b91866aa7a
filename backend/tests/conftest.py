"""Test configuration and fixtures for the backend test suite."""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from basement_backend.game_logic.configuration import (
    get_default_simulation_configuration,
)
from basement_backend.settings import get_settings


@pytest.fixture(autouse=True)
def _mock_settings(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Ensure settings are loaded with predictable values during tests."""
    monkeypatch.setenv("BASEMENT_LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("BASEMENT_SIM_RNG_SEED", "1234")
    get_settings.cache_clear()
    get_default_simulation_configuration.cache_clear()
    yield
    get_settings.cache_clear()
    get_default_simulation_configuration.cache_clear()
