"""Pytest configuration and shared fixtures for sheetpack tests."""

from __future__ import annotations

import itertools
from typing import Callable

import pytest

from sheetpack.domain import PackEngine, PackingOptions


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "integration: end-to-end packing runs")


# =============================================================================
# Shared fixtures
# =============================================================================


@pytest.fixture
def make_engine() -> Callable[..., PackEngine]:
    """Factory building a PackEngine from options keyword arguments."""

    def _make(**kwargs) -> PackEngine:
        return PackEngine(PackingOptions(**kwargs))

    return _make


@pytest.fixture
def stepping_clock() -> Callable[[], float]:
    """Clock advancing 100 seconds on every reading."""
    ticks = itertools.count(0.0, 100.0)
    return lambda: next(ticks)
