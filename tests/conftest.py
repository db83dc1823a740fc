"""
Shared pytest fixtures and configuration for value-spine tests.

This module provides:
- Strategy slot and settings cache cleanup for test isolation
- structlog reset after tests that configure logging

Usage:
    Fixtures are auto-discovered by pytest. Use them as function arguments
    (pytest injects them automatically).
"""

from typing import Generator

import pytest
import structlog

# Import every value type so its strategy slot is registered before reset_all()
import valuespine.date  # noqa: F401
import valuespine.identifier  # noqa: F401
import valuespine.roman  # noqa: F401
import valuespine.semver  # noqa: F401
import valuespine.size  # noqa: F401
from valuespine.core.logging import clear_context
from valuespine.core.settings import clear_settings_cache
from valuespine.core.strategy import reset_all


@pytest.fixture(autouse=True)
def clean_strategies_fixture() -> Generator[None, None, None]:
    """
    Reset every strategy slot and the settings cache before and after each test.

    No test can leak an installed strategy or an environment-driven limit
    into another.
    """
    clear_settings_cache()
    reset_all()
    yield
    reset_all()
    clear_settings_cache()


@pytest.fixture
def clean_logging_fixture() -> Generator[None, None, None]:
    """Restore structlog defaults after a test that calls configure_logging."""
    yield
    clear_context()
    structlog.reset_defaults()
