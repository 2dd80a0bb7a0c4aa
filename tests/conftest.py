"""Shared pytest configuration and fixtures.

This module provides global fixtures and configuration that are available
to all tests in the test suite.

Fixtures defined here are automatically available to all tests without explicit
import statements. Keep fixtures small, composable, and focused on setup/teardown.
Do NOT put business logic in fixtures.
"""

# pylint: disable=redefined-outer-name

from collections.abc import Iterator

import pytest

from clients.discovery import shared_discovery_store
from config import get_settings


@pytest.fixture(autouse=True)
def fresh_settings() -> Iterator[None]:
    """Reload settings and empty the shared discovery store around each test."""
    get_settings.cache_clear()
    shared_discovery_store.cache_clear()
    yield
    get_settings.cache_clear()
    shared_discovery_store.cache_clear()
