"""Pytest configuration and shared fixtures."""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from conductor.config import get_settings
from conductor.core.auth import clear_signing_key_cache

# Re-export all fixtures from fixtures modules
from tests.fixtures.keys import *  # noqa: F401, F403
from tests.fixtures.users import *  # noqa: F401, F403


@pytest.fixture(autouse=True)
def _fresh_settings() -> Iterator[None]:
    """Re-read settings from the environment for every test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def _fresh_signing_keys() -> Iterator[None]:
    """Start and end every test with no cached signing keys."""
    clear_signing_key_cache()
    yield
    clear_signing_key_cache()
