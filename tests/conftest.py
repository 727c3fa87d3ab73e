"""Shared fixtures for the test suite."""

import pytest

from tests.fakes import FakeClock


@pytest.fixture
def fake_clock() -> FakeClock:
    """Provide a manually advanced clock."""
    return FakeClock()
