"""Pytest configuration and fixtures."""

import pytest

from fakes import FakeStore
from pharmacy_backend.orm import DataClient


@pytest.fixture
def store():
    """Empty in-memory row-store."""
    return FakeStore()


@pytest.fixture
def db(store):
    return DataClient(store)
