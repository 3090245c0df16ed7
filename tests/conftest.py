"""Pytest configuration and shared fixtures."""

import pytest

from dispatch_engine.adapters.memory.repositories import InMemoryStore


@pytest.fixture
def store():
    """Empty in-memory backend shared by the repositories under test."""
    return InMemoryStore()
