"""Pytest configuration and shared fixtures."""

from pathlib import Path

import pytest

from geoffload.graph import DictEntityStore


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the directory holding sample Geoff documents."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def store() -> DictEntityStore:
    """Return an empty in-memory entity store."""
    return DictEntityStore()
