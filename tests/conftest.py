# tests/conftest.py
"""Shared fixtures: the small English lexicon in tests/data and an in-memory job store."""

from pathlib import Path

import fakeredis
import pytest

from wordwise.core.formatters import get_formatter
from wordwise.core.jobs import JobStore
from wordwise.core.lexicon import load_lexicon


DATA_DIR = Path(__file__).parent / "data"


@pytest.fixture
def data_dir() -> Path:
    return DATA_DIR


@pytest.fixture(scope="session")
def lexicon():
    return load_lexicon("en", DATA_DIR)


@pytest.fixture
def ruby():
    return get_formatter("ruby")


@pytest.fixture
def store() -> JobStore:
    return JobStore(fakeredis.FakeRedis(), prefix="test")
