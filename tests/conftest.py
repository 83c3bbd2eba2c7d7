"""
Pytest configuration and shared fixtures.

Settings are reloaded for every test so environment overrides made with
monkeypatch are picked up by new stores.
"""

import random

import pytest

from chatstore.config import get_settings
from chatstore.storage import MessageStore


@pytest.fixture(autouse=True)
def fresh_settings():
    """Clear the settings cache before and after each test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def messages_file(tmp_path):
    """Path of a messages file that does not exist yet."""
    return tmp_path / "messages.json"


@pytest.fixture
def store(messages_file):
    """Empty store backed by a file in a temporary directory."""
    return MessageStore(messages_file, rng=random.Random(42))
