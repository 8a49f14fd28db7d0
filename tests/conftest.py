"""
Shared fixtures: an in-memory paste store and a test-mode application.
"""
import pytest
from fastapi.testclient import TestClient

from pastebin.config import Settings
from pastebin.database import InMemoryStore, PasteStore
from pastebin.main import create_app


@pytest.fixture
def memory_store():
    """A PasteStore backed by the in-memory Redis stand-in."""
    return PasteStore(InMemoryStore(), using_fallback=True)


@pytest.fixture
def test_settings():
    """Settings with the deterministic clock header enabled."""
    return Settings(TEST_MODE=True, DEBUG=False)


@pytest.fixture
def app(test_settings, memory_store):
    return create_app(settings=test_settings, store=memory_store)


@pytest.fixture
def client(app):
    return TestClient(app)
