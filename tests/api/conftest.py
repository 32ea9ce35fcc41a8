"""Shared fixtures for API tests."""

import pytest
from fastapi.testclient import TestClient

from catalog_service.api.deps import reset_memory_store
from catalog_service.main import app


@pytest.fixture(autouse=True)
def reset_store():
    """Reset the in-memory store before each test."""
    reset_memory_store()
    yield
    reset_memory_store()


@pytest.fixture
def client() -> TestClient:
    """Create test client."""
    return TestClient(app)
