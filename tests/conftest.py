"""
Pytest configuration and fixtures for dashboard tests.

Every test runs in development mode: the backend is the in-memory
MockBackend behind httpx.MockTransport and the cache is the in-process
memory store, both rebuilt for each test.
"""

import os

os.environ["ENV_MODE"] = "development"
os.environ["DEBUG"] = "false"

import httpx
import pytest
from fastapi.testclient import TestClient

from dashboard.core.config import get_settings
from dashboard.main import app
from dashboard.services.api import ApiClient, MockBackend, get_mock_backend, reset_backend_api
from dashboard.services.cache import reset_cache_store

MANAGER = {"email": "manager@example.com", "password": "password123"}
ADMIN = {"email": "admin@example.com", "password": "password123"}


@pytest.fixture(autouse=True)
def fresh_services(tmp_path, monkeypatch):
    """Fresh settings, mock backend and cache store for each test."""
    monkeypatch.setenv("DATA_DIRECTORY", str(tmp_path / "data"))
    get_settings.cache_clear()
    reset_backend_api()
    reset_cache_store()
    yield
    reset_backend_api()
    reset_cache_store()
    get_settings.cache_clear()


@pytest.fixture
def mock_backend() -> MockBackend:
    """The MockBackend instance served to the running app."""
    return get_mock_backend()


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def manager_client(client):
    """Client signed in as the organization owner (restaurant 1 selected)."""
    response = client.post("/auth/login", json=MANAGER)
    assert response.status_code == 200, response.text
    return client


@pytest.fixture
def admin_client(client):
    """Client signed in as the platform admin."""
    response = client.post("/auth/login", json=ADMIN)
    assert response.status_code == 200, response.text
    return client


@pytest.fixture
def standalone_backend() -> MockBackend:
    """A MockBackend not wired into the app, for direct client tests."""
    return MockBackend()


@pytest.fixture
def api_client(standalone_backend):
    http = httpx.AsyncClient(
        base_url="http://backend.test",
        transport=httpx.MockTransport(standalone_backend.handle),
    )
    return ApiClient(http)
