"""
Pytest configuration file for backend testing.
"""
import sys
from pathlib import Path

# Add the backend directory to Python path so imports work correctly
backend_dir = Path(__file__).parent
if str(backend_dir) not in sys.path:
    sys.path.insert(0, str(backend_dir))

# Add the parent directory to handle 'backend.' imports
parent_dir = backend_dir.parent
if str(parent_dir) not in sys.path:
    sys.path.insert(0, str(parent_dir))

import pytest
from fastapi.testclient import TestClient

from app.app_factory import create_app
from app.startup import Backends
from core.auth import AuthenticatedAdmin, get_current_admin
from core.config import Settings
from core.memory_store import (
    InMemoryAuthProvider,
    InMemoryDocumentStore,
    InMemoryRealtimeStore,
)


@pytest.fixture
def test_settings():
    """Settings for an isolated in-memory backend."""
    return Settings(
        _env_file=None,
        environment="testing",
        store_backend="memory",
        debug=False,
    )


@pytest.fixture
def document_store():
    return InMemoryDocumentStore()


@pytest.fixture
def realtime_store():
    return InMemoryRealtimeStore()


@pytest.fixture
def auth_provider():
    return InMemoryAuthProvider()


@pytest.fixture
def app(test_settings, document_store, realtime_store, auth_provider):
    return create_app(
        test_settings,
        Backends(
            document_store=document_store,
            realtime_store=realtime_store,
            auth_provider=auth_provider,
        ),
    )


@pytest.fixture
def registered_admin(document_store, auth_provider):
    """An auth account with an admin profile; returns (uid, token)."""
    uid = "admin-uid-1"
    auth_provider.accounts[uid] = {
        "email": "owner@example.com",
        "password": "secret123",
        "display_name": "Owner",
    }
    document_store._collection("admins")[uid] = {
        "uid": uid,
        "email": "owner@example.com",
        "name": "Owner",
        "restaurantName": "Spice Route",
        "restaurantPhone": "+1 555 0100",
        "role": "admin",
    }
    return uid, auth_provider.issue_token(uid)


@pytest.fixture
def auth_headers(registered_admin):
    _, token = registered_admin
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def client(app):
    """Test client; requests still go through the admin token check."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def admin_client(app, registered_admin):
    """Test client with the admin dependency overridden."""
    uid, _ = registered_admin

    def override_get_current_admin():
        return AuthenticatedAdmin(uid=uid, email="owner@example.com")

    app.dependency_overrides[get_current_admin] = override_get_current_admin
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
