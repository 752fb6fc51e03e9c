import os

# Configuration minimale avant l'import de l'application (lue par backend.config)
os.environ.setdefault("STRIPE_SECRET_KEY", "sk_test_dummy")
os.environ.setdefault("STRIPE_WEBHOOK_SECRET", "whsec_test_secret")
os.environ.setdefault("SUPABASE_URL", "https://example.supabase.co")
os.environ.setdefault("SUPABASE_ANON_KEY", "anon-key")
os.environ.setdefault("DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS", "1")

import pytest
from typing import Generator, Dict, Any
from fastapi.testclient import TestClient
from unittest.mock import MagicMock

from backend.app import app as fastapi_app
from backend.utils.security import require_user, optional_user
from tests.fakes import FakeStore, FakeStripe

# Marquage automatique selon le dossier
def pytest_collection_modifyitems(config, items):
    for item in items:
        nodeid = item.nodeid.replace("\\", "/")
        if "tests/unit/" in nodeid:
            item.add_marker(pytest.mark.unit)
        elif "tests/integration/" in nodeid:
            item.add_marker(pytest.mark.integration)

@pytest.fixture(scope="session")
def app():
    return fastapi_app

@pytest.fixture()
def client(app) -> Generator[TestClient, None, None]:
    with TestClient(app) as c:
        yield c

@pytest.fixture
def fake_user() -> Dict[str, Any]:
    return {
        "id": "user-123",
        "email": "test@example.com",
        "name": "Test User",
        "metadata": {"full_name": "Test User"},
        "token": "fake-token",
    }

# Simuler un utilisateur authentifié pour les endpoints protégés
@pytest.fixture(autouse=True)
def _override_auth(app, fake_user):
    app.dependency_overrides[require_user] = lambda: fake_user
    app.dependency_overrides[optional_user] = lambda: fake_user
    try:
        yield
    finally:
        app.dependency_overrides.pop(require_user, None)
        app.dependency_overrides.pop(optional_user, None)

@pytest.fixture
def anonymous(app):
    """Désactive l'utilisateur simulé: les routes voient une requête sans session."""
    app.dependency_overrides.pop(require_user, None)
    app.dependency_overrides[optional_user] = lambda: None
    yield

# Aucun accès réseau à Supabase pendant les tests
@pytest.fixture(autouse=True)
def _mock_supabase_clients(monkeypatch):
    monkeypatch.setattr("backend.infra.supabase_client.get_supabase", lambda: MagicMock())
    monkeypatch.setattr("backend.infra.supabase_client.get_service_supabase", lambda: MagicMock())

@pytest.fixture
def store(monkeypatch) -> FakeStore:
    s = FakeStore()
    s.install(monkeypatch)
    return s

@pytest.fixture
def fake_stripe(monkeypatch) -> FakeStripe:
    f = FakeStripe()
    f.install(monkeypatch)
    return f
