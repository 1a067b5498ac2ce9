import os

os.environ.setdefault("DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS", "1")

import pytest
from typing import Generator, Dict, Any
from fastapi.testclient import TestClient
from unittest.mock import MagicMock

from storefront.app import app as fastapi_app
from storefront.utils.security import require_user, require_admin, get_optional_user
from storefront.checkout.guards import finalization_guard

FAKE_USER: Dict[str, Any] = {
    "id": "test-user",
    "email": "test@example.com",
    "name": "Test User",
    "role": "user",
    "metadata": {"full_name": "Test User"},
    "token": None,
}

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
    return dict(FAKE_USER)

# Simuler un utilisateur authentifié pour les endpoints protégés
@pytest.fixture(autouse=True)
def _override_require_user(app):
    app.dependency_overrides[require_user] = lambda: dict(FAKE_USER)
    app.dependency_overrides[get_optional_user] = lambda: dict(FAKE_USER)
    try:
        yield
    finally:
        app.dependency_overrides.pop(require_user, None)
        app.dependency_overrides.pop(get_optional_user, None)

@pytest.fixture
def guest_client(app, client):
    """Client sans utilisateur (panier invité, succès sans session)."""
    app.dependency_overrides[get_optional_user] = lambda: None
    yield client
    app.dependency_overrides.pop(get_optional_user, None)

@pytest.fixture
def authenticated_admin_client(app, client):
    def _override_require_admin():
        return {"id": "admin-user-id", "role": "admin", "email": "admin@example.com"}
    app.dependency_overrides[require_admin] = _override_require_admin
    yield client
    app.dependency_overrides.pop(require_admin, None)

@pytest.fixture(autouse=True)
def _reset_finalization_guard():
    yield
    finalization_guard._in_flight.clear()

# Aucun accès réseau vers Supabase / Stripe / relais email pendant les tests
@pytest.fixture(scope="function", autouse=True)
def mock_db_dependency(monkeypatch, request):
    # Les tests unitaires de supabase_client exercent les vraies fabriques (create_client y est patché).
    if request.node.module.__name__.rsplit(".", 1)[-1] != "test_infra_supabase_client":
        monkeypatch.setattr("storefront.infra.supabase_client.get_supabase", lambda: MagicMock())
        monkeypatch.setattr("storefront.infra.supabase_client.get_service_supabase", lambda: MagicMock())
        monkeypatch.setattr("storefront.infra.supabase_client.get_user_supabase", lambda token: MagicMock())

    monkeypatch.setattr("storefront.cart.repository.fetch_cart_items", lambda user_id: [])
    monkeypatch.setattr("storefront.cart.repository.save_cart_items", lambda user_id, items: True)

    monkeypatch.setattr("storefront.health.service.health_supabase_info", lambda: {"connect_ok": True})
    monkeypatch.setattr("storefront.config.STRIPE_SECRET_KEY", "sk_test_dummy")
    monkeypatch.setattr("storefront.config.IDEMPOTENCY_BACKEND", "session")
