import types
import sys
from fastapi import FastAPI, Depends
from fastapi.testclient import TestClient

from storefront.auth.service import determine_role
from storefront.utils.security import (
    get_current_user,
    get_optional_user,
    require_admin,
    COOKIE_NAME,
)


def _make_app():
    app = FastAPI()

    @app.get("/me")
    def me(user=Depends(get_current_user)):
        return user

    @app.get("/maybe")
    def maybe(user=Depends(get_optional_user)):
        return {"user": user}

    @app.get("/admin")
    def admin(user=Depends(require_admin)):
        return {"ok": True}

    return app


def _fake_auth(monkeypatch, user):
    fake_mod = types.SimpleNamespace(get_user_from_token=lambda token: user)
    monkeypatch.setitem(sys.modules, "storefront.auth.service", fake_mod)


def test_determine_role(monkeypatch):
    monkeypatch.setattr("storefront.auth.service.ADMIN_EMAILS", ["Boss@Example.com"])
    assert determine_role(None, {"role": "admin"}) == "admin"
    assert determine_role("boss@example.com", {}) == "admin"
    assert determine_role("someone@example.com", None) == "user"


def test_get_current_user_bearer_success(monkeypatch):
    _fake_auth(monkeypatch, {"id": "u1", "email": "a@b", "role": "user"})
    r = TestClient(_make_app()).get("/me", headers={"Authorization": "Bearer tok-123"})
    assert r.status_code == 200
    assert r.json() == {"id": "u1", "email": "a@b", "role": "user"}


def test_get_current_user_cookie_success(monkeypatch):
    _fake_auth(monkeypatch, {"id": "u1", "email": "a@b", "role": "admin"})
    client = TestClient(_make_app())
    client.cookies.set(COOKIE_NAME, "cookie-token")
    r = client.get("/me")
    assert r.status_code == 200
    assert r.json()["role"] == "admin"


def test_get_current_user_missing_token_401():
    r = TestClient(_make_app()).get("/me")
    assert r.status_code == 401
    assert "Not authenticated" in r.text


def test_get_current_user_missing_id_401(monkeypatch):
    _fake_auth(monkeypatch, {"email": "x@y"})
    r = TestClient(_make_app()).get("/me", headers={"Authorization": "Bearer tok"})
    assert r.status_code == 401
    assert "Session expired" in r.text


def test_optional_user_is_none_without_or_with_bad_token(monkeypatch):
    client = TestClient(_make_app())
    assert client.get("/maybe").json() == {"user": None}
    _fake_auth(monkeypatch, {"email": "x@y"})
    assert client.get("/maybe", headers={"Authorization": "Bearer tok"}).json() == {"user": None}


def test_require_admin_forbidden_and_allowed(monkeypatch):
    client = TestClient(_make_app())
    _fake_auth(monkeypatch, {"id": "u1", "role": "user"})
    assert client.get("/admin", headers={"Authorization": "Bearer tok"}).status_code == 403

    _fake_auth(monkeypatch, {"id": "u1", "role": "admin"})
    r_ok = client.get("/admin", headers={"Authorization": "Bearer tok"})
    assert r_ok.status_code == 200
    assert r_ok.json() == {"ok": True}
