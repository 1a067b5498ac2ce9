import time
from fastapi import FastAPI, Depends, Request
from fastapi.testclient import TestClient
from storefront.utils.rate_limit import optional_rate_limit, rate_limit_health_info


def _make_app(times=2, seconds=60):
    app = FastAPI()

    @app.post("/api/v1/payments/intent", dependencies=[Depends(optional_rate_limit(times, seconds))])
    def intent():
        return {"ok": True}

    @app.get("/other", dependencies=[Depends(optional_rate_limit(times, seconds))])
    def other():
        return {"ok": True}

    @app.get("/rl_info")
    def rl_info(request: Request):
        return rate_limit_health_info(request)

    return app


def test_local_fallback_blocks_after_limit(monkeypatch):
    client = TestClient(_make_app(times=2, seconds=60))
    monkeypatch.setenv("LOCAL_RATE_LIMIT_FALLBACK", "1")

    assert client.post("/api/v1/payments/intent").status_code == 200
    assert client.post("/api/v1/payments/intent").status_code == 200
    r3 = client.post("/api/v1/payments/intent")
    assert r3.status_code == 429
    assert r3.json()["detail"] == "Too Many Requests"


def test_limit_is_per_path_and_user(monkeypatch):
    client = TestClient(_make_app(times=1, seconds=60))
    monkeypatch.setenv("LOCAL_RATE_LIMIT_FALLBACK", "1")

    h1 = {"Authorization": "Bearer user-one"}
    h2 = {"Authorization": "Bearer user-two"}
    assert client.post("/api/v1/payments/intent", headers=h1).status_code == 200
    assert client.post("/api/v1/payments/intent", headers=h1).status_code == 429
    assert client.post("/api/v1/payments/intent", headers=h2).status_code == 200
    assert client.get("/other", headers=h1).status_code == 200


def test_window_resets(monkeypatch):
    client = TestClient(_make_app(times=1, seconds=1))
    monkeypatch.setenv("LOCAL_RATE_LIMIT_FALLBACK", "1")

    assert client.get("/other").status_code == 200
    assert client.get("/other").status_code == 429
    time.sleep(1.1)
    assert client.get("/other").status_code == 200


def test_disabled_flag_bypasses_limit(monkeypatch):
    monkeypatch.delenv("LOCAL_RATE_LIMIT_FALLBACK", raising=False)
    app = _make_app(times=1, seconds=60)
    app.state.rate_limit_enabled = False
    client = TestClient(app)

    for _ in range(3):
        assert client.get("/other").status_code == 200


def test_health_info_reports_state():
    app = _make_app()
    app.state.rate_limit_enabled = False
    info = TestClient(app).get("/rl_info").json()
    assert info["enabled"] is False
    assert set(info) == {"enabled", "ready", "backend"}
