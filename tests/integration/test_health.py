def test_health_root(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"ok": True}


def test_health_dependencies(client):
    body = client.get("/health/dependencies").json()
    assert body["supabase"] == {"connect_ok": True}
    assert body["payments"]["stripe_configured"] is True
    assert body["rate_limit"]["enabled"] is False


def test_security_headers_allow_stripe(client):
    r = client.get("/health")
    csp = r.headers["Content-Security-Policy"]
    assert "https://js.stripe.com" in csp
    assert r.headers["X-Frame-Options"] == "DENY"
