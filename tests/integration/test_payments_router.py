from unittest.mock import MagicMock

ITEM = {"id": "b1", "name": "6205", "price": 100, "quantity": 2, "partNumber": "6205-25x52"}
SHIPPING = {"name": "Ada", "address": "1 Main", "city": "Toronto", "state": "ON", "postalCode": "M5V", "country": "CA"}


def test_create_intent_with_explicit_items(client, monkeypatch):
    fake_create = MagicMock(return_value={"id": "pi_1", "client_secret": "pi_1_secret"})
    monkeypatch.setattr("storefront.payments.stripe_client.stripe.PaymentIntent.create", fake_create)

    r = client.post("/api/v1/payments/intent", json={"items": [ITEM], "shippingAddress": SHIPPING})

    assert r.status_code == 200
    body = r.json()
    assert body["clientSecret"] == "pi_1_secret"
    assert body["amount"] == 24100
    assert fake_create.call_args.kwargs["receipt_email"] == "test@example.com"


def test_create_intent_defaults_to_session_cart(client, monkeypatch):
    fake_create = MagicMock(return_value={"id": "pi_2", "client_secret": "s2"})
    monkeypatch.setattr("storefront.payments.stripe_client.stripe.PaymentIntent.create", fake_create)

    client.post("/api/v1/cart", json=ITEM)
    r = client.post("/api/v1/payments/intent", json={})

    assert r.status_code == 200
    assert fake_create.call_args.kwargs["amount"] == 24100


def test_create_intent_empty_cart(client, monkeypatch):
    fake_create = MagicMock()
    monkeypatch.setattr("storefront.payments.stripe_client.stripe.PaymentIntent.create", fake_create)

    r = client.post("/api/v1/payments/intent", json={"items": []})

    assert r.status_code == 400
    assert r.json() == {"error": "Your cart is empty"}
    fake_create.assert_not_called()


def test_create_intent_without_stripe_key(client, monkeypatch):
    monkeypatch.setattr("storefront.config.STRIPE_SECRET_KEY", "")
    r = client.post("/api/v1/payments/intent", json={"items": [ITEM]})
    assert r.status_code == 500
    assert "Stripe is not properly configured" in r.json()["error"]


def test_payments_config_exposes_only_public_key(client, monkeypatch):
    monkeypatch.setattr("storefront.config.STRIPE_PUBLIC_KEY", "pk_test_123")
    body = client.get("/api/v1/payments/config").json()
    assert body == {"publishableKey": "pk_test_123", "currency": "cad", "configured": True}
