def test_cart_lifecycle(client):
    r = client.get("/api/v1/cart")
    assert r.status_code == 200
    assert r.json() == {"items": [], "count": 0, "totals": None}

    r = client.post("/api/v1/cart", json={"id": "b1", "name": "6205", "price": 100, "quantity": 1, "partNumber": "6205-25x52"})
    assert r.status_code == 200
    r = client.post("/api/v1/cart", json={"id": "b1", "name": "6205", "price": 100, "quantity": 1})
    body = r.json()
    assert body["count"] == 2
    assert body["totals"] == {"subtotal": 200.0, "shipping": 15.0, "tax": 26.0, "total": 241.0}

    r = client.patch("/api/v1/cart", json={"id": "b1", "quantity": 0})
    assert r.json()["count"] == 0


def test_cart_rejects_invalid_item(client):
    r = client.post("/api/v1/cart", json={"id": "b1", "price": -5, "quantity": 1})
    assert r.status_code == 422


def test_cart_delete_line_and_clear(client):
    client.post("/api/v1/cart", json={"id": "a", "name": "A", "price": 1, "quantity": 1})
    client.post("/api/v1/cart", json={"id": "b", "name": "B", "price": 2, "quantity": 1})
    r = client.delete("/api/v1/cart/a")
    assert [it["id"] for it in r.json()["items"]] == ["b"]
    r = client.delete("/api/v1/cart")
    assert r.json()["count"] == 0
    assert client.get("/api/v1/cart").json()["count"] == 0


def test_guest_cart_lives_in_session(guest_client, monkeypatch):
    saved = []
    monkeypatch.setattr("storefront.cart.repository.save_cart_items", lambda user_id, items: saved.append(user_id) or True)
    guest_client.post("/api/v1/cart", json={"id": "g", "name": "G", "price": 3, "quantity": 1})
    assert guest_client.get("/api/v1/cart").json()["count"] == 1
    assert saved == []
