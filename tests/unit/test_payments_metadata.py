import json
from decimal import Decimal

from storefront.cart.models import CartItem, ShippingAddress
from storefront.payments.metadata import make_metadata, extract_metadata, METADATA_VALUE_LIMIT


def _address():
    return ShippingAddress(name="Ada", address="1 Main", city="Toronto", state="ON", postal_code="M5V", country="CA")


def test_make_metadata_drops_images_and_keeps_part_numbers():
    items = [CartItem(id="b1", name="6205", price=Decimal("9.5"), quantity=1, part_number="6205", image="https://img/x.png")]
    meta = make_metadata("u1", items)
    cart = json.loads(meta["cartItems"])
    assert cart == [{"id": "b1", "name": "6205", "price": 9.5, "quantity": 1, "partNumber": "6205"}]
    assert "shippingAddress" not in meta


def test_extract_metadata_restores_snapshot():
    items = [CartItem(id="b1", name="6205", price=Decimal("9.5"), quantity=2)]
    meta = make_metadata(None, items, _address())
    user_id, restored, shipping = extract_metadata({"metadata": meta})
    assert user_id is None
    assert restored[0].quantity == 2
    assert shipping.city == "Toronto"


def test_long_cart_is_split_and_rejoined():
    items = [CartItem(id=f"id-{i}", name="Spherical roller bearing " * 3, price=Decimal("1"), quantity=1) for i in range(20)]
    meta = make_metadata("u1", items)
    assert all(len(v) <= METADATA_VALUE_LIMIT for v in meta.values())
    assert "cartItems_1" in meta
    _, restored, _ = extract_metadata({"metadata": meta})
    assert len(restored) == 20


def test_extract_metadata_tolerates_malformed_json():
    user_id, items, shipping = extract_metadata({"metadata": {"userId": "u9", "cartItems": "{not json", "shippingAddress": "["}})
    assert user_id == "u9"
    assert items == []
    assert shipping is None
