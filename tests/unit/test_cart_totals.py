from decimal import Decimal, ROUND_HALF_UP

import pytest

from storefront.cart.models import CartItem
from storefront.cart.totals import compute_totals, to_minor_units, EMPTY_CART_MESSAGE
from storefront.errors import EmptyCartError


def _item(price, quantity=1, item_id="b1"):
    return CartItem(id=item_id, name="Bearing", price=Decimal(str(price)), quantity=quantity)


def test_compute_totals_reference_cart():
    totals = compute_totals([_item("100.00", 2)])
    assert totals.subtotal == 20000
    assert totals.shipping == 1500
    assert totals.tax == 2600
    assert totals.total == 24100
    assert totals.as_decimal()["total"] == Decimal("241")


@pytest.mark.parametrize("prices", [
    [("19.99", 3)],
    [("0.01", 1), ("12.345", 2)],
    [("7.77", 7), ("1.05", 1), ("250", 4)],
])
def test_total_is_subtotal_plus_shipping_plus_rounded_tax(prices):
    items = [_item(p, q, item_id=f"b{i}") for i, (p, q) in enumerate(prices)]
    totals = compute_totals(items)
    expected_tax = int((Decimal(totals.subtotal) * Decimal("0.13")).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    assert totals.tax == expected_tax
    assert totals.total == totals.subtotal + 1500 + expected_tax


def test_subtotal_uses_decimal_not_float():
    # 0.1 * 3 en float vaut 0.30000000000000004
    assert compute_totals([_item("0.10", 3)]).subtotal == 30


def test_to_minor_units_rounds_half_up():
    assert to_minor_units(Decimal("1.005")) == 101
    assert to_minor_units(Decimal("2.004")) == 200


def test_empty_cart_raises():
    with pytest.raises(EmptyCartError) as exc:
        compute_totals([])
    assert exc.value.message == EMPTY_CART_MESSAGE


def test_overrides_for_shipping_and_tax():
    totals = compute_totals([_item("10.00")], shipping_cents=0, tax_rate=Decimal("0"))
    assert totals.as_dict() == {"subtotal": 10.0, "shipping": 0.0, "tax": 0.0, "total": 10.0}


def test_compute_totals_reads_rates_from_config_at_call_time(monkeypatch):
    monkeypatch.setattr("storefront.config.TAX_RATE", Decimal("0.05"))
    monkeypatch.setattr("storefront.config.SHIPPING_FLAT_CENTS", 0)
    totals = compute_totals([_item("100.00", 2)])
    assert totals.shipping == 0
    assert totals.tax == 1000
    assert totals.total == 21000
