"""
Calcul des totaux du panier (pur: pas de Stripe, pas de DB).
Tous les montants sont en unités mineures (centimes) pour la passerelle.
"""
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Iterable, Optional

from storefront import config
from storefront.errors import EmptyCartError

from .models import CartItem

# module storefront.cart.totals
EMPTY_CART_MESSAGE = "Your cart is empty"


def to_minor_units(amount: Decimal) -> int:
    """Convertit un montant décimal en centimes, arrondi au plus proche (0.5 -> supérieur)."""
    return int((Decimal(amount) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _round_cents(value: Decimal) -> int:
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


@dataclass(frozen=True)
class Totals:
    subtotal: int
    shipping: int
    tax: int
    total: int

    def as_decimal(self) -> Dict[str, Decimal]:
        """Montants en devise (ex: 241.00) pour l'affichage, l'email et la commande."""
        return {
            "subtotal": Decimal(self.subtotal) / 100,
            "shipping": Decimal(self.shipping) / 100,
            "tax": Decimal(self.tax) / 100,
            "total": Decimal(self.total) / 100,
        }

    def as_dict(self) -> Dict[str, Any]:
        return {k: float(v) for k, v in self.as_decimal().items()}


def compute_totals(
    items: Iterable[CartItem],
    *,
    shipping_cents: Optional[int] = None,
    tax_rate: Optional[Decimal] = None,
) -> Totals:
    """
    Calcule sous-total, livraison, taxe et total du panier.
    - subtotal = round(Σ prix × quantité × 100), calculé en Decimal
    - shipping = forfait (SHIPPING_FLAT_CENTS, 1500 par défaut)
    - tax = round(subtotal × TAX_RATE)
    - Soulève EmptyCartError si le panier est vide.
    """
    items = list(items or [])
    if not items:
        raise EmptyCartError(EMPTY_CART_MESSAGE)

    raw_subtotal = sum((Decimal(it.price) * it.quantity for it in items), Decimal("0"))
    subtotal = to_minor_units(raw_subtotal)
    shipping = config.SHIPPING_FLAT_CENTS if shipping_cents is None else int(shipping_cents)
    rate = config.TAX_RATE if tax_rate is None else Decimal(tax_rate)
    tax = _round_cents(Decimal(subtotal) * rate)
    return Totals(subtotal=subtotal, shipping=shipping, tax=tax, total=subtotal + shipping + tax)
