"""
Module 'cart' (feature-first): types du panier, calcul des totaux et stockage.
"""

from .models import CartItem, ShippingAddress
from .totals import Totals, compute_totals, to_minor_units

__all__ = [
    "CartItem",
    "ShippingAddress",
    "Totals",
    "compute_totals",
    "to_minor_units",
]
