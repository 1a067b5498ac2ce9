"""
Module 'orders' (feature-first): modèle de commande, cycle de vie du statut et accès aux données.
"""

from .models import Order, OrderStatus
from .lifecycle import assert_transition, can_transition, status_badge, status_timeline, status_view

__all__ = [
    "Order",
    "OrderStatus",
    "assert_transition",
    "can_transition",
    "status_badge",
    "status_timeline",
    "status_view",
]
