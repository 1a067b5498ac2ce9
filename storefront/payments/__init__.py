"""
Module 'payments' (feature-first): point d'entrée public.
Réunit client Stripe, métadonnées de l'intention et service de création.
"""

from .metadata import make_metadata, extract_metadata
from .stripe_client import require_stripe, create_payment_intent as create_stripe_intent, retrieve_payment_intent
from .service import create_payment_intent

__all__ = [
    # metadata
    "make_metadata",
    "extract_metadata",
    # stripe
    "require_stripe",
    "create_stripe_intent",
    "retrieve_payment_intent",
    # services
    "create_payment_intent",
]
