"""
Adaptateur Stripe: centralise la configuration et les appels PaymentIntent.
"""
from typing import Any, Dict, Optional

import stripe

from storefront.errors import PaymentConfigurationError

STRIPE_NOT_CONFIGURED = "Stripe is not properly configured. Please check your environment variables."

# module storefront.payments.stripe_client
def require_stripe():
    """
    Prépare et retourne le module stripe prêt à l’emploi.
    - Configure stripe.api_key via STRIPE_SECRET_KEY.
    - Sans clé, lève PaymentConfigurationError avant tout appel réseau (erreur fatale, pas de retry).
    """
    from storefront import config
    if not config.STRIPE_SECRET_KEY:
        raise PaymentConfigurationError(STRIPE_NOT_CONFIGURED)
    stripe.api_key = config.STRIPE_SECRET_KEY
    return stripe

def create_payment_intent(
    *,
    amount: int,
    currency: str,
    metadata: Dict[str, str],
    receipt_email: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Crée un PaymentIntent Stripe (paiement par Stripe Elements).
    - amount: total en unités mineures
    - metadata: instantané du panier et de l'adresse (voir payments.metadata)
    Retour: dict intent incluant "id" et "client_secret".
    """
    require_stripe()
    params: Dict[str, Any] = {
        "amount": amount,
        "currency": currency,
        "metadata": metadata,
        "automatic_payment_methods": {"enabled": True},
    }
    if receipt_email:
        params["receipt_email"] = receipt_email
    intent = stripe.PaymentIntent.create(**params)
    # stripe retourne un objet; on le traite comme dict-compatible
    return dict(intent)

def retrieve_payment_intent(intent_id: str) -> Dict[str, Any]:
    """
    Récupère un PaymentIntent par son identifiant (pi_...).
    Retour: dict incluant "status" et "metadata".
    """
    require_stripe()
    intent = stripe.PaymentIntent.retrieve(intent_id)
    return dict(intent)

def gateway_message(exc: Exception) -> str:
    """Message lisible d'une erreur Stripe (carte refusée, requête invalide...)."""
    return getattr(exc, "user_message", None) or str(exc) or "An error occurred during checkout"
