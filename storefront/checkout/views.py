# module storefront.checkout.views

"""Endpoints du parcours de paiement côté serveur.
- /shipping: mémorise l'adresse de livraison en session avant la redirection Stripe.
- /success: finalise la commande au retour de la passerelle (jeton ?order=...).
Sécurité:
- get_optional_user: l'utilisateur est facultatif; sans session la finalisation est dégradée.
"""
from typing import Any, Dict, Optional
import logging

from fastapi import APIRouter, Depends, HTTPException, Request

from storefront.cart.models import ShippingAddress
from storefront.errors import (
    OrderAccessDeniedError,
    PaymentConfigurationError,
    PaymentGatewayError,
    PaymentNotConfirmedError,
)
from storefront.utils.security import get_optional_user

from . import finalizer
from .guards import finalization_guard
from .ledger import get_idempotency_store, save_shipping_snapshot

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/checkout", tags=["Checkout API"])


@router.post("/shipping")
def save_shipping(address: ShippingAddress, request: Request) -> Dict[str, Any]:
    """Enregistre l'instantané d'adresse lu par la finalisation."""
    save_shipping_snapshot(request.session, address)
    return {"status": "ok", "shippingAddress": address.snapshot()}


@router.post("/success")
def checkout_success(
    request: Request,
    order: Optional[str] = None,
    payment_intent: Optional[str] = None,
    user: Optional[Dict[str, Any]] = Depends(get_optional_user),
) -> Dict[str, Any]:
    """Finalise la commande (idempotent par jeton).
    - Jeton absent: généré localement (8 caractères alphanumériques).
    - payment_intent obligatoire (ajouté par Stripe à l'URL de retour): l'intention doit
      être 'succeeded' (400 sinon) et appartenir à l'utilisateur connecté (403 sinon).
    - Réponse toujours 200 une fois le paiement confirmé; les échecs d'écriture
      ou d'email sont rapportés dans le corps, jamais en erreur HTTP.
    """
    token = (order or "").strip() or finalizer.generate_order_number()
    ctx = finalizer.FinalizationContext(
        order_token=token,
        session=request.session,
        ledger=get_idempotency_store(request.session),
        guard=finalization_guard,
        user=user,
        payment_intent_id=(payment_intent or "").strip() or None,
        user_token=(user or {}).get("token"),
    )
    try:
        result = finalizer.finalize_order(ctx)
    except (
        PaymentNotConfirmedError,
        PaymentGatewayError,
        PaymentConfigurationError,
        OrderAccessDeniedError,
    ) as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return result.as_dict()
