import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Request, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from storefront.cart import service as cart_service
from storefront.cart.models import CartItem, ShippingAddress
from storefront.checkout.ledger import save_shipping_snapshot
from storefront.utils.security import require_user
from storefront.utils.rate_limit import optional_rate_limit

from storefront.payments import service as payments_service
from storefront.payments.stripe_client import STRIPE_NOT_CONFIGURED

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/payments", tags=["Payments API"])


class IntentRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    items: Optional[List[CartItem]] = None
    email: Optional[str] = None
    shipping_address: Optional[ShippingAddress] = Field(default=None, alias="shippingAddress")


# module storefront.payments.views
@router.post("/intent", dependencies=[Depends(optional_rate_limit(times=10, seconds=60))])
def create_intent(payload: IntentRequest, request: Request, user: dict = Depends(require_user)):
    """
    Crée l'intention de paiement Stripe pour le panier de l'utilisateur authentifié.
    - Entrée JSON: { "items"?: [...], "email"?: "...", "shippingAddress"?: {...} }
    - items absent: panier de la session (réhydraté depuis Supabase si besoin)
    - shippingAddress fourni: mémorisé en session pour la finalisation
    - Réponse: {"clientSecret", "paymentIntentId", "amount", "currency"} ou {"error"}
      (500 si Stripe non configuré, 400 sinon)
    """
    user_id = user.get("id")
    items = payload.items if payload.items is not None else cart_service.load_cart(request.session, user_id)
    if payload.shipping_address is not None:
        save_shipping_snapshot(request.session, payload.shipping_address)

    result = payments_service.create_payment_intent(
        items,
        user_id=user_id,
        email=payload.email or user.get("email"),
        shipping_address=payload.shipping_address,
    )
    if "error" in result:
        status = 500 if result["error"] == STRIPE_NOT_CONFIGURED else 400
        return JSONResponse(status_code=status, content=result)
    return result


@router.get("/config")
def payments_config() -> Dict[str, Any]:
    """Clé publique Stripe pour Stripe.js (jamais la clé secrète)."""
    from storefront import config
    return {
        "publishableKey": config.STRIPE_PUBLIC_KEY,
        "currency": config.CHECKOUT_CURRENCY,
        "configured": bool(config.STRIPE_SECRET_KEY),
    }
