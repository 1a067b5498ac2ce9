"""
Cas d'usage 'payments': création de l'intention de paiement.
Aucune commande n'est écrite ici: la commande est créée après confirmation du
paiement (checkout.finalizer), pour ne jamais persister d'intentions abandonnées.
"""
from typing import Any, Dict, List, Optional
import logging

import stripe

from storefront.cart.models import CartItem, ShippingAddress
from storefront.cart.totals import compute_totals, EMPTY_CART_MESSAGE
from storefront.errors import EmptyCartError, PaymentConfigurationError

from . import stripe_client
from . import metadata as meta

logger = logging.getLogger(__name__)

GENERIC_CHECKOUT_ERROR = "An error occurred during checkout"

def create_payment_intent(
    cart_items: List[CartItem],
    user_id: Optional[str] = None,
    email: Optional[str] = None,
    shipping_address: Optional[ShippingAddress] = None,
) -> Dict[str, Any]:
    """
    Prépare l'intention de paiement Stripe pour le panier.
    Retour: {"clientSecret": "...", "paymentIntentId": "...", "amount": <int>} ou {"error": "..."}
    - Configuration Stripe absente: erreur immédiate, aucun appel réseau.
    - Panier vide: erreur avant tout appel à la passerelle.
    - Erreur passerelle: message de Stripe; autre exception: message générique. Pas de retry.
    """
    from storefront import config
    try:
        stripe_client.require_stripe()
        if not cart_items:
            raise EmptyCartError(EMPTY_CART_MESSAGE)
        totals = compute_totals(cart_items)
        intent = stripe_client.create_payment_intent(
            amount=totals.total,
            currency=config.CHECKOUT_CURRENCY,
            metadata=meta.make_metadata(user_id, cart_items, shipping_address),
            receipt_email=email,
        )
        logger.info("payments.intent created id=%s amount=%s user_id=%s", intent.get("id"), totals.total, user_id)
        return {
            "clientSecret": intent.get("client_secret"),
            "paymentIntentId": intent.get("id"),
            "amount": totals.total,
            "currency": config.CHECKOUT_CURRENCY,
        }
    except (PaymentConfigurationError, EmptyCartError) as e:
        logger.warning("payments.intent rejected: %s", e.message)
        return {"error": e.message}
    except stripe.StripeError as e:
        logger.exception("Stripe payment intent error")
        return {"error": stripe_client.gateway_message(e)}
    except Exception:
        logger.exception("Stripe payment intent error")
        return {"error": GENERIC_CHECKOUT_ERROR}
