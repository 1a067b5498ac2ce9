"""
Finalisation de commande après paiement (page de succès).

Machine à états par jeton de commande: Unprocessed -> Processing -> Done.
- Les deux gardes (en cours dans le process, registre d'idempotence) sont consultées
  avant toute écriture.
- Une fois en Processing, chaque étape est tentée indépendamment:
  écriture de la commande, email de confirmation, vidage du panier.
- Aucune de ces étapes n'est fatale: le paiement a déjà réussi.
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, MutableMapping, Optional
import logging
import secrets
import string

import stripe

from storefront.cart import service as cart_service
from storefront.cart.models import CartItem, ShippingAddress
from storefront.cart.totals import Totals, compute_totals
from storefront.emails import service as email_service
from storefront.errors import OrderAccessDeniedError, PaymentGatewayError, PaymentNotConfirmedError
from storefront.orders import repository as orders_repo
from storefront.orders.models import OrderStatus
from storefront.payments import metadata as payments_metadata
from storefront.payments import stripe_client

from .guards import EffectOnceGuard
from .ledger import IdempotencyStore, clear_shipping_snapshot, load_shipping_snapshot

logger = logging.getLogger(__name__)

ORDER_NUMBER_ALPHABET = string.ascii_uppercase + string.digits
ORDER_NUMBER_LENGTH = 8

FINALIZED = "finalized"
ALREADY_PROCESSED = "already_processed"
SKIPPED_IN_FLIGHT = "skipped_in_flight"
NOTHING_TO_FINALIZE = "nothing_to_finalize"
DEGRADED = "degraded"


def generate_order_number(length: int = ORDER_NUMBER_LENGTH) -> str:
    """Jeton local (ex: 'K7Q2ZP0M') quand la redirection n'en fournit pas."""
    return "".join(secrets.choice(ORDER_NUMBER_ALPHABET) for _ in range(length))


@dataclass
class FinalizationContext:
    order_token: str
    session: MutableMapping[str, Any]
    ledger: IdempotencyStore
    guard: EffectOnceGuard
    user: Optional[Dict[str, Any]] = None
    payment_intent_id: Optional[str] = None
    user_token: Optional[str] = None


@dataclass
class FinalizationResult:
    order_number: str
    outcome: str
    order_saved: bool = False
    email_sent: bool = False
    cart_cleared: bool = False
    totals: Optional[Totals] = None
    errors: List[str] = field(default_factory=list)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "orderNumber": self.order_number,
            "outcome": self.outcome,
            "orderSaved": self.order_saved,
            "emailSent": self.email_sent,
            "cartCleared": self.cart_cleared,
            "totals": self.totals.as_dict() if self.totals else None,
            "errors": list(self.errors),
        }


def _user_id(ctx: FinalizationContext) -> Optional[str]:
    return (ctx.user or {}).get("id") or None


def _clear_everything(ctx: FinalizationContext, result: FinalizationResult) -> None:
    """Vide panier (local + durable) et instantané de livraison, quoi qu'il arrive avant."""
    try:
        result.cart_cleared = cart_service.clear_cart(ctx.session, _user_id(ctx))
    except Exception:
        logger.exception("checkout.finalize cart clear failed order=%s", ctx.order_token)
        ctx.session[cart_service.CART_SESSION_KEY] = []
        result.cart_cleared = False
        result.errors.append("cart")
    clear_shipping_snapshot(ctx.session)


def _verify_payment(ctx: FinalizationContext):
    """
    Vérifie l'intention de paiement transmise par la redirection, avant tout effet.
    - Intention absente ou statut != succeeded: PaymentNotConfirmedError
    - Erreur de la passerelle (intention inconnue, réseau, clé): PaymentGatewayError
    - Intention créée pour un autre client: OrderAccessDeniedError
    Retour: (items, shipping) issus des métadonnées, pour reconstruire un panier vide.
    """
    if not ctx.payment_intent_id:
        logger.warning("checkout.finalize missing payment intent order=%s", ctx.order_token)
        raise PaymentNotConfirmedError("Payment has not been confirmed")
    try:
        intent = stripe_client.retrieve_payment_intent(ctx.payment_intent_id)
    except stripe.StripeError as e:
        logger.error(
            "checkout.finalize payment intent lookup failed order=%s intent=%s error=%s",
            ctx.order_token, ctx.payment_intent_id, e,
        )
        raise PaymentGatewayError(stripe_client.gateway_message(e))
    status = intent.get("status")
    if status != "succeeded":
        logger.warning("checkout.finalize payment not confirmed order=%s status=%s", ctx.order_token, status)
        raise PaymentNotConfirmedError("Payment has not been confirmed")
    owner_id, items, shipping = payments_metadata.extract_metadata(intent)
    user_id = _user_id(ctx)
    if user_id and owner_id != user_id:
        logger.warning(
            "checkout.finalize intent owner mismatch order=%s intent=%s user_id=%s",
            ctx.order_token, ctx.payment_intent_id, user_id,
        )
        raise OrderAccessDeniedError("This payment does not belong to the current user")
    return items, shipping


def _persist_order(ctx: FinalizationContext, items: List[CartItem], shipping: ShippingAddress, totals: Totals) -> bool:
    payload = {
        "user_id": _user_id(ctx),
        "status": OrderStatus.CONFIRMED.value,
        "total": float(totals.as_decimal()["total"]),
        "items": [it.snapshot() for it in items],
        "order_number": ctx.order_token,
        "shipping_address": shipping.snapshot(),
        "created_at": datetime.now(timezone.utc).isoformat(),
    }
    row, err = orders_repo.insert_order(payload, user_token=ctx.user_token)
    if err:
        logger.error("checkout.finalize order insert failed order=%s error=%s", ctx.order_token, err)
        return False
    logger.info("checkout.finalize order saved order=%s id=%s", ctx.order_token, (row or {}).get("id"))
    return True


def _send_confirmation(ctx: FinalizationContext, items: List[CartItem], shipping: ShippingAddress, totals: Totals) -> bool:
    user = ctx.user or {}
    amounts = totals.as_decimal()
    try:
        sent = email_service.send_order_confirmation_email({
            "email": user.get("email") or "",
            "customerName": shipping.name or user.get("name") or "",
            "orderNumber": ctx.order_token,
            "items": items,
            "shippingAddress": shipping,
            "subtotal": amounts["subtotal"],
            "shipping": amounts["shipping"],
            "tax": amounts["tax"],
            "total": amounts["total"],
        })
    except Exception:
        logger.exception("checkout.finalize email dispatch crashed order=%s", ctx.order_token)
        return False
    if not sent.get("success"):
        logger.error("checkout.finalize email failed order=%s error=%s", ctx.order_token, sent.get("error"))
        return False
    ctx.ledger.mark_emailed(ctx.order_token)
    return True


def finalize_order(ctx: FinalizationContext) -> FinalizationResult:
    """
    Finalise la commande identifiée par ctx.order_token.
    Résultats possibles (outcome):
    - skipped_in_flight: une finalisation est déjà en cours pour ce jeton, aucun effet
    - already_processed: jeton déjà traité, aucune écriture ni email, panier vidé
    - nothing_to_finalize: panier vide et aucun instantané de paiement
    - degraded: utilisateur ou adresse manquants, ni commande ni email, panier vidé
    - finalized: chemin nominal (les échecs d'écriture/email sont dans errors)
    Avant tout effet, l'intention de paiement doit exister, être 'succeeded' et appartenir
    à l'utilisateur (PaymentNotConfirmedError, PaymentGatewayError, OrderAccessDeniedError).
    """
    token = ctx.order_token
    result = FinalizationResult(order_number=token, outcome=FINALIZED)

    if not ctx.guard.try_enter(token):
        logger.warning("checkout.finalize duplicate invocation skipped order=%s", token)
        result.outcome = SKIPPED_IN_FLIGHT
        return result

    try:
        if ctx.ledger.has_processed(token):
            logger.info("checkout.finalize already processed order=%s", token)
            result.outcome = ALREADY_PROCESSED
            _clear_everything(ctx, result)
            return result

        user_id = _user_id(ctx)
        items = cart_service.load_cart(ctx.session, user_id)
        shipping = load_shipping_snapshot(ctx.session)

        meta_items, meta_shipping = _verify_payment(ctx)
        if not items:
            items = meta_items
        if shipping is None:
            shipping = meta_shipping

        if not items:
            logger.info("checkout.finalize nothing to finalize order=%s", token)
            result.outcome = NOTHING_TO_FINALIZE
            return result

        ctx.ledger.mark_processed(token)
        result.totals = compute_totals(items)

        if not user_id or shipping is None:
            logger.warning(
                "checkout.finalize degraded order=%s has_user=%s has_shipping=%s",
                token, bool(user_id), shipping is not None,
            )
            result.outcome = DEGRADED
        else:
            result.order_saved = _persist_order(ctx, items, shipping, result.totals)
            if not result.order_saved:
                result.errors.append("order")

            if ctx.ledger.has_emailed(token):
                logger.info("checkout.finalize email already sent order=%s", token)
            else:
                result.email_sent = _send_confirmation(ctx, items, shipping, result.totals)
                if not result.email_sent:
                    result.errors.append("email")

        _clear_everything(ctx, result)
        logger.info(
            "checkout.finalize done order=%s outcome=%s saved=%s emailed=%s",
            token, result.outcome, result.order_saved, result.email_sent,
        )
        return result
    finally:
        ctx.guard.leave(token)
