"""
Cas d'usage 'orders': lecture client (statut, frise) et transitions administratives.
Après l'écriture du statut, l'application enregistre la notification in-app puis envoie l'email.
"""
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
import logging

from storefront.cart.models import parse_items
from storefront.emails import service as email_service
from storefront.errors import OrderAccessDeniedError, OrderNotFoundError, StorefrontError

from . import repository
from .lifecycle import assert_transition, status_badge, status_view
from .models import Order, OrderStatus

logger = logging.getLogger(__name__)


def _load(order_id: Any) -> Order:
    row = repository.get_order_by_id(order_id)
    if not row:
        raise OrderNotFoundError("Order not found")
    return Order.model_validate(row)


def _owned(order_id: Any, user_id: str) -> Order:
    order = _load(order_id)
    if str(order.user_id or "") != str(user_id or ""):
        logger.warning("orders.access denied order_id=%s user_id=%s", order_id, user_id)
        raise OrderAccessDeniedError("You do not have access to this order")
    return order


def _summary(order: Order) -> Dict[str, Any]:
    data = order.model_dump(mode="json")
    data["badge"] = status_badge(order.status)
    return data


def list_orders_for_user(user_id: str, limit: int = 50) -> List[Dict[str, Any]]:
    out: List[Dict[str, Any]] = []
    for row in repository.list_user_orders(user_id, limit=limit):
        try:
            out.append(_summary(Order.model_validate(row)))
        except ValueError:
            logger.warning("orders.list skipped malformed row id=%s", (row or {}).get("id"))
    return out


def get_order_for_user(order_id: Any, user_id: str) -> Dict[str, Any]:
    return _summary(_owned(order_id, user_id))


def get_order_status_view(order_id: Any, user_id: str) -> Dict[str, Any]:
    """
    Vue lecture seule du statut: badge et frise des étapes franchies.
    - Commande absente: OrderNotFoundError; commande d'un autre client: OrderAccessDeniedError.
    """
    order = _owned(order_id, user_id)
    view = status_view(order.status)
    view.update({"orderId": order.id, "orderNumber": order.order_number})
    return view


def _order_reference(order: Order) -> str:
    return order.order_number or str(order.id)[-6:].upper()


def _record_status_notification(order: Order, new_status: OrderStatus) -> bool:
    """Notification in-app à chaque changement de statut, indépendante de l'email."""
    if not order.user_id:
        return False
    message = f"Your order #{_order_reference(order)} status has been updated to: {new_status.value}"
    return repository.insert_notification(order.user_id, message, type="info") is not None


def _notify_status_change(order: Order, new_status: OrderStatus, tracking_number: Optional[str] = None) -> bool:
    contact = repository.get_customer_contact(order.user_id) if order.user_id else None
    email = (contact or {}).get("email")
    if not email:
        logger.warning("orders.notify no contact order_id=%s", order.id)
        return False
    address = order.shipping_address or {}
    sent = email_service.send_order_status_update_email(
        email=email,
        customer_name=(contact or {}).get("full_name") or address.get("name") or "",
        order_number=_order_reference(order),
        order_date=order.created_at.strftime("%Y-%m-%d") if order.created_at else "",
        status=new_status.value,
        items=parse_items(order.items),
        tracking_number=tracking_number,
    )
    if not sent.get("success"):
        logger.error("orders.notify failed order_id=%s error=%s", order.id, sent.get("error"))
        return False
    repository.insert_notification(
        order.user_id,
        f"We sent you an email about your order #{_order_reference(order)}",
        type="info",
    )
    return True


def transition_order_status(
    order_id: Any,
    new_status: Any,
    notify: bool = True,
    tracking_number: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Transition administrative du statut.
    1) Valide la transition (InvalidStatusTransitionError sinon)
    2) Écrit le statut
    3) Enregistre la notification in-app (toujours, même sans email)
    4) Notifie le client par email si notify (best-effort, après l'écriture)
    """
    order = _load(order_id)
    target = assert_transition(order.status, new_status)
    updated_at = datetime.now(timezone.utc).isoformat()
    row = repository.update_order_status(order.id, target.value, updated_at)
    if row is None:
        raise StorefrontError("Unable to update order status")
    logger.info("orders.transition order_id=%s %s->%s", order.id, order.status.value, target.value)

    in_app = _record_status_notification(order, target)
    notified = False
    if notify:
        notified = _notify_status_change(order, target, tracking_number=tracking_number)

    view = status_view(target)
    view.update({"orderId": order.id, "orderNumber": order.order_number, "notified": notified, "inAppNotified": in_app})
    return view
