"""
Dispatcher des emails transactionnels (confirmation de commande, suivi de statut).
- Rendu HTML via jinja2 (storefront/emails/templates)
- Envoi via l'API HTTP du relais (EMAIL_API_URL), une seule tentative par appel
- Ne lève jamais: retourne {"success": bool, "error"?: str}
"""
import logging
import re
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional, Union

import requests
from pydantic import BaseModel, ConfigDict, Field

from storefront import config
from storefront.cart.models import CartItem, ShippingAddress

from .specs import part_specs, split_specs
from .templating import render_template

logger = logging.getLogger(__name__)

_EMAIL_RE = re.compile(r"[^@\s]+@[^@\s]+\.[^@\s]+")


class OrderConfirmationData(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: str
    customer_name: str = Field(alias="customerName")
    order_number: str = Field(alias="orderNumber")
    items: List[CartItem]
    shipping_address: ShippingAddress = Field(alias="shippingAddress")
    subtotal: Decimal
    shipping: Decimal
    tax: Decimal
    total: Decimal


def is_valid_email(email: Optional[str]) -> bool:
    return bool(email) and _EMAIL_RE.fullmatch(email.strip()) is not None


def send_email(to: str, subject: str, html: str, text: Optional[str] = None) -> bool:
    """
    Envoie un email via l'API du relais.
    - Adresse invalide: avertissement, False, aucun appel réseau.
    - Réponse non 2xx ou erreur réseau: journalisée, False.
    """
    if not is_valid_email(to):
        logger.warning("emails.send_email invalid recipient: %r", to)
        return False

    payload: Dict[str, Any] = {
        "sender": {"email": config.MAIL_FROM, "name": config.STORE_NAME},
        "to": [{"email": to.strip()}],
        "subject": subject,
        "htmlContent": html,
    }
    if text:
        payload["textContent"] = text
    headers = {
        "api-key": config.EMAIL_API_KEY,
        "Content-Type": "application/json",
        "Accept": "application/json",
    }
    try:
        response = requests.post(
            config.EMAIL_API_URL,
            json=payload,
            headers=headers,
            timeout=config.EMAIL_TIMEOUT_SECONDS,
        )
    except requests.RequestException:
        logger.exception("emails.send_email transport error subject=%s", subject)
        return False

    if 200 <= response.status_code < 300:
        logger.info("emails.send_email sent subject=%s status=%s", subject, response.status_code)
        return True
    logger.error("emails.send_email rejected status=%s body=%s", response.status_code, response.text[:500])
    return False


def build_confirmation_items(items: List[CartItem]) -> List[Dict[str, Any]]:
    """Lignes au format email: specs synthétisées "model|innerDiameter|outerDiameter"."""
    out: List[Dict[str, Any]] = []
    for item in items:
        specs = part_specs(item.part_number, fallback_model=item.name)
        model, inner, outer = split_specs(specs)
        out.append({
            "name": item.name,
            "specs": specs,
            "model": model,
            "inner_diameter": inner,
            "outer_diameter": outer,
            "price": item.price,
            "quantity": item.quantity,
        })
    return out


def send_order_confirmation_email(data: Union[OrderConfirmationData, Dict[str, Any]]) -> Dict[str, Any]:
    """
    Email de confirmation de commande. Une seule tentative: l'appelant (finalizer)
    ne rappelle pas une fois le succès consigné dans le registre d'idempotence.
    """
    try:
        if not isinstance(data, OrderConfirmationData):
            data = OrderConfirmationData.model_validate(data)
        address = data.shipping_address
        context = {
            "customer_name": data.customer_name,
            "order_number": data.order_number,
            "order_date": date.today().strftime("%Y-%m-%d"),
            "shipping_address": address.address,
            "city": address.city,
            "province": address.state,
            "postal_code": address.postal_code,
            "country": address.country,
            "items": build_confirmation_items(data.items),
            "subtotal": data.subtotal,
            "shipping": data.shipping,
            "tax": data.tax,
            "total": data.total,
            "store_name": config.STORE_NAME,
        }
        html = render_template("order_confirmation.html", **context)
        subject = f"Order Confirmation - #{data.order_number}"
        logger.info("emails.order_confirmation order=%s items=%s", data.order_number, len(data.items))
        if send_email(data.email, subject, html, text=subject):
            return {"success": True}
        return {"success": False, "error": "Failed to send email"}
    except Exception:
        logger.exception("emails.order_confirmation failed")
        return {"success": False, "error": "Email service error"}


def send_order_status_update_email(
    *,
    email: str,
    customer_name: str,
    order_number: str,
    order_date: str,
    status: str,
    items: List[CartItem],
    tracking_number: Optional[str] = None,
    tracking_url: Optional[str] = None,
) -> Dict[str, Any]:
    """Notification de changement de statut (processing, shipped, delivered, cancelled...)."""
    try:
        status_lower = (status or "").lower()
        context = {
            "customer_name": customer_name,
            "order_number": order_number,
            "order_date": order_date,
            "order_status": status_lower.capitalize(),
            "progress": {
                "processing": status_lower in ("processing", "shipped", "delivered"),
                "shipped": status_lower in ("shipped", "delivered"),
                "delivered": status_lower == "delivered",
            },
            "tracking_number": tracking_number,
            "tracking_url": tracking_url,
            "items": build_confirmation_items(items),
            "store_name": config.STORE_NAME,
        }
        html = render_template("order_status_update.html", **context)
        subject = f"Order Status Update - #{order_number}"
        if send_email(email, subject, html, text=subject):
            return {"success": True}
        return {"success": False, "error": "Failed to send email"}
    except Exception:
        logger.exception("emails.order_status_update failed order=%s", order_number)
        return {"success": False, "error": "Email service error"}
