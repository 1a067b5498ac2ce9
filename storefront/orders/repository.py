"""
Accès aux données pour la feature 'orders' (tables orders, users, notifications).
- Lectures: valeurs neutres (None / []) en cas d'erreur, erreur journalisée.
- insert_order: retourne (row, error) pour que l'appelant journalise et poursuive.
"""
from typing import Any, Dict, List, Optional, Tuple
import logging

from postgrest.exceptions import APIError

import storefront.infra.supabase_client as supabase_client

logger = logging.getLogger(__name__)

ORDER_COLUMNS = "id, user_id, order_number, status, total, items, shipping_address, created_at, updated_at"

# module storefront.orders.repository
def insert_order(payload: Dict[str, Any], user_token: Optional[str] = None) -> Tuple[Optional[dict], Optional[str]]:
    """
    Insère une commande.
    - Avec user_token: client utilisateur (RLS active), sinon service-role.
    - Retour: (ligne créée, None) ou (None, message d'erreur).
    """
    try:
        client = (
            supabase_client.get_user_supabase(user_token)
            if user_token
            else supabase_client.get_service_supabase()
        )
        res = client.table("orders").insert(payload).execute()
        rows = res.data or []
        row = rows[0] if isinstance(rows, list) and rows else None
        return (row or dict(payload)), None
    except APIError as e:
        code = e.args[0].get("code") if e.args and isinstance(e.args[0], dict) else getattr(e, "code", None)
        if code == "23505":
            # contrainte unique sur order_number: commande déjà enregistrée
            logger.warning("orders.repository.insert_order duplicate order_number=%s", payload.get("order_number"))
            return None, "Order already recorded"
        logger.exception("orders.repository.insert_order failed order_number=%s", payload.get("order_number"))
        return None, getattr(e, "message", None) or str(e)
    except Exception as e:
        logger.exception(
            "orders.repository.insert_order failed user_id=%s order_number=%s",
            payload.get("user_id"),
            payload.get("order_number"),
        )
        return None, str(e) or e.__class__.__name__

def get_order_by_id(order_id: Any) -> Optional[dict]:
    try:
        res = (
            supabase_client.get_service_supabase()
            .table("orders")
            .select(ORDER_COLUMNS)
            .eq("id", order_id)
            .limit(1)
            .execute()
        )
        rows = res.data or []
        return rows[0] if rows else None
    except Exception:
        logger.exception("orders.repository.get_order_by_id failed id=%s", order_id)
        return None

def list_user_orders(user_id: str, limit: int = 50) -> List[dict]:
    """Commandes de l'utilisateur, plus récentes d'abord."""
    if not user_id:
        return []
    try:
        res = (
            supabase_client.get_service_supabase()
            .table("orders")
            .select(ORDER_COLUMNS)
            .eq("user_id", user_id)
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
        )
        return res.data or []
    except Exception:
        logger.exception("orders.repository.list_user_orders failed user_id=%s", user_id)
        return []

def update_order_status(order_id: Any, status: str, updated_at: str) -> Optional[dict]:
    """Écrit le nouveau statut; retourne la ligne mise à jour ou None."""
    try:
        res = (
            supabase_client.get_service_supabase()
            .table("orders")
            .update({"status": status, "updated_at": updated_at})
            .eq("id", order_id)
            .execute()
        )
        rows = res.data or []
        return rows[0] if rows else None
    except Exception:
        logger.exception("orders.repository.update_order_status failed id=%s status=%s", order_id, status)
        return None

def get_customer_contact(user_id: str) -> Optional[dict]:
    """Email et nom du client (table users) pour les notifications de statut."""
    if not user_id:
        return None
    try:
        res = (
            supabase_client.get_service_supabase()
            .table("users")
            .select("id, email, full_name")
            .eq("id", user_id)
            .limit(1)
            .execute()
        )
        rows = res.data or []
        return rows[0] if rows else None
    except Exception:
        logger.exception("orders.repository.get_customer_contact failed user_id=%s", user_id)
        return None

def insert_notification(user_id: str, message: str, type: str = "info") -> Optional[dict]:
    """Notification in-app (table notifications, non lue); None si l'écriture échoue."""
    if not user_id:
        return None
    payload = {"user_id": user_id, "message": message, "type": type, "read": False}
    try:
        res = supabase_client.get_service_supabase().table("notifications").insert(payload).execute()
        rows = res.data or []
        return rows[0] if rows else payload
    except Exception:
        logger.exception("orders.repository.insert_notification failed user_id=%s", user_id)
        return None
