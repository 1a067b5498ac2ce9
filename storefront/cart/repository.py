"""
Accès aux données du panier durable (table user_settings.cart_items).
Les erreurs Supabase sont journalisées et transformées en valeurs neutres.
"""
from typing import Any, Dict, List
import logging

import storefront.infra.supabase_client as supabase_client

logger = logging.getLogger(__name__)

# module storefront.cart.repository
def fetch_cart_items(user_id: str) -> List[Dict[str, Any]]:
    """Retourne le panier sauvegardé de l'utilisateur ([] si absent ou en cas d'erreur)."""
    if not user_id:
        return []
    try:
        res = (
            supabase_client.get_service_supabase()
            .table("user_settings")
            .select("cart_items")
            .eq("user_id", user_id)
            .limit(1)
            .execute()
        )
        rows = res.data or []
        return (rows[0].get("cart_items") or []) if rows else []
    except Exception:
        logger.exception("cart.repository.fetch_cart_items failed user_id=%s", user_id)
        return []

def save_cart_items(user_id: str, items: List[Dict[str, Any]]) -> bool:
    """Upsert du panier de l'utilisateur. Retourne False en cas d'erreur."""
    if not user_id:
        return False
    try:
        (
            supabase_client.get_service_supabase()
            .table("user_settings")
            .upsert({"user_id": user_id, "cart_items": items}, on_conflict="user_id")
            .execute()
        )
        return True
    except Exception:
        logger.exception("cart.repository.save_cart_items failed user_id=%s", user_id)
        return False
