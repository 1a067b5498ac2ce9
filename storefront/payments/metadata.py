"""
Sérialisation/désérialisation des métadonnées Stripe (userId, cartItems, shippingAddress).
Ces métadonnées sont le seul support du contenu de la commande à travers la redirection.
Stripe limite chaque valeur à 500 caractères: les JSON longs sont découpés en
cartItems, cartItems_1, cartItems_2...
"""
import json
from typing import Any, Dict, List, Optional, Tuple

from storefront.cart.models import CartItem, ShippingAddress, parse_items

METADATA_VALUE_LIMIT = 500
GUEST_USER_ID = "guest"

# module storefront.payments.metadata
def _split(key: str, payload: str) -> Dict[str, str]:
    chunks = [payload[i:i + METADATA_VALUE_LIMIT] for i in range(0, len(payload), METADATA_VALUE_LIMIT)] or [""]
    out = {key: chunks[0]}
    for idx, chunk in enumerate(chunks[1:], start=1):
        out[f"{key}_{idx}"] = chunk
    return out

def _join(meta: Dict[str, Any], key: str) -> Optional[str]:
    if key not in meta:
        return None
    parts = [str(meta.get(key) or "")]
    idx = 1
    while f"{key}_{idx}" in meta:
        parts.append(str(meta.get(f"{key}_{idx}") or ""))
        idx += 1
    return "".join(parts)

def make_metadata(
    user_id: Optional[str],
    cart_items: List[CartItem],
    shipping_address: Optional[ShippingAddress] = None,
) -> Dict[str, str]:
    """
    Construit les métadonnées de l'intention de paiement.
    - userId: identifiant de l'acheteur ("guest" si anonyme)
    - cartItems: JSON de l'instantané du panier (sans les images)
    - shippingAddress: JSON de l'adresse, seulement si fournie
    """
    cart_meta = [{k: v for k, v in it.snapshot().items() if k != "image"} for it in cart_items]
    meta: Dict[str, str] = {"userId": user_id or GUEST_USER_ID}
    meta.update(_split("cartItems", json.dumps(cart_meta, separators=(",", ":"))))
    if shipping_address is not None:
        meta.update(_split("shippingAddress", json.dumps(shipping_address.snapshot(), separators=(",", ":"))))
    return meta

def extract_metadata(intent: Dict[str, Any]) -> Tuple[Optional[str], List[CartItem], Optional[ShippingAddress]]:
    """
    Extrait (user_id, items, shipping) depuis un PaymentIntent.
    - Tolérant aux erreurs: JSON invalide => ([], None)
    - user_id vaut None pour un achat invité
    """
    meta = (intent or {}).get("metadata") or {}
    if not isinstance(meta, dict):
        meta = dict(meta)
    user_id = meta.get("userId")
    if user_id == GUEST_USER_ID:
        user_id = None

    try:
        items = parse_items(json.loads(_join(meta, "cartItems") or "[]"))
    except (TypeError, ValueError):
        items = []

    shipping = None
    raw_shipping = _join(meta, "shippingAddress")
    if raw_shipping:
        try:
            shipping = ShippingAddress.model_validate(json.loads(raw_shipping))
        except ValueError:
            shipping = None
    return user_id, items, shipping
