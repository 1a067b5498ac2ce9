"""
Cas d'usage 'cart': panier local (session Starlette) + panier durable (Supabase).
Le panier local fait foi; le panier durable sert à réhydrater une nouvelle session.
"""
from typing import Any, Dict, List, MutableMapping, Optional
import logging

from . import repository
from .models import CartItem, parse_items

logger = logging.getLogger(__name__)

CART_SESSION_KEY = "cart"

def _write(session: MutableMapping[str, Any], items: List[CartItem], user_id: Optional[str]) -> List[CartItem]:
    snapshot = [it.snapshot() for it in items]
    session[CART_SESSION_KEY] = snapshot
    if user_id:
        repository.save_cart_items(user_id, snapshot)
    return items

def load_cart(session: MutableMapping[str, Any], user_id: Optional[str] = None) -> List[CartItem]:
    """
    Retourne le panier courant.
    - Priorité à l'état local (session); si vide et utilisateur connu, réhydrate depuis Supabase.
    """
    items = parse_items(session.get(CART_SESSION_KEY))
    if not items and user_id:
        items = parse_items(repository.fetch_cart_items(user_id))
        if items:
            session[CART_SESSION_KEY] = [it.snapshot() for it in items]
    return items

def add_item(session: MutableMapping[str, Any], item: CartItem, user_id: Optional[str] = None) -> List[CartItem]:
    """Ajoute une ligne; si l'article est déjà présent, les quantités s'additionnent."""
    items = load_cart(session, user_id)
    for idx, existing in enumerate(items):
        if existing.id == item.id:
            items[idx] = existing.model_copy(update={"quantity": existing.quantity + item.quantity})
            break
    else:
        items.append(item)
    return _write(session, items, user_id)

def remove_item(session: MutableMapping[str, Any], item_id: str, user_id: Optional[str] = None) -> List[CartItem]:
    items = [it for it in load_cart(session, user_id) if it.id != str(item_id)]
    return _write(session, items, user_id)

def update_quantity(session: MutableMapping[str, Any], item_id: str, quantity: int, user_id: Optional[str] = None) -> List[CartItem]:
    """Met à jour la quantité d'une ligne; une quantité < 1 retire la ligne."""
    if quantity < 1:
        return remove_item(session, item_id, user_id)
    items = [
        it.model_copy(update={"quantity": int(quantity)}) if it.id == str(item_id) else it
        for it in load_cart(session, user_id)
    ]
    return _write(session, items, user_id)

def clear_cart(session: MutableMapping[str, Any], user_id: Optional[str] = None) -> bool:
    """
    Vide le panier local et le panier durable.
    - L'état local est toujours vidé; un échec côté Supabase est journalisé, jamais levé.
    - Retourne True si le panier durable a aussi été vidé (ou s'il n'y en a pas).
    """
    session[CART_SESSION_KEY] = []
    if not user_id:
        return True
    ok = repository.save_cart_items(user_id, [])
    if not ok:
        logger.warning("cart.clear_cart durable clear failed user_id=%s", user_id)
    return ok

def serialize_cart(items: List[CartItem]) -> Dict[str, Any]:
    return {"items": [it.snapshot() for it in items], "count": sum(it.quantity for it in items)}
