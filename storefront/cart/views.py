# module storefront.cart.views

"""Endpoints du panier (session + Supabase pour un utilisateur connecté).
Le panier invité vit uniquement en session.
"""
from typing import Any, Dict, Optional
import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel

from storefront.cart import service as cart_service
from storefront.cart.models import CartItem
from storefront.cart.totals import compute_totals
from storefront.errors import EmptyCartError
from storefront.utils.security import get_optional_user

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/cart", tags=["Cart API"])


class QuantityChange(BaseModel):
    id: str
    quantity: int


def _user_id(user: Optional[Dict[str, Any]]) -> Optional[str]:
    return (user or {}).get("id") or None


def _response(items) -> Dict[str, Any]:
    data = cart_service.serialize_cart(items)
    try:
        data["totals"] = compute_totals(items).as_dict()
    except EmptyCartError:
        data["totals"] = None
    return data


@router.get("")
def get_cart(request: Request, user: Optional[Dict[str, Any]] = Depends(get_optional_user)) -> Dict[str, Any]:
    return _response(cart_service.load_cart(request.session, _user_id(user)))


@router.post("")
def add_to_cart(item: CartItem, request: Request, user: Optional[Dict[str, Any]] = Depends(get_optional_user)) -> Dict[str, Any]:
    """Ajoute un article; un article déjà présent voit sa quantité augmentée."""
    return _response(cart_service.add_item(request.session, item, _user_id(user)))


@router.patch("")
def change_quantity(change: QuantityChange, request: Request, user: Optional[Dict[str, Any]] = Depends(get_optional_user)) -> Dict[str, Any]:
    """Met à jour la quantité; 0 retire la ligne."""
    if not change.id.strip():
        raise HTTPException(status_code=400, detail="Missing item id")
    return _response(cart_service.update_quantity(request.session, change.id, change.quantity, _user_id(user)))


@router.delete("/{item_id}")
def remove_from_cart(item_id: str, request: Request, user: Optional[Dict[str, Any]] = Depends(get_optional_user)) -> Dict[str, Any]:
    return _response(cart_service.remove_item(request.session, item_id, _user_id(user)))


@router.delete("")
def clear(request: Request, user: Optional[Dict[str, Any]] = Depends(get_optional_user)) -> Dict[str, Any]:
    cleared = cart_service.clear_cart(request.session, _user_id(user))
    return {"items": [], "count": 0, "totals": None, "durableCleared": cleared}
