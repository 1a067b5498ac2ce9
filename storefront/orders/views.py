# module storefront.orders.views

"""Endpoints commandes.
- Client (lecture seule): liste, détail, statut avec badge et frise.
- Admin: transition de statut (valide la transition puis notifie le client).
"""
from typing import Any, Dict, Optional
import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, Field

from storefront.errors import StorefrontError
from storefront.utils.security import require_admin, require_user

from . import service as orders_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/orders", tags=["Orders API"])
admin_router = APIRouter(prefix="/api/v1/admin/orders", tags=["Admin Orders API"])


class StatusChange(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    status: str = Field(min_length=1)
    notify: bool = True
    tracking_number: Optional[str] = Field(default=None, alias="trackingNumber")


def _http_error(e: StorefrontError) -> HTTPException:
    return HTTPException(status_code=e.status_code, detail=e.message)


@router.get("")
def list_orders(user: Dict[str, Any] = Depends(require_user)) -> Dict[str, Any]:
    return {"orders": orders_service.list_orders_for_user(user.get("id"))}


@router.get("/{order_id}")
def get_order(order_id: str, user: Dict[str, Any] = Depends(require_user)) -> Dict[str, Any]:
    try:
        return orders_service.get_order_for_user(order_id, user.get("id"))
    except StorefrontError as e:
        raise _http_error(e)


@router.get("/{order_id}/status")
def get_order_status(order_id: str, user: Dict[str, Any] = Depends(require_user)) -> Dict[str, Any]:
    """Statut courant, couleur de badge et frise; aucune transition possible ici."""
    try:
        return orders_service.get_order_status_view(order_id, user.get("id"))
    except StorefrontError as e:
        raise _http_error(e)


@admin_router.patch("/{order_id}/status")
def change_order_status(
    order_id: str,
    payload: StatusChange,
    admin: Dict[str, Any] = Depends(require_admin),
) -> Dict[str, Any]:
    try:
        return orders_service.transition_order_status(
            order_id,
            payload.status,
            notify=payload.notify,
            tracking_number=payload.tracking_number,
        )
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Unknown order status: {payload.status}")
    except StorefrontError as e:
        raise _http_error(e)
