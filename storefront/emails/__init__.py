from .service import (
    OrderConfirmationData,
    send_email,
    send_order_confirmation_email,
    send_order_status_update_email,
)
from .specs import part_specs

__all__ = [
    "OrderConfirmationData",
    "send_email",
    "send_order_confirmation_email",
    "send_order_status_update_email",
    "part_specs",
]
