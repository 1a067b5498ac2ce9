"""
Modèle de commande (table orders) et statuts.
"""
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class OrderStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"

    @classmethod
    def parse(cls, value: Union[str, "OrderStatus", None]) -> "OrderStatus":
        """Accepte 'Shipped', 'shipped', OrderStatus.SHIPPED; inconnu => ValueError."""
        if isinstance(value, cls):
            return value
        return cls(str(value or "").strip().lower())


class Order(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: Union[int, str]
    user_id: Optional[str] = None
    order_number: Optional[str] = None
    status: OrderStatus = OrderStatus.PENDING
    total: Decimal = Decimal("0")
    items: List[Dict[str, Any]] = Field(default_factory=list)
    shipping_address: Optional[Dict[str, Any]] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
