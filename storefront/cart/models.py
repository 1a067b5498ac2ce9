"""
Types du panier (pydantic): lignes de panier et adresse de livraison.
Les alias camelCase correspondent au JSON envoyé par le front.
"""
from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CartItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(min_length=1)
    name: str = ""
    price: Decimal = Field(ge=0)
    quantity: int = Field(ge=1)
    part_number: Optional[str] = Field(default=None, alias="partNumber")
    image: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, v: Any) -> str:
        return str(v or "").strip()

    def snapshot(self) -> Dict[str, Any]:
        """Forme JSON stockée dans la commande et dans les métadonnées Stripe."""
        data = self.model_dump(mode="json", by_alias=True, exclude_none=True)
        data["price"] = float(self.price)
        return data


class ShippingAddress(BaseModel):
    """Adresse de livraison: tous les champs sont requis et non vides."""

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    name: str = Field(min_length=1)
    address: str = Field(min_length=1)
    city: str = Field(min_length=1)
    state: str = Field(min_length=1)
    postal_code: str = Field(min_length=1, alias="postalCode")
    country: str = Field(min_length=1)

    def snapshot(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


def parse_items(raw: Optional[List[Dict[str, Any]]]) -> List[CartItem]:
    """
    Convertit une liste brute (session, JSON, métadonnées) en CartItem.
    - Ignore les lignes invalides (id vide, quantité < 1, prix négatif).
    """
    items: List[CartItem] = []
    for entry in raw or []:
        if isinstance(entry, CartItem):
            items.append(entry)
            continue
        try:
            items.append(CartItem.model_validate(entry))
        except Exception:
            continue
    return items
