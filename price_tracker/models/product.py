# price_tracker/models/product.py

"""Product data model for a tracked item."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal


@dataclass
class ProductFields:
    """Mutable attributes written on every successful ingestion."""

    name: str
    current_price: Decimal
    currency: str
    image_url: str | None = None


@dataclass
class Product:
    """One tracked item for one owner, keyed by its canonical URL."""

    id: int
    owner_id: str
    canonical_url: str
    name: str
    current_price: Decimal
    currency: str
    image_url: str | None
    created_at: datetime
    updated_at: datetime
