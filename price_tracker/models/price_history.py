# price_tracker/models/price_history.py

"""Append-only price observation model."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal


@dataclass(frozen=True)
class PriceHistoryRecord:
    """A single observed price for a product at a point in time."""

    id: int
    product_id: int
    price: Decimal
    currency: str
    checked_at: datetime
