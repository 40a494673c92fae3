# price_tracker/models/extracted_payload.py

"""Validated output of the extraction step (never persisted as-is)."""

from dataclasses import dataclass
from decimal import Decimal

from price_tracker.models.product import ProductFields


@dataclass(frozen=True)
class ExtractedPayload:
    """Product fields read from a live page and checked locally."""

    product_name: str
    current_price: Decimal
    currency_code: str
    product_image_url: str | None = None

    def to_fields(self) -> ProductFields:
        """Map the payload onto the stored product attributes."""
        return ProductFields(
            name=self.product_name,
            current_price=self.current_price,
            currency=self.currency_code,
            image_url=self.product_image_url,
        )
