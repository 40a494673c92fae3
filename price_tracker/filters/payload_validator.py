# price_tracker/filters/payload_validator.py

"""Local validation of extraction-service output before it is trusted."""

import logging
from decimal import Decimal
from typing import Any

from price_tracker.models.errors import (
    InvalidCurrencyError,
    InvalidPriceError,
    InvalidProductNameError,
)
from price_tracker.models.extracted_payload import ExtractedPayload

logger = logging.getLogger("price_tracker.filters")

MIN_NAME_LENGTH = 3


def _validate_name(value: Any) -> str:
    if not isinstance(value, str) or len(value.strip()) < MIN_NAME_LENGTH:
        raise InvalidProductNameError(
            f"Product name invalid: {value!r}"
        )
    return value.strip()


def _validate_price(value: Any) -> Decimal:
    """Accept real numbers only; bools and numeric strings are rejected."""
    if isinstance(value, bool) or not isinstance(
        value, (int, float, Decimal)
    ):
        raise InvalidPriceError(f"Invalid price: {value!r}")
    price = Decimal(str(value))
    if not price.is_finite() or price <= 0:
        raise InvalidPriceError(f"Invalid price: {value!r}")
    return price


def _validate_currency(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidCurrencyError(
            f"Currency code invalid: {value!r}"
        )
    return value.strip()


def _clean_image_url(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def validate_payload(raw: dict[str, Any]) -> ExtractedPayload:
    """Check required fields and types of a raw extraction payload.

    Raises the matching ``ExtractionError`` subtype on the first
    failing field; the optional image URL never fails.
    """
    payload = ExtractedPayload(
        product_name=_validate_name(raw.get("productName")),
        current_price=_validate_price(raw.get("currentPrice")),
        currency_code=_validate_currency(raw.get("currencyCode")),
        product_image_url=_clean_image_url(
            raw.get("productImageUrl")
        ),
    )
    logger.debug(
        "Validated payload: name=%r price=%s %s",
        payload.product_name,
        payload.current_price,
        payload.currency_code,
    )
    return payload
