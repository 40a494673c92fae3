# price_tracker/models/ingest_result.py

"""Tagged outcome of a single ingestion call."""

from dataclasses import dataclass

from price_tracker.models.errors import PriceTrackerError
from price_tracker.models.product import Product


@dataclass(frozen=True)
class Created:
    """A new product was stored and its first price recorded."""

    product: Product
    history_recorded: bool = True

    @property
    def message(self) -> str:
        return "Product added successfully!"


@dataclass(frozen=True)
class Updated:
    """An existing product was refreshed with the latest page data."""

    product: Product
    history_recorded: bool

    @property
    def message(self) -> str:
        return "Product updated with latest price!"


@dataclass(frozen=True)
class Failed:
    """Ingestion stopped; ``reason`` says why and what to do next."""

    reason: PriceTrackerError

    @property
    def message(self) -> str:
        return self.reason.detail


IngestResult = Created | Updated | Failed
