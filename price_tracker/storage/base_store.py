# price_tracker/storage/base_store.py

"""Abstract storage interface consumed by the ingestion pipeline."""

from abc import ABC, abstractmethod
from datetime import datetime
from decimal import Decimal

from price_tracker.models.price_history import PriceHistoryRecord
from price_tracker.models.product import Product, ProductFields


class BaseStore(ABC):
    """Narrow product + price history store.

    Every call is atomic; ``record_observation`` covers both tables in
    one transaction.  Timestamps are stored in UTC.  Implementations
    raise :class:`~price_tracker.models.errors.StoreError` for any
    failure of the underlying engine.
    """

    @abstractmethod
    def find_product(
        self, owner_id: str, canonical_url: str,
    ) -> Product | None:
        """Return the product for this identity, if any."""
        ...

    @abstractmethod
    def get_product(self, product_id: int) -> Product | None:
        """Return a product by its store id, if any."""
        ...

    @abstractmethod
    def upsert_product(
        self,
        owner_id: str,
        canonical_url: str,
        fields: ProductFields,
        now: datetime | None = None,
    ) -> Product:
        """Insert or overwrite the product keyed by (owner, URL)."""
        ...

    @abstractmethod
    def record_observation(
        self,
        owner_id: str,
        canonical_url: str,
        fields: ProductFields,
        record_history: bool,
        now: datetime | None = None,
    ) -> tuple[Product, PriceHistoryRecord | None]:
        """Upsert the product and, if asked, append its price as one unit.

        Either both writes land or neither does.
        """
        ...

    @abstractmethod
    def insert_history(
        self,
        product_id: int,
        price: Decimal,
        currency: str,
        checked_at: datetime | None = None,
    ) -> PriceHistoryRecord:
        """Append one price observation."""
        ...

    @abstractmethod
    def list_history(
        self, product_id: int,
    ) -> list[PriceHistoryRecord]:
        """Return all observations for a product, oldest first."""
        ...

    @abstractmethod
    def delete_product(self, product_id: int) -> bool:
        """Delete a product and its history. Returns False if unknown."""
        ...

    @abstractmethod
    def close(self) -> None:
        """Release the underlying connection."""
        ...
