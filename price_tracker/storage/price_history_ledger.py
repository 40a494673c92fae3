# price_tracker/storage/price_history_ledger.py

"""Read side of the append-only price history."""

import logging

from price_tracker.models.price_history import PriceHistoryRecord
from price_tracker.storage.base_store import BaseStore

logger = logging.getLogger("price_tracker.history")


class PriceHistoryLedger:
    """Chronological price timeline queries over a store."""

    def __init__(self, store: BaseStore) -> None:
        self._store = store

    def history_for(
        self, product_id: int,
    ) -> list[PriceHistoryRecord]:
        """Return all price records for a product, oldest first.

        Unknown products and products without history yield ``[]``.
        """
        return list(self._store.list_history(product_id))

    def trend_summary(
        self, product_id: int,
    ) -> dict[str, object] | None:
        """Compute min / max / first / latest price for a product."""
        records = self.history_for(product_id)
        if not records:
            return None
        prices = [r.price for r in records]
        currencies = {r.currency for r in records}
        if len(currencies) > 1:
            logger.warning(
                "Product %d has mixed currencies in history: %s",
                product_id,
                ", ".join(sorted(currencies)),
            )
        return {
            "min": min(prices),
            "max": max(prices),
            "first": prices[0],
            "latest": prices[-1],
            "currency": records[-1].currency,
            "count": len(records),
        }
