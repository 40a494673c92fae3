# price_tracker/services/ingestion_pipeline.py

"""Ingestion pipeline: canonicalize, extract, upsert, record history.

Concurrency note: the prior-product read that drives the history
decision is not atomic with the upsert.  Two simultaneous first
submissions for the same (owner, URL) both see "no product"; the
store's ON CONFLICT upsert still yields a single row, but the losing
request also appends a history record.  Interleaved re-checks with
different prices can likewise skip a point, leaving the last history
price different from the stored current price.  Both are accepted.

The upsert and the history append themselves commit together, so a
failed history write never leaves a new price without its record.
"""

import logging
from datetime import datetime
from typing import Protocol

from price_tracker.filters.url_canonicalizer import canonicalize
from price_tracker.models.errors import (
    ExtractionError,
    MissingURLError,
    StoreError,
    UnauthenticatedError,
)
from price_tracker.models.extracted_payload import ExtractedPayload
from price_tracker.models.ingest_result import (
    Created,
    Failed,
    IngestResult,
    Updated,
)
from price_tracker.models.price_history import PriceHistoryRecord
from price_tracker.storage.base_store import BaseStore
from price_tracker.storage.price_history_ledger import PriceHistoryLedger

logger = logging.getLogger("price_tracker.pipeline")


class Extractor(Protocol):
    """Anything that turns a canonical URL into a validated payload."""

    def extract(self, canonical_url: str) -> ExtractedPayload: ...


class IngestionPipeline:
    """Coordinates canonicalization, extraction and persistence."""

    def __init__(
        self, store: BaseStore, extractor: Extractor,
    ) -> None:
        self._store = store
        self._extractor = extractor
        self.ledger = PriceHistoryLedger(store)

    def ingest(
        self,
        owner_id: str | None,
        raw_url: str | None,
        now: datetime | None = None,
    ) -> IngestResult:
        """Track *raw_url* for *owner_id* and record price changes.

        Never raises for expected failures; they come back as
        ``Failed(reason)``.
        """
        if not raw_url or not raw_url.strip():
            logger.warning("Ingest rejected: no URL supplied")
            return Failed(MissingURLError())

        canonical_url = canonicalize(raw_url.strip())

        if not owner_id or not str(owner_id).strip():
            logger.warning(
                "Ingest rejected: no authenticated owner for %s",
                canonical_url,
            )
            return Failed(UnauthenticatedError())

        try:
            payload = self._extractor.extract(canonical_url)
        except ExtractionError as exc:
            logger.warning(
                "Ingest of %s failed at extraction: %s",
                canonical_url,
                exc,
            )
            return Failed(exc)

        try:
            return self._persist(owner_id, canonical_url, payload, now)
        except StoreError as exc:
            logger.error(
                "Ingest of %s failed at the store: %s",
                canonical_url,
                exc,
                exc_info=True,
            )
            return Failed(exc)

    def _persist(
        self,
        owner_id: str,
        canonical_url: str,
        payload: ExtractedPayload,
        now: datetime | None,
    ) -> IngestResult:
        prior = self._store.find_product(owner_id, canonical_url)

        # Exact Decimal equality: any change, however small, counts
        should_record = (
            prior is None
            or prior.current_price != payload.current_price
        )
        product, _ = self._store.record_observation(
            owner_id,
            canonical_url,
            payload.to_fields(),
            should_record,
            now=now,
        )

        if prior is None:
            logger.info(
                "Created product %d for owner %s at %s %s",
                product.id,
                owner_id,
                product.current_price,
                product.currency,
            )
            return Created(product)

        if should_record:
            logger.info(
                "Price change for product %d: %s -> %s %s",
                product.id,
                prior.current_price,
                product.current_price,
                product.currency,
            )
        else:
            logger.info(
                "Price unchanged for product %d (%s %s)",
                product.id,
                product.current_price,
                product.currency,
            )
        return Updated(product, history_recorded=should_record)

    def list_history(
        self, product_id: int,
    ) -> list[PriceHistoryRecord]:
        """Return the price timeline for a product, oldest first."""
        return self.ledger.history_for(product_id)
