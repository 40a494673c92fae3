# price_tracker/storage/product_store.py

"""SQLite-backed product and price history store."""

import logging
import sqlite3
from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path

from price_tracker.config.settings import Settings
from price_tracker.models.errors import StoreError
from price_tracker.models.price_history import PriceHistoryRecord
from price_tracker.models.product import Product, ProductFields
from price_tracker.storage.base_store import BaseStore

logger = logging.getLogger("price_tracker.store")

_SCHEMA = """\
CREATE TABLE IF NOT EXISTS products (
    id            INTEGER PRIMARY KEY AUTOINCREMENT,
    owner_id      TEXT    NOT NULL,
    url           TEXT    NOT NULL,
    name          TEXT    NOT NULL,
    current_price TEXT    NOT NULL,
    currency      TEXT    NOT NULL,
    image_url     TEXT,
    created_at    TEXT    NOT NULL,
    updated_at    TEXT    NOT NULL,
    UNIQUE (owner_id, url)
);

CREATE TABLE IF NOT EXISTS price_history (
    id         INTEGER PRIMARY KEY AUTOINCREMENT,
    product_id INTEGER NOT NULL
               REFERENCES products(id) ON DELETE CASCADE,
    price      TEXT    NOT NULL,
    currency   TEXT    NOT NULL,
    checked_at TEXT    NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_history_product_date
    ON price_history(product_id, checked_at);
"""

_PRODUCT_COLUMNS = (
    "id, owner_id, url, name, current_price, currency, "
    "image_url, created_at, updated_at"
)

_HISTORY_COLUMNS = "id, product_id, price, currency, checked_at"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _to_utc_iso(moment: datetime | None) -> str:
    """Serialize a timestamp as UTC ISO text; naive values count as UTC.

    A single fixed offset keeps text order equal to time order.
    """
    if moment is None:
        moment = _utcnow()
    elif moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).isoformat()


def _row_to_product(row: sqlite3.Row | tuple) -> Product:
    return Product(
        id=row[0],
        owner_id=row[1],
        canonical_url=row[2],
        name=row[3],
        current_price=Decimal(row[4]),
        currency=row[5],
        image_url=row[6],
        created_at=datetime.fromisoformat(row[7]),
        updated_at=datetime.fromisoformat(row[8]),
    )


def _row_to_record(row: sqlite3.Row | tuple) -> PriceHistoryRecord:
    return PriceHistoryRecord(
        id=row[0],
        product_id=row[1],
        price=Decimal(row[2]),
        currency=row[3],
        checked_at=datetime.fromisoformat(row[4]),
    )


class ProductStore(BaseStore):
    """SQLite store keyed by the unique (owner_id, url) pair.

    Prices are kept as decimal TEXT so that equality checks on
    reloaded values are exact.
    """

    def __init__(
        self, db_path: Path | str | None = None,
    ) -> None:
        path = Path(db_path) if db_path else Settings.PRICE_DB_PATH
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            self._conn = sqlite3.connect(
                str(path), check_same_thread=False,
            )
            self._conn.execute("PRAGMA journal_mode=WAL")
            self._conn.execute("PRAGMA foreign_keys=ON")
            self._conn.executescript(_SCHEMA)
        except (sqlite3.Error, OSError) as exc:
            raise StoreError(
                f"Cannot open database at {path}: {exc}", cause=exc,
            ) from exc
        logger.debug("ProductStore opened at %s", path)

    def close(self) -> None:
        """Close the database connection."""
        self._conn.close()

    # ── Products ─────────────────────────────────────────

    def find_product(
        self, owner_id: str, canonical_url: str,
    ) -> Product | None:
        try:
            row = self._conn.execute(
                f"SELECT {_PRODUCT_COLUMNS} FROM products "
                "WHERE owner_id = ? AND url = ?",
                (owner_id, canonical_url),
            ).fetchone()
        except sqlite3.Error as exc:
            raise StoreError(
                f"Product lookup failed: {exc}", cause=exc,
            ) from exc
        return _row_to_product(row) if row else None

    def get_product(self, product_id: int) -> Product | None:
        try:
            row = self._conn.execute(
                f"SELECT {_PRODUCT_COLUMNS} FROM products "
                "WHERE id = ?",
                (product_id,),
            ).fetchone()
        except sqlite3.Error as exc:
            raise StoreError(
                f"Product lookup failed: {exc}", cause=exc,
            ) from exc
        return _row_to_product(row) if row else None

    # ── Row writers (caller owns the transaction) ────────

    def _upsert_row(
        self,
        owner_id: str,
        canonical_url: str,
        fields: ProductFields,
        ts: str,
    ) -> Product:
        row = self._conn.execute(
            "INSERT INTO products (owner_id, url, name, "
            "current_price, currency, image_url, created_at, "
            "updated_at) VALUES (?, ?, ?, ?, ?, ?, ?, ?) "
            "ON CONFLICT(owner_id, url) DO UPDATE SET "
            "name=excluded.name, "
            "current_price=excluded.current_price, "
            "currency=excluded.currency, "
            "image_url=excluded.image_url, "
            "updated_at=excluded.updated_at "
            f"RETURNING {_PRODUCT_COLUMNS}",
            (
                owner_id,
                canonical_url,
                fields.name,
                str(fields.current_price),
                fields.currency,
                fields.image_url,
                ts,
                ts,
            ),
        ).fetchall()[0]
        return _row_to_product(row)

    def _insert_history_row(
        self,
        product_id: int,
        price: Decimal,
        currency: str,
        ts: str,
    ) -> PriceHistoryRecord:
        row = self._conn.execute(
            "INSERT INTO price_history "
            "(product_id, price, currency, checked_at) "
            "VALUES (?, ?, ?, ?) "
            f"RETURNING {_HISTORY_COLUMNS}",
            (product_id, str(price), currency, ts),
        ).fetchall()[0]
        return _row_to_record(row)

    # ── Product writes ───────────────────────────────────

    def upsert_product(
        self,
        owner_id: str,
        canonical_url: str,
        fields: ProductFields,
        now: datetime | None = None,
    ) -> Product:
        """Insert or overwrite the product in one statement.

        ``created_at`` is only written on insert; every other
        attribute is replaced on conflict.
        """
        ts = _to_utc_iso(now)
        try:
            product = self._upsert_row(
                owner_id, canonical_url, fields, ts,
            )
            self._conn.commit()
        except sqlite3.Error as exc:
            self._conn.rollback()
            raise StoreError(
                f"Product upsert failed: {exc}", cause=exc,
            ) from exc
        logger.debug(
            "Upserted product %d (%s) for owner %s",
            product.id,
            canonical_url,
            owner_id,
        )
        return product

    def record_observation(
        self,
        owner_id: str,
        canonical_url: str,
        fields: ProductFields,
        record_history: bool,
        now: datetime | None = None,
    ) -> tuple[Product, PriceHistoryRecord | None]:
        """Upsert the product and optionally append history, atomically.

        Both writes share one transaction: if the history insert fails
        the product keeps its previous price.
        """
        ts = _to_utc_iso(now)
        try:
            product = self._upsert_row(
                owner_id, canonical_url, fields, ts,
            )
            record = (
                self._insert_history_row(
                    product.id,
                    fields.current_price,
                    fields.currency,
                    ts,
                )
                if record_history
                else None
            )
            self._conn.commit()
        except sqlite3.Error as exc:
            self._conn.rollback()
            raise StoreError(
                f"Product save failed: {exc}", cause=exc,
            ) from exc
        logger.debug(
            "Saved product %d (%s) for owner %s, history %s",
            product.id,
            canonical_url,
            owner_id,
            "appended" if record is not None else "unchanged",
        )
        return product, record

    def delete_product(self, product_id: int) -> bool:
        try:
            cur = self._conn.execute(
                "DELETE FROM products WHERE id = ?", (product_id,),
            )
            self._conn.commit()
        except sqlite3.Error as exc:
            self._conn.rollback()
            raise StoreError(
                f"Product delete failed: {exc}", cause=exc,
            ) from exc
        deleted = cur.rowcount > 0
        if deleted:
            logger.info("Deleted product %d", product_id)
        return deleted

    # ── Price history ────────────────────────────────────

    def insert_history(
        self,
        product_id: int,
        price: Decimal,
        currency: str,
        checked_at: datetime | None = None,
    ) -> PriceHistoryRecord:
        ts = _to_utc_iso(checked_at)
        try:
            record = self._insert_history_row(
                product_id, price, currency, ts,
            )
            self._conn.commit()
        except sqlite3.Error as exc:
            self._conn.rollback()
            raise StoreError(
                f"Price history insert failed: {exc}", cause=exc,
            ) from exc
        logger.debug(
            "Recorded price %s %s for product %d at %s",
            price,
            currency,
            product_id,
            ts,
        )
        return record

    def list_history(
        self, product_id: int,
    ) -> list[PriceHistoryRecord]:
        try:
            rows = self._conn.execute(
                f"SELECT {_HISTORY_COLUMNS} FROM price_history "
                "WHERE product_id = ? "
                "ORDER BY checked_at ASC, id ASC",
                (product_id,),
            ).fetchall()
        except sqlite3.Error as exc:
            raise StoreError(
                f"Price history query failed: {exc}", cause=exc,
            ) from exc
        return [_row_to_record(r) for r in rows]
