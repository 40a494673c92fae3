# price_tracker/cli/runner.py

"""Headless CLI commands; this module is the process bootstrap."""

import json
import logging
import sys
from decimal import Decimal
from pathlib import Path

from rich.console import Console
from rich.table import Table

from price_tracker.filters.url_canonicalizer import canonicalize
from price_tracker.models.errors import ExtractionError, StoreError
from price_tracker.models.ingest_result import Failed, Updated
from price_tracker.models.price_history import PriceHistoryRecord
from price_tracker.services.extraction_client import ExtractionClient
from price_tracker.services.ingestion_pipeline import IngestionPipeline
from price_tracker.storage.price_history_ledger import PriceHistoryLedger
from price_tracker.storage.product_store import ProductStore

logger = logging.getLogger("price_tracker.cli")

# Stderr console for status messages so stdout stays clean for JSON
_err = Console(stderr=True)


def _records_to_dicts(
    records: list[PriceHistoryRecord],
) -> list[dict[str, object]]:
    """Serialise history records to plain dicts for JSON output."""
    return [
        {
            "price": str(r.price),
            "currency": r.currency,
            "checked_at": r.checked_at.isoformat(),
        }
        for r in records
    ]


def _summary_to_dict(
    summary: dict[str, object] | None,
) -> dict[str, object] | None:
    """Stringify the Decimal fields of a trend summary for JSON."""
    if summary is None:
        return None
    return {
        key: str(value) if isinstance(value, Decimal) else value
        for key, value in summary.items()
    }


def _print_history_table(
    product_name: str, records: list[PriceHistoryRecord],
) -> None:
    """Render a Rich table of the price timeline to stdout."""
    table = Table(
        title=f"Price History: {product_name}",
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("#", style="dim", width=4)
    table.add_column("Checked At")
    table.add_column("Price", justify="right", style="green")
    table.add_column("Change", justify="right")

    previous: Decimal | None = None
    for idx, r in enumerate(records, 1):
        if previous is None:
            change = "—"
        elif r.price < previous:
            change = f"[green]▼ {previous - r.price:,.2f}[/green]"
        elif r.price > previous:
            change = f"[red]▲ {r.price - previous:,.2f}[/red]"
        else:
            change = "="
        table.add_row(
            str(idx),
            r.checked_at.strftime("%Y-%m-%d %H:%M:%S"),
            f"{r.currency} {r.price:,.2f}",
            change,
        )
        previous = r.price

    Console().print(table)


def run_track(
    owner_id: str | None,
    raw_url: str,
    db_path: Path | None = None,
    timeout: float | None = None,
) -> int:
    """Ingest one URL for an owner and return an exit code."""
    store: ProductStore | None = None
    client: ExtractionClient | None = None
    try:
        store = ProductStore(db_path)
        client = ExtractionClient(timeout=timeout)
        pipeline = IngestionPipeline(store, client)
        _err.print(f"[bold]Tracking:[/bold] {raw_url}")
        result = pipeline.ingest(owner_id, raw_url)
    except StoreError as exc:
        logger.error("Cannot open product store: %s", exc, exc_info=True)
        _err.print(f"[red]{exc.detail}[/red]")
        return 1
    finally:
        if client is not None:
            client.close()
        if store is not None:
            store.close()

    if isinstance(result, Failed):
        _err.print(f"[red]{result.message}[/red]")
        return 1

    product = result.product
    _err.print(f"[green]✓ {result.message}[/green]")
    if isinstance(result, Updated) and not result.history_recorded:
        _err.print("[dim]Price unchanged, no history point added.[/dim]")
    else:
        _err.print("[dim]Price history point recorded.[/dim]")
    json.dump(
        {
            "id": product.id,
            "name": product.name,
            "url": product.canonical_url,
            "current_price": str(product.current_price),
            "currency": product.currency,
            "image_url": product.image_url,
        },
        sys.stdout,
        ensure_ascii=False,
        indent=2,
    )
    sys.stdout.write("\n")
    return 0


def run_history(
    product_id: int,
    output_format: str = "table",
    db_path: Path | None = None,
) -> int:
    """Print the price timeline and trend summary for a product."""
    store: ProductStore | None = None
    try:
        store = ProductStore(db_path)
        product = store.get_product(product_id)
        if product is None:
            _err.print(f"[red]Unknown product id: {product_id}[/red]")
            return 1
        ledger = PriceHistoryLedger(store)
        records = ledger.history_for(product_id)
        summary = ledger.trend_summary(product_id)
    except StoreError as exc:
        logger.error("History query failed: %s", exc, exc_info=True)
        _err.print(f"[red]{exc.detail}[/red]")
        return 1
    finally:
        if store is not None:
            store.close()

    if output_format == "json":
        json.dump(
            {
                "product_id": product.id,
                "name": product.name,
                "history": _records_to_dicts(records),
                "summary": _summary_to_dict(summary),
            },
            sys.stdout,
            ensure_ascii=False,
            indent=2,
        )
        sys.stdout.write("\n")
        return 0

    if not records:
        _err.print("[yellow]No price history recorded yet.[/yellow]")
        return 0
    _print_history_table(product.name, records)
    if summary:
        _err.print(
            f"[dim]{summary['count']} points, "
            f"low {summary['currency']} {summary['min']:,.2f}, "
            f"high {summary['currency']} {summary['max']:,.2f}[/dim]"
        )
    return 0


def run_scrape(raw_url: str, timeout: float | None = None) -> int:
    """Run extraction only and print the validated payload."""
    url = canonicalize(raw_url)
    client = ExtractionClient(timeout=timeout)
    _err.print(f"[bold]Scraping:[/bold] {url}")
    try:
        payload = client.extract(url)
    except ExtractionError as exc:
        _err.print(f"[red]Scrape failed: {exc.detail}[/red]")
        return 2
    finally:
        client.close()

    json.dump(
        {
            "productName": payload.product_name,
            "currentPrice": str(payload.current_price),
            "currencyCode": payload.currency_code,
            "productImageUrl": payload.product_image_url,
        },
        sys.stdout,
        ensure_ascii=False,
        indent=2,
    )
    sys.stdout.write("\n")
    return 0


def run_untrack(product_id: int, db_path: Path | None = None) -> int:
    """Delete a tracked product and its price history."""
    store: ProductStore | None = None
    try:
        store = ProductStore(db_path)
        deleted = store.delete_product(product_id)
    except StoreError as exc:
        logger.error("Delete failed: %s", exc, exc_info=True)
        _err.print(f"[red]{exc.detail}[/red]")
        return 1
    finally:
        if store is not None:
            store.close()

    if not deleted:
        _err.print(f"[yellow]Unknown product id: {product_id}[/yellow]")
        return 1
    _err.print(f"[green]✓ Product {product_id} removed[/green]")
    return 0
