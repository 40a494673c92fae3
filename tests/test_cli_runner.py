# tests/test_cli_runner.py

"""Tests for the headless CLI commands and argument parsing."""

import io
import json
import logging
import tempfile
import unittest
from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path
from unittest.mock import MagicMock, patch

import main as cli_main
from price_tracker.cli import runner
from price_tracker.models.errors import InvalidPriceError, StoreError
from price_tracker.models.extracted_payload import ExtractedPayload
from price_tracker.storage.product_store import ProductStore

_URL = "https://www.flipkart.com/boat/p/itm1?pid=ABC&otracker=search"
_CANONICAL = "https://www.flipkart.com/boat/p/itm1"

CLIENT_PATH = "price_tracker.cli.runner.ExtractionClient"
STORE_PATH = "price_tracker.cli.runner.ProductStore"


def _payload(price: str) -> ExtractedPayload:
    return ExtractedPayload(
        product_name="boAt Rockerz 450",
        current_price=Decimal(price),
        currency_code="INR",
    )


class TestRunTrack(unittest.TestCase):
    """run_track / run_history / run_untrack against a temp DB."""

    def setUp(self) -> None:
        self.tmp_dir = tempfile.mkdtemp()
        self.db_path = Path(self.tmp_dir) / "cli.db"
        self.client = MagicMock()

    def _track(self, owner: str | None = "user-1") -> tuple[int, str]:
        with (
            patch(CLIENT_PATH, return_value=self.client),
            patch("sys.stdout", new_callable=io.StringIO) as out,
        ):
            code = runner.run_track(owner, _URL, self.db_path)
        return code, out.getvalue()

    def test_track_creates_then_updates(self) -> None:
        self.client.extract.side_effect = [
            _payload("1499"), _payload("1299"),
        ]
        code, out = self._track()
        self.assertEqual(code, 0)
        data = json.loads(out)
        self.assertEqual(data["url"], _CANONICAL)
        self.assertEqual(data["current_price"], "1499")
        self.client.extract.assert_called_with(_CANONICAL)
        self.client.close.assert_called()

        code, out = self._track()
        self.assertEqual(code, 0)
        self.assertEqual(json.loads(out)["current_price"], "1299")

        store = ProductStore(self.db_path)
        try:
            self.assertEqual(
                len(store.list_history(data["id"])), 2,
            )
        finally:
            store.close()

    def test_track_failure_exit_code(self) -> None:
        self.client.extract.side_effect = InvalidPriceError("0")
        code, out = self._track()
        self.assertEqual(code, 1)
        self.assertEqual(out, "")

    def test_track_without_owner(self) -> None:
        code, _ = self._track(owner=None)
        self.assertEqual(code, 1)
        self.client.extract.assert_not_called()

    def test_history_json(self) -> None:
        self.client.extract.side_effect = [
            _payload("1499"), _payload("1299"),
        ]
        self._track()
        _, out = self._track()
        product_id = json.loads(out)["id"]

        with patch("sys.stdout", new_callable=io.StringIO) as hist:
            code = runner.run_history(product_id, "json", self.db_path)
        self.assertEqual(code, 0)
        data = json.loads(hist.getvalue())
        self.assertEqual(data["product_id"], product_id)
        self.assertEqual(data["name"], "boAt Rockerz 450")
        self.assertEqual(
            [(r["price"], r["currency"]) for r in data["history"]],
            [("1499", "INR"), ("1299", "INR")],
        )
        self.assertEqual(
            data["summary"],
            {
                "min": "1299",
                "max": "1499",
                "first": "1499",
                "latest": "1299",
                "currency": "INR",
                "count": 2,
            },
        )

    def test_history_json_without_records(self) -> None:
        store = ProductStore(self.db_path)
        product = store.upsert_product(
            "user-1", _CANONICAL, _payload("1499").to_fields(),
        )
        store.close()

        with patch("sys.stdout", new_callable=io.StringIO) as out:
            code = runner.run_history(product.id, "json", self.db_path)
        self.assertEqual(code, 0)
        data = json.loads(out.getvalue())
        self.assertEqual(data["history"], [])
        self.assertIsNone(data["summary"])

    def test_track_unopenable_store(self) -> None:
        with patch(
            STORE_PATH,
            side_effect=StoreError("unable to open database file"),
        ):
            code, out = self._track()
        self.assertEqual(code, 1)
        self.assertEqual(out, "")
        self.client.extract.assert_not_called()

    def test_track_closes_store_when_client_fails(self) -> None:
        store = MagicMock()
        with (
            patch(STORE_PATH, return_value=store),
            patch(CLIENT_PATH, side_effect=OSError("extraction.json")),
            self.assertRaises(OSError),
        ):
            runner.run_track("user-1", _URL, self.db_path)
        store.close.assert_called_once()

    def test_history_and_untrack_unopenable_store(self) -> None:
        with patch(
            STORE_PATH,
            side_effect=StoreError("unable to open database file"),
        ):
            self.assertEqual(runner.run_history(1, "json", self.db_path), 1)
            self.assertEqual(runner.run_untrack(1, self.db_path), 1)

    def test_history_table(self) -> None:
        store = ProductStore(self.db_path)
        product = store.upsert_product(
            "user-1", _CANONICAL, _payload("1499").to_fields(),
        )
        for day, price in [(1, "1499"), (2, "1299"), (3, "1399")]:
            store.insert_history(
                product.id,
                Decimal(price),
                "INR",
                checked_at=datetime(2026, 2, day, tzinfo=timezone.utc),
            )
        store.close()

        with patch("sys.stdout", new_callable=io.StringIO) as out:
            code = runner.run_history(product.id, "table", self.db_path)
        self.assertEqual(code, 0)
        self.assertIn("boAt Rockerz 450", out.getvalue())
        self.assertIn("1,299.00", out.getvalue())

    def test_history_unknown_product(self) -> None:
        self.assertEqual(runner.run_history(99, "json", self.db_path), 1)

    def test_untrack(self) -> None:
        self.client.extract.side_effect = [_payload("1499")]
        _, out = self._track()
        product_id = json.loads(out)["id"]
        self.assertEqual(runner.run_untrack(product_id, self.db_path), 0)
        self.assertEqual(runner.run_untrack(product_id, self.db_path), 1)


class TestRunScrape(unittest.TestCase):
    """run_scrape prints the validated payload without saving it."""

    def test_scrape_prints_payload(self) -> None:
        client = MagicMock()
        client.extract.return_value = _payload("999.50")
        with (
            patch(CLIENT_PATH, return_value=client),
            patch("sys.stdout", new_callable=io.StringIO) as out,
        ):
            code = runner.run_scrape(_URL)
        self.assertEqual(code, 0)
        client.extract.assert_called_once_with(_CANONICAL)
        data = json.loads(out.getvalue())
        self.assertEqual(data["productName"], "boAt Rockerz 450")
        self.assertEqual(data["currentPrice"], "999.50")
        self.assertIsNone(data["productImageUrl"])

    def test_scrape_failure_exit_code(self) -> None:
        client = MagicMock()
        client.extract.side_effect = InvalidPriceError("-1")
        with patch(CLIENT_PATH, return_value=client):
            self.assertEqual(runner.run_scrape(_URL), 2)
        client.close.assert_called_once()


class TestMainDispatch(unittest.TestCase):
    """main() parses arguments and routes to the runner."""

    def setUp(self) -> None:
        self.tearDown()

    def tearDown(self) -> None:
        root_logger = logging.getLogger("price_tracker")
        for handler in list(root_logger.handlers):
            handler.close()
            root_logger.removeHandler(handler)

    def test_parser_requires_command(self) -> None:
        with (
            patch("sys.stderr", new_callable=io.StringIO),
            self.assertRaises(SystemExit),
        ):
            cli_main._build_parser().parse_args([])

    def test_track_dispatch(self) -> None:
        with patch.object(
            runner, "run_track", return_value=0,
        ) as run_track:
            code = cli_main.main(
                ["--db", "x.db", "track", _URL, "--owner", "u1"],
            )
        self.assertEqual(code, 0)
        run_track.assert_called_once_with("u1", _URL, Path("x.db"), None)

    def test_log_file_named_after_command(self) -> None:
        with patch.object(runner, "run_untrack", return_value=0):
            cli_main.main(["untrack", "3"])
        handlers = logging.getLogger("price_tracker").handlers
        (file_handler,) = [
            h for h in handlers if isinstance(h, logging.FileHandler)
        ]
        self.assertTrue(
            Path(file_handler.baseFilename).name.startswith("untrack_"),
        )

    def test_history_dispatch(self) -> None:
        with patch.object(
            runner, "run_history", return_value=0,
        ) as run_history:
            cli_main.main(["history", "7", "--format", "json"])
        run_history.assert_called_once_with(7, "json", None)

    def test_scrape_and_untrack_dispatch(self) -> None:
        with (
            patch.object(runner, "run_scrape", return_value=2) as scrape,
            patch.object(runner, "run_untrack", return_value=0) as untrack,
        ):
            self.assertEqual(cli_main.main(["scrape", _URL]), 2)
            self.assertEqual(cli_main.main(["untrack", "3"]), 0)
        scrape.assert_called_once_with(_URL, None)
        untrack.assert_called_once_with(3, None)


if __name__ == "__main__":
    unittest.main()
