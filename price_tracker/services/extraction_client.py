# price_tracker/services/extraction_client.py

"""Client for the external content-extraction service (Firecrawl)."""

import json
import logging
from decimal import Decimal
from pathlib import Path
from typing import Any

from curl_cffi import requests as curl_requests

from price_tracker.config.settings import Settings
from price_tracker.filters.payload_validator import validate_payload
from price_tracker.models.errors import ExtractionError
from price_tracker.models.extracted_payload import ExtractedPayload

logger = logging.getLogger("price_tracker.extraction")


def load_extraction_config(
    path: Path | None = None,
) -> dict[str, Any]:
    """Load the extraction prompt and output schema from JSON."""
    config_path = path or Settings.EXTRACTION_CONFIG_PATH
    with open(config_path, encoding="utf-8") as f:
        config: dict[str, Any] = json.load(f)
    return config


class ExtractionClient:
    """Reads structured product data from a live page.

    Issues exactly one request per :meth:`extract` call.  Retry policy,
    if any, belongs to the caller.
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        session: curl_requests.Session | None = None,
        config: dict[str, Any] | None = None,
    ) -> None:
        self.settings = Settings()
        self._api_key = (
            api_key if api_key is not None
            else self.settings.FIRECRAWL_API_KEY
        )
        self._endpoint = (
            (base_url or self.settings.FIRECRAWL_API_URL).rstrip("/")
            + "/v1/scrape"
        )
        self._timeout = (
            timeout if timeout is not None
            else self.settings.EXTRACTION_TIMEOUT
        )
        self.session = session or curl_requests.Session()
        self._config = config or load_extraction_config()

    def close(self) -> None:
        """Close the underlying HTTP session."""
        self.session.close()

    def _build_request(self, url: str) -> dict[str, Any]:
        return {
            "url": url,
            "formats": self._config.get("formats", ["extract"]),
            "onlyMainContent": self._config.get(
                "onlyMainContent", False
            ),
            "extract": {
                "prompt": self._config["prompt"],
                "schema": self._config["schema"],
            },
        }

    def _post(self, url: str) -> dict[str, Any]:
        """Send the scrape request and return the decoded body."""
        headers: dict[str, str] = {
            **self.settings.DEFAULT_HEADERS,
            "Authorization": f"Bearer {self._api_key}",
        }
        try:
            resp = self.session.post(
                self._endpoint,
                headers=headers,
                json=self._build_request(url),
                timeout=self._timeout,
            )
        except Exception as exc:
            logger.warning(
                "Extraction request failed for %s: %s",
                url,
                exc,
                exc_info=True,
            )
            raise ExtractionError(
                f"Extraction service unreachable: {exc}", cause=exc,
            ) from exc

        try:
            body: Any = json.loads(resp.text, parse_float=Decimal)
        except ValueError as exc:
            raise ExtractionError(
                f"Extraction service returned non-JSON body "
                f"(HTTP {resp.status_code})",
                cause=exc,
            ) from exc

        if not 200 <= resp.status_code < 300:
            detail = (
                body.get("error") if isinstance(body, dict) else None
            )
            logger.warning(
                "Extraction service HTTP %d for %s: %s",
                resp.status_code,
                url,
                detail,
            )
            raise ExtractionError(
                f"Extraction service returned HTTP "
                f"{resp.status_code}"
                + (f": {detail}" if detail else "")
            )
        if not isinstance(body, dict):
            raise ExtractionError(
                "Extraction service returned an unexpected body"
            )
        if body.get("success") is False:
            raise ExtractionError(
                f"Extraction failed: {body.get('error', 'unknown error')}"
            )
        return body

    def extract(self, canonical_url: str) -> ExtractedPayload:
        """Extract and validate product data for *canonical_url*.

        Raises:
            ExtractionError: on transport failure, a non-success
                response, an absent payload, or a payload failing
                local validation (via its subtypes).
        """
        logger.debug("Extracting product data from %s", canonical_url)
        body = self._post(canonical_url)

        data = body.get("data")
        extracted = (
            data.get("extract") if isinstance(data, dict) else None
        )
        if not isinstance(extracted, dict):
            logger.warning(
                "No extract data returned for %s", canonical_url,
            )
            raise ExtractionError(
                "No extract data returned from the extraction service"
            )

        try:
            payload = validate_payload(extracted)
        except ExtractionError as exc:
            logger.warning(
                "Extracted data for %s failed validation: %s",
                canonical_url,
                exc,
            )
            raise

        logger.info(
            "Extracted %r at %s %s from %s",
            payload.product_name,
            payload.current_price,
            payload.currency_code,
            canonical_url,
        )
        return payload
