# price_tracker/config/settings.py

"""Central configuration for the price_tracker engine."""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Central configuration for the price_tracker engine."""

    # --- Extraction service ---
    FIRECRAWL_API_KEY: str = os.getenv("FIRECRAWL_API_KEY", "")
    FIRECRAWL_API_URL: str = os.getenv(
        "FIRECRAWL_API_URL", "https://api.firecrawl.dev"
    )
    EXTRACTION_TIMEOUT: int = int(
        os.getenv("EXTRACTION_TIMEOUT", "60")
    )                                   # Seconds before extraction gives up
    DEFAULT_HEADERS: dict[str, str] = {
        "Accept": "application/json",
        "Content-Type": "application/json",
        "User-Agent": "price_tracker/0.1",
    }

    # --- Canonicalization ---
    # Query params that never affect which product a URL points at
    TRACKING_PARAMS: list[str] = [
        # Marketing attribution
        "utm_source", "utm_medium", "utm_campaign", "utm_content",
        "utm_term",
        # Click identifiers
        "fbclid", "gclid", "msclkid",
        # Amazon referral / session
        "ref", "dib", "dib_tag", "keywords", "qid", "sprefix", "sr",
        "aref", "sp_csd", "psc",
        # Flipkart
        "pid", "lid", "marketplace", "q", "store", "srno", "otracker",
        "otracker1", "fm", "iid", "ppt", "ppn", "ssid", "qH",
        # eBay
        "epid", "_trkparms", "_trksid", "hash",
        # Navigation
        "page", "sort", "filter", "search", "category", "variant",
    ]

    # --- Paths ---
    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent
    EXTRACTION_CONFIG_PATH: Path = (
        BASE_DIR / "price_tracker" / "config" / "extraction.json"
    )
    DATA_DIR: Path = BASE_DIR / "data"
    PRICE_DB_PATH: Path = Path(
        os.getenv("PRICE_DB_PATH", str(DATA_DIR / "price_tracker.db"))
    )
    LOGS_DIR: Path = BASE_DIR / "logs"

    # --- Logging ---
    LOG_LEVEL: str = os.getenv("PRICE_TRACKER_LOG_LEVEL", "WARNING")
    LOG_RETENTION: int = int(
        os.getenv("PRICE_TRACKER_LOG_RETENTION", "30")
    )                                   # Newest log files kept on disk
