# tests/conftest.py

"""Shared pytest fixtures for all price_tracker tests."""

from collections.abc import Generator
from pathlib import Path

import pytest

from price_tracker.config.settings import Settings


@pytest.fixture(autouse=True)
def isolated_paths(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch,
) -> Generator[None, None, None]:
    """Point the DB and log directory at a per-test temp dir."""
    monkeypatch.setattr(Settings, "LOGS_DIR", tmp_path / "logs")
    monkeypatch.setattr(Settings, "DATA_DIR", tmp_path / "data")
    monkeypatch.setattr(
        Settings, "PRICE_DB_PATH", tmp_path / "data" / "test.db",
    )
    monkeypatch.setattr(Settings, "FIRECRAWL_API_KEY", "fc-test-key")
    yield
