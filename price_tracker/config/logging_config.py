# price_tracker/config/logging_config.py

"""Per-command logging for price_tracker.

Every CLI invocation writes one file under ``Settings.LOGS_DIR`` named
after the command and its start time (``track_20260214_153045.log``).
Each line carries the command, so logs from a cron job that alternates
``track`` and ``history`` stay distinguishable after they are merged.
Only the newest ``Settings.LOG_RETENTION`` files are kept.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path

from price_tracker.config.settings import Settings

_FILE_FORMAT = (
    "%(asctime)s %(levelname)-8s [%(command)s] %(name)s "
    "(%(funcName)s:%(lineno)d): %(message)s"
)
_CONSOLE_FORMAT = "%(levelname)s [%(command)s] %(message)s"
_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"


class CommandFilter(logging.Filter):
    """Stamp every record with the CLI command being run."""

    def __init__(self, command: str) -> None:
        super().__init__()
        self.command = command

    def filter(self, record: logging.LogRecord) -> bool:
        record.command = self.command
        return True


def _console_level() -> int:
    level = logging.getLevelName(Settings.LOG_LEVEL.upper())
    return level if isinstance(level, int) else logging.WARNING


def _prune_logs(logs_dir: Path, keep: int) -> list[Path]:
    """Delete all but the newest *keep* log files; return the removed ones."""
    logs = sorted(
        logs_dir.glob("*.log"),
        key=lambda p: p.stat().st_mtime,
        reverse=True,
    )
    stale = logs[keep:] if keep > 0 else []
    for path in stale:
        path.unlink(missing_ok=True)
    return stale


def setup_logging(command: str | None = None) -> Path:
    """Attach file and stderr handlers to the ``price_tracker`` logger.

    Calling it again is a no-op that returns the file already in use.
    """
    root_logger = logging.getLogger("price_tracker")
    root_logger.setLevel(logging.DEBUG)

    for handler in root_logger.handlers:
        if isinstance(handler, logging.FileHandler):
            return Path(handler.baseFilename)

    logs_dir: Path = Settings.LOGS_DIR
    logs_dir.mkdir(parents=True, exist_ok=True)
    name = command or "run"
    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = logs_dir / f"{name}_{stamp}.log"

    context = CommandFilter(name)

    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.addFilter(context)
    file_handler.setFormatter(
        logging.Formatter(_FILE_FORMAT, datefmt=_DATE_FORMAT)
    )

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(_console_level())
    console_handler.addFilter(context)
    console_handler.setFormatter(logging.Formatter(_CONSOLE_FORMAT))

    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)

    removed = _prune_logs(logs_dir, Settings.LOG_RETENTION)
    root_logger.debug(
        "Logging to %s (console %s, pruned %d old logs)",
        log_file,
        logging.getLevelName(console_handler.level),
        len(removed),
    )
    return log_file
