"""Logging for the CLI and the web app.

The terminal shows warnings and errors, or everything with ``--verbose``.
When a data directory is known, records at ``PHRASEBOARD_LOG_LEVEL``
(INFO when unset) also go to ``<data_dir>/.phraseboard/phraseboard.log``,
rotated at 5 MB with two backups.
"""

from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path

TERMINAL_FORMAT = "%(levelname)s | %(name)s | %(message)s"
FILE_FORMAT = "%(asctime)s | %(levelname)-7s | %(name)s | %(message)s"
FILE_DATEFMT = "%Y-%m-%d %H:%M:%S"

ROTATE_BYTES = 5 * 1024 * 1024
ROTATED_BACKUPS = 2

# SDK and HTTP client chatter stays out of both handlers
QUIET_LOGGERS = ("httpx", "httpcore", "anthropic", "openai", "multipart")


def log_path_for(data_dir: Path) -> Path:
    return data_dir / ".phraseboard" / "phraseboard.log"


def file_log_level() -> int:
    """``PHRASEBOARD_LOG_LEVEL`` as a logging level; INFO if unset or unknown."""
    level = logging.getLevelName(os.environ.get("PHRASEBOARD_LOG_LEVEL", "INFO").upper())
    return level if isinstance(level, int) else logging.INFO


def _terminal_handler(verbose: bool) -> logging.Handler:
    handler = logging.StreamHandler()
    handler.setLevel(logging.DEBUG if verbose else logging.WARNING)
    handler.setFormatter(logging.Formatter(TERMINAL_FORMAT))
    return handler


def _file_handler(data_dir: Path) -> logging.Handler:
    path = log_path_for(data_dir)
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        path, maxBytes=ROTATE_BYTES, backupCount=ROTATED_BACKUPS, encoding="utf-8"
    )
    handler.setLevel(file_log_level())
    handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=FILE_DATEFMT))
    return handler


def setup_logging(*, data_dir: Path | None = None, verbose: bool = False) -> None:
    """Install the terminal handler, plus the log file when *data_dir* is given.

    Replaces whatever handlers the root logger had, so ``phraseboard serve``
    and the app factory can both call it.
    """
    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()

    root.setLevel(logging.DEBUG)
    root.addHandler(_terminal_handler(verbose))
    if data_dir is not None:
        root.addHandler(_file_handler(data_dir))

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
