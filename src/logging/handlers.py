# src/logging/handlers.py — v2
"""Rotating file handlers: by size ("10MB") or by day ("daily")."""

from __future__ import annotations

import logging
import re
from logging.handlers import RotatingFileHandler, TimedRotatingFileHandler
from pathlib import Path

_SIZE = re.compile(r"^(\d+)\s*(B|KB|MB|GB)?$", re.IGNORECASE)
_MULTIPLIERS = {"B": 1, "KB": 1024, "MB": 1024**2, "GB": 1024**3}


def parse_size(size_str: str) -> int:
    """Parse '10MB', '512KB' or a bare byte count into bytes.

    Raises:
        ValueError: On an unrecognized format.
    """
    match = _SIZE.match(size_str.strip())
    if not match:
        raise ValueError(f"Invalid size format: {size_str!r}. Use e.g. '10MB'.")
    unit = (match.group(2) or "B").upper()
    return int(match.group(1)) * _MULTIPLIERS[unit]


def create_file_handler(
    log_file: str | Path,
    rotation: str = "10MB",
    retention: int = 30,
) -> logging.Handler:
    """Create the log file handler, creating parent directories.

    With ``rotation="daily"`` files roll at midnight and ``retention`` is a
    number of days; otherwise it is the number of size-rotated backups.
    """
    path = Path(log_file).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)

    if rotation.strip().lower() in ("daily", "midnight"):
        return TimedRotatingFileHandler(
            filename=str(path),
            when="midnight",
            backupCount=retention,
            encoding="utf-8",
            utc=True,
        )
    return RotatingFileHandler(
        filename=str(path),
        maxBytes=parse_size(rotation),
        backupCount=retention,
        encoding="utf-8",
    )
