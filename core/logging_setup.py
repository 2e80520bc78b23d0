"""Logging configuration for the API process."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

APP_LOGGER_PREFIXES = ("api", "core", "patterns", "verticals")


class _NoiseFilter(logging.Filter):
    """
    Keep application logs, quiet the rest:
    - allow every record from our own packages
    - sqlalchemy engine chatter only at WARNING+
    - any other third party only at ERROR+
    """

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name

        if name.split(".", 1)[0] in APP_LOGGER_PREFIXES:
            return True

        if name.startswith("sqlalchemy."):
            return record.levelno >= logging.WARNING

        # uvicorn access/error logs are useful when running the server.
        if name.startswith("uvicorn"):
            return record.levelno >= logging.INFO

        return record.levelno >= logging.ERROR


def setup_logging(
    *,
    level: int | str = logging.INFO,
    log_file: str | Path | None = None,
) -> None:
    """
    Configure the root logger with:
    - Stream handler on stderr, filtered
    - Optional file handler receiving everything at DEBUG

    Safe to call more than once; previous handlers are replaced.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    # Remove any pre-existing handlers to avoid duplicates.
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    ch = logging.StreamHandler(sys.stderr)
    ch.setLevel(level)
    ch.setFormatter(fmt)
    ch.addFilter(_NoiseFilter())
    root.addHandler(ch)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(str(path), encoding="utf-8")
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(fmt)
        root.addHandler(fh)

    logging.captureWarnings(True)
