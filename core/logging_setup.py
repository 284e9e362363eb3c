"""Process-wide logging configuration."""

from __future__ import annotations

import logging
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
ACCESS_LOGGER = "api.access"

# (file prefix, minimum level) for the rotating per-level log files
FILE_LEVELS = [
    ("info", logging.INFO),
    ("warn", logging.WARNING),
    ("error", logging.ERROR),
]
RETENTION_DAYS = 14


def _is_access(record: logging.LogRecord) -> bool:
    return record.name == ACCESS_LOGGER or record.name.startswith(ACCESS_LOGGER + ".")


def _daily_file(path: Path, level: int) -> TimedRotatingFileHandler:
    handler = TimedRotatingFileHandler(
        path,
        when="midnight",
        backupCount=RETENTION_DAYS,
        encoding="utf-8",
    )
    handler.setLevel(level)
    return handler


def setup_logging(level: str | int = "INFO", log_dir: str = "") -> None:
    """Configure the root logger for console output and optional daily files.

    Request access lines go to ``http.log`` only; the per-level files carry
    everything else.

    Args:
        level: Root level name or number
        log_dir: Directory for rotating log files; empty keeps console only
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    handlers: list[logging.Handler] = [logging.StreamHandler()]

    if log_dir:
        path = Path(log_dir)
        path.mkdir(parents=True, exist_ok=True)
        for prefix, file_level in FILE_LEVELS:
            handler = _daily_file(path / f"{prefix}.log", file_level)
            handler.addFilter(lambda record: not _is_access(record))
            handlers.append(handler)

        http_handler = _daily_file(path / "http.log", logging.INFO)
        http_handler.addFilter(_is_access)
        handlers.append(http_handler)

    formatter = logging.Formatter(LOG_FORMAT)
    for handler in handlers:
        handler.setFormatter(formatter)

    logging.basicConfig(level=level, handlers=handlers, force=True)
