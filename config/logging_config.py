"""Logging setup for the reader: a main log plus a backend request log.

The pager owns the terminal while reading, so the CLI normally runs with
console output off and everything goes to rotating files under ``log_dir``.
"""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

MAIN_LOG_NAME = "novelreader.log"
API_LOG_NAME = "api_calls.log"
API_LOGGER = "tools.api_client"

# httpx logs every request at INFO; the API client already records them
NOISY_LOGGERS = ("httpx", "httpcore")


def _rotating_handler(
    path: Path,
    level: int,
    formatter: logging.Formatter,
    max_bytes: int,
    backup_count: int,
) -> RotatingFileHandler:
    handler = RotatingFileHandler(
        str(path),
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def setup_logging(
    level: int = logging.INFO,
    log_dir: Optional[str | Path] = None,
    console_enabled: bool = True,
    max_bytes: int = 5 * 1024 * 1024,
    backup_count: int = 3,
) -> None:
    """Configure reader logging.

    Args:
        level: Level for the root logger and the main log.
        log_dir: Directory for log files. Defaults to ./data/logs.
        console_enabled: Also log to stderr. Off while the pager is drawing.
        max_bytes: Rotate a log file once it reaches this size.
        backup_count: Rotated files kept per log.
    """
    log_dir = Path(log_dir or "./data/logs")
    log_dir.mkdir(parents=True, exist_ok=True)
    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    if console_enabled:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(max(level, logging.WARNING))
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    root_logger.addHandler(
        _rotating_handler(log_dir / MAIN_LOG_NAME, level, formatter, max_bytes, backup_count)
    )

    # Request traces always go to their own file, even when the main log is at INFO
    api_logger = logging.getLogger(API_LOGGER)
    api_logger.handlers.clear()
    api_logger.setLevel(logging.DEBUG)
    api_logger.addHandler(
        _rotating_handler(log_dir / API_LOG_NAME, logging.DEBUG, formatter, max_bytes, backup_count)
    )

    noisy_level = logging.DEBUG if level <= logging.DEBUG else logging.WARNING
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(noisy_level)

    logging.getLogger(__name__).debug("Logging initialized: level=%s, dir=%s", level, log_dir)
