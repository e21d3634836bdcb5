"""Logging configuration for the learning core."""
import logging
import sys
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import Optional, Union

from wordjungle.config import settings


def setup_logging(first_message: str = "", level: Optional[Union[int, str]] = None) -> None:
    """Configure logging for the entire application.

    Args:
        first_message: Optional banner written once the handlers are in place.
        level: Optional logging level. If None, uses LOG_LEVEL from settings.
    """
    if level is None:
        level = settings.logging.level
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())

    formatter = logging.Formatter(settings.logging.format)

    # Configure root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Remove any existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if first_message:
        root_logger.info(first_message)
    root_logger.info("Logging configured with level: %s", logging.getLevelName(level))

    # File handler with rotation if a log directory is specified
    if settings.logging.dir:
        log_dir = Path(settings.logging.dir)
        log_dir.mkdir(parents=True, exist_ok=True)

        log_file = log_dir / "wordjungle.log"
        file_handler = TimedRotatingFileHandler(
            log_file,
            when=settings.logging.rotation,
            interval=settings.logging.interval,
            backupCount=settings.logging.backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)
        root_logger.info(
            "Log file: %s (rotation: %s, interval: %d, backup_count: %d)",
            log_file,
            settings.logging.rotation,
            settings.logging.interval,
            settings.logging.backup_count,
        )

    # Set logging levels for third-party libraries
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("faker").setLevel(logging.WARNING)
