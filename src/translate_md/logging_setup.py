"""
Logging configuration for translate-md.

Console output goes through rich; the optional log file rotates by size.
"""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler

from rich.console import Console
from rich.logging import RichHandler

from translate_md.config import LoggingConfig

PACKAGE_LOGGER = "translate_md"


def configure_logging(
    config: LoggingConfig,
    console: Console | None = None,
) -> logging.Logger:
    """
    Configure the package logger.

    Args:
        config: Logging section of the settings.
        console: Rich console to log to. If None, rich creates one on stderr.

    Returns:
        The configured package logger.
    """
    level = getattr(logging, config.level, logging.INFO)

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)

    # Remove existing handlers to avoid duplicates on repeated calls
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console_handler = RichHandler(
        console=console,
        show_path=False,
        rich_tracebacks=True,
        markup=False,
    )
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(console_handler)

    if config.file is not None:
        log_path = config.file.expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=config.max_file_size_mb * 1024 * 1024,
            backupCount=config.backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(config.format))
        logger.addHandler(file_handler)

    # Prevent duplicate records through the root logger
    logger.propagate = False

    return logger
