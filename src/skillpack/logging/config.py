"""
Logging configuration

- Configures the root logger
- Main log file (size-based rotation)
- error.log (ERROR/CRITICAL only, daily rotation)
- Console handler on stderr
"""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, TextIO

from .handlers import ColoredConsoleHandler, ErrorOnlyHandler


def setup_logging(
    log_dir: Optional[Path] = None,
    log_level: str = "WARNING",
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    log_file_prefix: str = "skillpack",
    log_max_size_mb: int = 10,
    log_backup_count: int = 5,
    log_to_console: bool = True,
    log_to_file: bool = False,
    stream: Optional[TextIO] = None,
) -> logging.Logger:
    """
    Configure logging

    Args:
        log_dir: Log directory
        log_level: Log level
        log_format: Log format
        log_file_prefix: Log file prefix
        log_max_size_mb: Max size of a single log file (MB)
        log_backup_count: Number of rotated files to keep
        log_to_console: Emit to the console (stderr unless ``stream`` is given)
        log_to_file: Emit to files under ``log_dir``
        stream: Console stream override

    Returns:
        The root logger
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.WARNING))

    # Repeated calls (one per CLI invocation in tests) must not stack handlers
    root_logger.handlers.clear()

    formatter = logging.Formatter(log_format)

    if log_to_console:
        console_handler = ColoredConsoleHandler(stream)
        console_handler.setLevel(logging.DEBUG)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    if log_to_file and log_dir:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)

        main_handler = RotatingFileHandler(
            log_dir / f"{log_file_prefix}.log",
            maxBytes=log_max_size_mb * 1024 * 1024,
            backupCount=log_backup_count,
            encoding="utf-8",
        )
        main_handler.setLevel(logging.DEBUG)
        main_handler.setFormatter(formatter)
        root_logger.addHandler(main_handler)

        error_handler = ErrorOnlyHandler(
            log_dir / "error.log",
            when="midnight",
            interval=1,
            backupCount=log_backup_count,
            encoding="utf-8",
        )
        error_handler.setLevel(logging.ERROR)
        error_handler.setFormatter(formatter)
        root_logger.addHandler(error_handler)

    # Quieter third-party loggers
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("mcp").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)

    return root_logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a named logger

    Args:
        name: Logger name

    Returns:
        The logger
    """
    return logging.getLogger(name)
