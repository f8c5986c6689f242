"""
skillpack logging

- Rotating log files (size based) plus a daily error.log
- Coloured console output on stderr
"""

from .config import get_logger, setup_logging

__all__ = [
    "setup_logging",
    "get_logger",
]
