"""
Custom log handlers

- ErrorOnlyHandler: keeps only ERROR/CRITICAL records
- ColoredConsoleHandler: coloured stderr output
"""

import logging
import sys
from logging.handlers import TimedRotatingFileHandler
from typing import TextIO


class ErrorOnlyHandler(TimedRotatingFileHandler):
    """
    Handler that only records ERROR and CRITICAL

    Inherits TimedRotatingFileHandler, rotates daily
    """

    def emit(self, record: logging.LogRecord) -> None:
        """Only handle ERROR and above"""
        if record.levelno >= logging.ERROR:
            super().emit(record)


class ColoredConsoleHandler(logging.StreamHandler):
    """
    Coloured console handler

    Levels map to colours:
    - DEBUG: grey
    - INFO: default
    - WARNING: yellow
    - ERROR: red
    - CRITICAL: bold red

    Defaults to stderr: stdout carries CLI JSON output and the MCP stdio
    transport, neither of which may be interleaved with log lines.
    """

    # ANSI colour codes
    COLORS = {
        logging.DEBUG: "\033[90m",
        logging.INFO: "\033[0m",
        logging.WARNING: "\033[93m",
        logging.ERROR: "\033[91m",
        logging.CRITICAL: "\033[91;1m",
    }
    RESET = "\033[0m"

    def __init__(self, stream: TextIO | None = None):
        super().__init__(stream or sys.stderr)
        self._supports_color = self._check_color_support()

    def _check_color_support(self) -> bool:
        """Colour only when writing to a terminal"""
        if sys.platform == "win32":
            try:
                import ctypes

                kernel32 = ctypes.windll.kernel32
                kernel32.SetConsoleMode(kernel32.GetStdHandle(-12), 7)  # STD_ERROR_HANDLE
                return True
            except Exception:
                return False

        return hasattr(self.stream, "isatty") and self.stream.isatty()

    def emit(self, record: logging.LogRecord) -> None:
        """Write the record, never failing on unencodable characters"""
        try:
            super().emit(record)
        except UnicodeEncodeError:
            msg = self.format(record)
            safe_msg = msg.encode("utf-8", errors="replace").decode("utf-8", errors="replace")
            try:
                self.stream.write(safe_msg + self.terminator)
                self.stream.flush()
            except (OSError, ValueError):
                self.handleError(record)

    def format(self, record: logging.LogRecord) -> str:
        """Format the record, adding colour"""
        message = super().format(record)

        if self._supports_color:
            color = self.COLORS.get(record.levelno, self.RESET)
            return f"{color}{message}{self.RESET}"

        return message
