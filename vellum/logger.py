"""
Vellum Logging Module

This module provides the logging entry point used across the filter layer.
It implements a singleton logger that always reports errors on stderr and can
optionally mirror everything at or above a chosen level into a timestamped
log file.

Usage:
    from vellum.logger import logger

    logger.debug("Registered filter 'upper'")
    logger.set_log_file("render", "/path/to/logs", "DEBUG")
    logger.clear_log_file()
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Any

from vellum.constants import VELLUM_DEFAULT_LOG_DIR

LOG_FORMAT = "%(asctime)s [%(levelname)s] [%(name)s] - %(message)s"


class MicrosecondFormatter(logging.Formatter):
    """Custom formatter to include microseconds in timestamps using datetime."""

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:  # noqa: N802
        """Format the time with microseconds support."""
        ct = datetime.fromtimestamp(record.created)  # noqa: DTZ006
        return ct.strftime(datefmt) if datefmt else ct.isoformat()


class VellumLogger:
    """
    Singleton logger class for Vellum.

    Wraps the stdlib logger named ``vellum``. A console handler for ERROR and
    above is always attached; a file handler is attached on demand.
    """

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        if hasattr(self, "_initialized"):
            return
        self._initialized = True

        self._logger = logging.getLogger("vellum")
        self._logger.setLevel(logging.DEBUG)

        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(logging.ERROR)
        console_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        self._logger.addHandler(console_handler)

        self._file_handler: logging.FileHandler | None = None
        self._log_file: dict[str, Any] | None = None

    def set_level(self, log_level: str) -> None:
        """Set the level of the underlying logger (e.g. "DEBUG", "WARNING")."""
        level = getattr(logging, log_level.upper(), logging.WARNING)
        self._logger.setLevel(level)
        if self._file_handler:
            self._file_handler.setLevel(level)

    def set_log_file(
        self,
        name: str,
        log_dir: str | Path | None = None,
        log_level: str = "INFO",
    ) -> Path:
        """
        Start mirroring log records into a timestamped file.

        Any previously configured file handler is closed first.

        Args:
            name: Prefix of the log file name.
            log_dir: Directory to store log files. If None, uses the default.
            log_level: Logging level (e.g., "DEBUG", "INFO").

        Returns:
            Path of the log file being written.
        """
        self.clear_log_file()

        log_path = Path(log_dir or VELLUM_DEFAULT_LOG_DIR)
        log_path.mkdir(parents=True, exist_ok=True)

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        filepath = log_path / f"{name}_{timestamp}.log"

        self._file_handler = logging.FileHandler(filepath, encoding="utf-8")
        self._file_handler.setFormatter(MicrosecondFormatter(LOG_FORMAT))
        self._logger.addHandler(self._file_handler)
        self.set_level(log_level)

        self._log_file = {"name": name, "log_dir": str(log_path), "log_file": str(filepath)}
        self.info(f"Logging to {filepath}")
        return filepath

    def clear_log_file(self) -> None:
        """Stop file logging, if active."""
        if self._file_handler:
            self._logger.removeHandler(self._file_handler)
            self._file_handler.close()
            self._file_handler = None
        self._log_file = None

    def get_log_file(self) -> dict[str, Any] | None:
        """Return details about the active log file, or None."""
        return self._log_file

    def debug(self, message: str, *args: object, **kwargs) -> None:
        """Log a debug message."""
        self._logger.debug(message, *args, **kwargs)

    def info(self, message: str, *args: object, **kwargs) -> None:
        """Log an info message."""
        self._logger.info(message, *args, **kwargs)

    def warning(self, message: str, *args: object, **kwargs) -> None:
        """Log a warning message."""
        self._logger.warning(message, *args, **kwargs)

    def error(self, message: str, *args: object, **kwargs) -> None:
        """Log an error message."""
        self._logger.error(message, *args, **kwargs)

    def exception(self, message: str, *args: object, **kwargs) -> None:
        """Log an exception with traceback."""
        self._logger.exception(message, *args, **kwargs)


# Create the singleton instance
logger = VellumLogger()
