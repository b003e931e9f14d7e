import logging
import sys
from typing import Dict, Optional

from src.const import LIBRARY_LOG_LEVELS, LOG_DATE_FORMAT, LOG_FORMAT


class LoggingManager:
    """Manager for logging setup and logger retrieval."""

    @classmethod
    def setup_logging(cls, level: str = "INFO", library_log_levels: Optional[Dict[str, str]] = None) -> None:
        """Setup structured logging for the application.

        Args:
            level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            library_log_levels: Per-library level overrides for noisy loggers
        """
        # Convert string level to logging level
        numeric_level = getattr(logging, level.upper(), logging.INFO)

        formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

        # Log to stderr so JSON reports on stdout stay parseable
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(formatter)
        console_handler.setLevel(numeric_level)

        # Configure root logger
        root_logger = logging.getLogger()
        root_logger.setLevel(numeric_level)
        root_logger.addHandler(console_handler)

        # Set levels for noisy libraries
        levels = library_log_levels if library_log_levels is not None else LIBRARY_LOG_LEVELS
        for logger_name, lib_level in levels.items():
            logging.getLogger(logger_name).setLevel(getattr(logging, lib_level.upper(), logging.WARNING))

    @classmethod
    def get_logger(cls, name: str) -> logging.Logger:
        """Get a logger instance.

        Args:
            name: Logger name, typically __name__

        Returns:
            Configured logger instance
        """
        return logging.getLogger(name)
