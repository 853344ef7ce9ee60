"""Logging configuration for uainfo.

This module sets up logging with file rotation, with a separate log
for per user agent classification timings.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

# Log format constants
DEFAULT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DETAILED_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(filename)s:%(lineno)d | %(message)s"
SIMPLE_FORMAT = "%(levelname)s: %(message)s"

# Default settings
DEFAULT_LOG_LEVEL = logging.INFO
DEFAULT_MAX_BYTES = 10 * 1024 * 1024  # 10 MB
DEFAULT_BACKUP_COUNT = 5

# Length of the user agent shown in classification log lines
USER_AGENT_PREVIEW_LENGTH = 80


class UaiLogger:
    """Centralized logger management for uainfo.

    Manages two log files:
        - main.log: General library logging
        - classify.log: One line per classification (level, cache tier, time)
    """

    _instance: Optional["UaiLogger"] = None
    _initialized: bool = False

    def __new__(cls) -> "UaiLogger":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self) -> None:
        if self._initialized:
            return

        self.logs_dir: Path | None = None
        self.log_level: int = DEFAULT_LOG_LEVEL
        self.loggers: dict[str, logging.Logger] = {}
        self._initialized = True

    def setup(
        self,
        logs_dir: Path,
        log_level: int = DEFAULT_LOG_LEVEL,
        console_output: bool = True,
    ) -> None:
        """Initialize logging with specified configuration.

        Args:
            logs_dir: Directory for log files.
            log_level: Logging level (e.g., logging.INFO).
            console_output: Whether to also log to console.
        """
        self.logs_dir = logs_dir
        self.log_level = log_level

        logs_dir.mkdir(parents=True, exist_ok=True)

        root_logger = logging.getLogger("uainfo")
        root_logger.setLevel(log_level)
        root_logger.handlers.clear()

        main_handler = self._create_file_handler(
            logs_dir / "main.log",
            DETAILED_FORMAT,
        )
        root_logger.addHandler(main_handler)

        if console_output:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setLevel(log_level)
            console_handler.setFormatter(logging.Formatter(SIMPLE_FORMAT))
            root_logger.addHandler(console_handler)

        self.loggers["main"] = root_logger

        self._setup_classify_logger(logs_dir)

    def _create_file_handler(
        self,
        log_path: Path,
        format_string: str,
        max_bytes: int = DEFAULT_MAX_BYTES,
        backup_count: int = DEFAULT_BACKUP_COUNT,
    ) -> RotatingFileHandler:
        """Create a rotating file handler.

        Args:
            log_path: Path to the log file.
            format_string: Log format string.
            max_bytes: Maximum file size before rotation.
            backup_count: Number of backup files to keep.

        Returns:
            Configured RotatingFileHandler.
        """
        handler = RotatingFileHandler(
            log_path,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        handler.setLevel(self.log_level)
        handler.setFormatter(logging.Formatter(format_string))
        return handler

    def _setup_classify_logger(self, logs_dir: Path) -> None:
        """Setup the classification timings logger."""
        logger = logging.getLogger("uainfo.classify")
        logger.setLevel(self.log_level)
        logger.propagate = False
        logger.handlers.clear()

        handler = self._create_file_handler(
            logs_dir / "classify.log",
            "%(asctime)s | %(levelname)-8s | CLASSIFY | %(message)s",
        )
        logger.addHandler(handler)
        self.loggers["classify"] = logger

    def get_logger(self, name: str = "main") -> logging.Logger:
        """Get a logger by name.

        Args:
            name: Logger name ("main", "classify").

        Returns:
            The requested logger, or a child of the main logger.
        """
        if name in self.loggers:
            return self.loggers[name]

        return logging.getLogger(f"uainfo.{name}")


_logger_manager = UaiLogger()


def setup_logging(
    logs_dir: Path,
    log_level: int = DEFAULT_LOG_LEVEL,
    console_output: bool = True,
) -> None:
    """Initialize the logging system.

    This should be called once at application startup.

    Args:
        logs_dir: Directory for log files.
        log_level: Logging level (default: INFO).
        console_output: Whether to also log to console (default: True).
    """
    _logger_manager.setup(logs_dir, log_level, console_output)


def get_logger(name: str = "main") -> logging.Logger:
    """Get a logger instance.

    Args:
        name: Logger name. Options:
            - "main": General library logging
            - "classify": Classification timings

    Returns:
        Logger instance.
    """
    return _logger_manager.get_logger(name)


def log_classification(
    user_agent: str,
    id_level: str,
    cache_tier: str,
    duration_ms: float,
) -> None:
    """Log a single classification.

    Args:
        user_agent: The classified user agent.
        id_level: Identification level name.
        cache_tier: "local", "shared" or "miss".
        duration_ms: Time spent in milliseconds.
    """
    logger = get_logger("classify")
    preview = user_agent[:USER_AGENT_PREVIEW_LENGTH]
    logger.info(f"{id_level} | {cache_tier} | {duration_ms:.1f}ms | {preview}")
