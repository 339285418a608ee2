"""
Logging configuration for the BLE receipt printer.

All loggers live under the ``bleprinter`` namespace. Records carry the
thread name, since printer I/O runs on its own runtime thread while Flask
serves requests from worker threads.

Log Format:
    2025-12-03 10:15:30 [INFO    ] [MainThread] bleprinter - Logging configured at level INFO
    2025-12-03 10:15:31 [INFO    ] [Printer] bleprinter.printer.connection - Connected to PT-210 (AA:BB:...)
    2025-12-03 10:15:32 [WARNING ] [Printer] bleprinter.printer.transport - Chunk 3/9 attempt 1 failed: ...

Usage:
    # At application startup
    setup_logging(log_level=logging.INFO, enable_file_logging=False)

    # In modules
    logger = get_logger(__name__)
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

APP_LOGGER = "bleprinter"

LOG_FORMAT = "%(asctime)s [%(levelname)-8s] [%(threadName)s] %(name)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(
    log_level: int = logging.INFO,
    log_dir: Optional[Path] = None,
    enable_file_logging: bool = False,
) -> logging.Logger:
    """
    Configure the application logger.

    Sets up a console handler (always) and a rotating file handler
    (optional). Calling it again replaces the previous handlers.

    Args:
        log_level: Minimum log level (default: INFO)
        log_dir: Directory for log files (default: ./logs in the working directory)
        enable_file_logging: Whether to write to a log file

    Returns:
        Configured application logger
    """
    logger = logging.getLogger(APP_LOGGER)
    logger.setLevel(log_level)
    logger.propagate = False
    logger.handlers.clear()

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if enable_file_logging:
        if log_dir is None:
            log_dir = Path.cwd() / "logs"
        log_dir.mkdir(parents=True, exist_ok=True)

        log_file = log_dir / f"{APP_LOGGER}.log"
        file_handler = RotatingFileHandler(
            filename=log_file,
            maxBytes=10 * 1024 * 1024,  # 10 MB per file
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)
        logger.info("File logging enabled: %s", log_file)

    logger.info("Logging configured at level %s", logging.getLevelName(log_level))
    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger under the application namespace.

    Args:
        name: Module name (typically __name__)
    """
    if name != APP_LOGGER and not name.startswith(APP_LOGGER + "."):
        name = f"{APP_LOGGER}.{name}"
    return logging.getLogger(name)
