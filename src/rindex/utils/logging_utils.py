# utils/logging_utils.py - Logging utilities for rindex

import logging
import logging.handlers
import os
import sys
from typing import Optional

DEFAULT_LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logging(
    log_level: str = "INFO",
    log_dir: Optional[str] = None,
    log_file: str = "rindex.log",
    backup_count: int = 7,
    fmt: str = DEFAULT_LOG_FORMAT,
) -> logging.Logger:
    """
    Set up the rindex logger with the specified log level

    Logs always go to stdout. When log_dir is given, they also go to a file
    in that directory which is rotated every day at midnight.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_dir: Directory for the rotating log file, or None to disable it
        log_file: Base name of the log file
        backup_count: Number of rotated files to keep
        fmt: Format string for all handlers

    Returns:
        Configured logger instance

    Raises:
        ValueError: If log_dir is set but is not an existing directory
    """
    # Convert string log level to logging constant
    numeric_level = getattr(logging, log_level.upper(), None)
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    logger = logging.getLogger('rindex')
    logger.setLevel(numeric_level)
    # Records stop here so root handlers installed by FastMCP do not repeat them
    logger.propagate = False

    # Drop handlers from a previous call
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(fmt)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_dir:
        if not os.path.isdir(log_dir):
            raise ValueError(f"Invalid log directory: {log_dir}")

        file_handler = logging.handlers.TimedRotatingFileHandler(
            os.path.join(log_dir, log_file),
            when='midnight',
            backupCount=backup_count,
            encoding='utf-8',
        )
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger
