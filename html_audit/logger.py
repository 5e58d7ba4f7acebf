"""
Logging configuration for the HTML audit engine.
"""

import logging
import sys
from typing import Optional


def setup_logger(
    name: str = "html_audit",
    level: int = logging.WARNING,
    log_file: Optional[str] = None
) -> logging.Logger:
    """
    Set up and return a logger instance.

    Args:
        name: Logger name
        level: Logging level (default: WARNING, so importing the package stays quiet)
        log_file: Optional file path for logging

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    # Handlers are installed once; later calls only adjust the level so the
    # engine and the CLI can both ask for a different verbosity.
    if logger.handlers:
        logger.setLevel(level)
        for handler in logger.handlers:
            handler.setLevel(level)
        return logger

    logger.setLevel(level)

    # Format: timestamp - module - level - message
    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    # Console handler; stderr keeps stdout free for reports
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    # File handler (if specified)
    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


# Default logger instance, created once at import time
logger = setup_logger()


def get_module_logger(module_name: str) -> logging.Logger:
    """
    Get a child logger for a specific module.

    Child loggers (e.g. "html_audit.extractor") inherit the package logger's
    handlers and level, but their name appears in log output so you can
    tell which pipeline stage produced each message.

    Args:
        module_name: Name of the module (e.g., 'loader', 'extractor')

    Returns:
        Child logger instance
    """
    return logging.getLogger(f"html_audit.{module_name}")
