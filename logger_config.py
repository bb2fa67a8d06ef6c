#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Logging Configuration Module for Delete GitHub Branches

Contains:
- Logger setup and configuration
- Console (Rich) and file logging handlers
- Log formatting utilities
"""

import logging
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler


LOGGER_NAME = "delete_github_branches"


def setup_logging(
    log_level: int = logging.INFO,
    log_file: str | Path | None = None,
    console_output: bool = True,
    use_rich: bool = True
) -> logging.Logger:
    """
    Set up logging configuration for the application with Rich integration.

    Console logs go to stderr; stdout carries the cleanup report.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional file path for log output
        console_output: Whether to output logs to console
        use_rich: Whether to use Rich handler for console output

    Returns:
        Configured logger instance

    Example:
        >>> logger = setup_logging(logging.DEBUG, "cleanup.log")
        >>> logger.info("Cleanup started")
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(log_level)

    # Clear any existing handlers
    logger.handlers.clear()

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    if console_output:
        if use_rich:
            rich_console = Console(stderr=True, legacy_windows=False)
            console_handler = RichHandler(
                console=rich_console,
                show_time=False,
                show_path=False,
                rich_tracebacks=True,
                markup=True,
                show_level=True
            )
        else:
            console_handler = logging.StreamHandler()
            console_handler.setFormatter(formatter)
        console_handler.setLevel(log_level)
        logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path, encoding='utf-8')
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str | None = None) -> logging.Logger:
    """
    Get a logger instance under the application logger.

    Args:
        name: Module name (e.g. ``__name__``); None returns the application logger

    Returns:
        Logger instance
    """
    if not name or name == LOGGER_NAME or name == "__main__":
        return logging.getLogger(LOGGER_NAME)
    return logging.getLogger(f"{LOGGER_NAME}.{name}")
