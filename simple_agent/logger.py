"""Logging handle for the agent.

The handle is created once by the CLI and passed to the components that log;
close_logger() flushes and detaches its handlers at shutdown.
"""
from __future__ import annotations
import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "simple_agent"
FILE_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


def create_logger(log_file: Optional[str] = None, level: str = "INFO",
                  console: Optional[Console] = None,
                  console_level: int = logging.WARNING) -> logging.Logger:
    logger = logging.getLogger(LOGGER_NAME)
    close_logger(logger)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False

    if log_file:
        handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        handler.setLevel(level.upper())
        handler.setFormatter(logging.Formatter(FILE_FORMAT))
        logger.addHandler(handler)

    if console is not None:
        rich_handler = RichHandler(console=console, show_path=False, show_time=False)
        rich_handler.setLevel(console_level)
        logger.addHandler(rich_handler)

    if not logger.handlers:
        logger.addHandler(logging.NullHandler())

    logger.info("logging initialised (file=%s, level=%s)", log_file, level)
    return logger


def close_logger(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        try:
            handler.flush()
            handler.close()
        finally:
            logger.removeHandler(handler)


def null_logger() -> logging.Logger:
    """Logger used when a component is built without one (tests, library use)."""
    logger = logging.getLogger(f"{LOGGER_NAME}.null")
    if not logger.handlers:
        logger.addHandler(logging.NullHandler())
        logger.propagate = False
    return logger
