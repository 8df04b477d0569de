"""Logging utilities for ioflows."""

import logging
import sys
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler


def setup_logger(
    name: str = "ioflows",
    level: Optional[str] = None,
    log_file: Optional[Path] = None,
    rich_output: bool = True
) -> logging.Logger:
    """Set up and configure logger.

    Loggers are created under the ``ioflows`` namespace, so a level set on
    the root ``ioflows`` logger applies to every component.

    Args:
        name: Logger name
        level: Log level (DEBUG, INFO, WARNING, ERROR); None keeps the
            current level
        log_file: Optional file path for log output
        rich_output: Use rich formatting for console output

    Returns:
        Configured logger instance
    """
    if name != "ioflows" and not name.startswith("ioflows."):
        name = f"ioflows.{name}"
    logger = logging.getLogger(name)

    if level is not None:
        logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    # Component loggers propagate to the root ioflows logger
    if name != "ioflows":
        return logger

    # Clear existing handlers
    logger.handlers.clear()

    # Console handler with rich formatting
    if rich_output:
        console_handler = RichHandler(
            console=Console(stderr=True),
            show_time=True,
            show_path=False,
            markup=False
        )
        console_handler.setFormatter(logging.Formatter("%(message)s"))
    else:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(
            logging.Formatter("[%(levelname)s] %(name)s: %(message)s")
        )

    logger.addHandler(console_handler)

    # File handler if specified
    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")
        )
        logger.addHandler(file_handler)

    return logger


# Default logger instance
logger = setup_logger(level="INFO")
