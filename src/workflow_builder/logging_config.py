"""Logging setup for the workflow_builder package logger."""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

PACKAGE_LOGGER = "workflow_builder"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_file_handler: Optional[logging.FileHandler] = None


def _drop_handlers(logger: logging.Logger) -> None:
    global _file_handler
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        if handler is _file_handler:
            handler.close()
    _file_handler = None


def setup_logging(log_dir: Optional[Path] = None, level: int = logging.INFO) -> Optional[Path]:
    """
    Route editor logs to stderr and, optionally, to a session log file.

    stdout is left to the CLI, which writes exported JSON there. Calling
    this again replaces the handlers from the previous call.

    Args:
        log_dir: Directory for ``workflow_builder_<timestamp>.log``; None disables the file
        level: Level for the package logger and its handlers

    Returns:
        Path of the session log file, or None without ``log_dir``
    """
    global _file_handler

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)
    _drop_handlers(logger)

    formatter = logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if not log_dir:
        return None

    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file_path = log_dir / f"{PACKAGE_LOGGER}_{datetime.now():%Y-%m-%d_%H-%M-%S}.log"

    _file_handler = logging.FileHandler(log_file_path, encoding="utf-8")
    _file_handler.setLevel(level)
    _file_handler.setFormatter(formatter)
    logger.addHandler(_file_handler)
    return log_file_path
