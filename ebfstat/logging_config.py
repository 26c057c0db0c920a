"""
Logging setup for ebfstat.

Library modules only call `logging.getLogger(__name__)`; the CLI calls
`create_logger("ebfstat", ...)` once to attach handlers to the package
logger.
"""

import logging
import os
import sys
from typing import Optional, Union

import colorlog


def create_logger(
    name: Optional[str] = None,
    log_level: Union[int, str] = logging.INFO,
    log_dir: Optional[str] = None,
    log_file: Optional[str] = None,
):
    """
    Create a color-coded console logger with optional file logging.

    :param name: Name of the logger (typically "ebfstat")
    :param log_level: Logging level (default: logging.INFO)
    :param log_dir: Directory to store log files (optional)
    :param log_file: Specific log file name (optional)
    :return: Configured logger instance
    """
    if isinstance(log_level, str):
        log_level = log_level.upper()

    logger = colorlog.getLogger(name or "ebfstat")
    logger.setLevel(log_level)
    logger.propagate = False

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    console_handler = colorlog.StreamHandler(sys.stderr)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(colorlog.ColoredFormatter(
        "%(log_color)s[%(levelname)s]%(reset)s "
        "%(blue)s[%(name)s]%(reset)s "
        "%(message)s",
        log_colors={
            "DEBUG": "cyan",
            "INFO": "green",
            "WARNING": "yellow",
            "ERROR": "red",
            "CRITICAL": "red,bg_white",
        },
    ))
    logger.addHandler(console_handler)

    if log_dir or log_file:
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        if not log_file:
            log_file = f"{name or 'ebfstat'}.log"
        if log_dir:
            log_file = os.path.join(log_dir, log_file)

        # plain text in files
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(log_level)
        file_handler.setFormatter(logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        ))
        logger.addHandler(file_handler)

    return logger
