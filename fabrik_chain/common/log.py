"""Logging setup for command line tools."""

import logging
import os
import sys
from typing import Optional, Union


def initialize_logging(
    level: Union[int, str] = logging.INFO,
    log_path: Optional[str] = None,
) -> logging.Logger:
    """
    Configure the `fabrik_chain` logger for console (and optional file) output.

    Library modules only create named loggers; handlers are attached here so
    that importing the package never changes the host application's logging.

    Args:
        level: Logging level, either a number or a name such as "DEBUG".
        log_path: Optional file to write logs to. An existing file is kept
            as `<log_path>.bak`.

    Returns:
        The configured package logger.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            raise ValueError(f"Unknown log level: {level}")

    logger = logging.getLogger("fabrik_chain")
    logger.setLevel(level)

    # Remove existing handlers to avoid duplicated lines on re-initialization.
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(console_handler)

    if log_path:
        if os.path.exists(log_path):
            os.replace(log_path, f"{log_path}.bak")
        file_handler = logging.FileHandler(log_path, mode="w")
        file_handler.setLevel(level)
        file_handler.setFormatter(
            logging.Formatter(
                "%(asctime)s %(levelname)s %(name)s: %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        logger.addHandler(file_handler)

    logger.debug("Logging initialized (level=%s).", logging.getLevelName(level))
    return logger
