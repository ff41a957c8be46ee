"""
Logging configuration for entity-sdkgen.

All modules obtain their logger through ``get_logger(__name__)`` so that a
single call to ``setup_logging`` controls the whole package.
"""

import logging
import os
from typing import Optional

from rich.logging import RichHandler

PACKAGE_LOGGER = "entity_sdkgen"
LOG_LEVEL_ENV = "ENTITY_SDKGEN_LOG_LEVEL"


def setup_logging(
    level: Optional[str] = None,
    log_file: Optional[str] = None,
    rich_tracebacks: bool = False,
) -> logging.Logger:
    """
    Configure logging for the entity_sdkgen package.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
            Falls back to ``ENTITY_SDKGEN_LOG_LEVEL`` and then WARNING.
        log_file: Optional file path that receives a plain-text copy of the log
        rich_tracebacks: Render exception tracebacks with rich

    Returns:
        The configured package logger
    """
    if level is None:
        level = os.environ.get(LOG_LEVEL_ENV, "WARNING")

    log_level = getattr(logging, str(level).upper(), logging.WARNING)
    if not isinstance(log_level, int):
        log_level = logging.WARNING

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(log_level)

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()

    console_handler = RichHandler(
        level=log_level,
        show_path=False,
        rich_tracebacks=rich_tracebacks,
    )
    console_handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(log_level)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )
        logger.addHandler(file_handler)

    logger.propagate = False
    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger for a module of this package.

    Args:
        name: Logger name, usually ``__name__``

    Returns:
        Logger living under the package logger hierarchy
    """
    if name == PACKAGE_LOGGER or name.startswith(PACKAGE_LOGGER + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{PACKAGE_LOGGER}.{name}")
