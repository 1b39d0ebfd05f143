import logging
from typing import Optional

DEFAULT_LOGGER_NAME = "apiclient"


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return the package logger, silent until the application configures logging."""
    logger = logging.getLogger(name or DEFAULT_LOGGER_NAME)
    if not any(isinstance(h, logging.NullHandler) for h in logger.handlers):
        logger.addHandler(logging.NullHandler())
    return logger
