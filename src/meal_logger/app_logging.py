"""Logging setup for the meal logger service."""

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s: %(name)s: %(message)s"


def configure_logging(level: int | str = logging.INFO) -> logging.Logger:
    """Attach one stream handler to the package logger and set its level.

    Calling it again only updates the level, so every app instance in a
    process shares a single handler.
    """
    logger = logging.getLogger("meal_logger")
    logger.setLevel(level.upper() if isinstance(level, str) else level)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
        logger.propagate = False
    return logger
