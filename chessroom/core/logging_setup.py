"""Logging setup for hosts that do not configure logging themselves."""

import logging

from chessroom.core.config import Settings


def configure_logging(settings: Settings) -> None:
    """Attach a single stream handler to the package logger (calling it twice does not duplicate output)."""
    logger = logging.getLogger("chessroom")
    logger.setLevel(settings.log_level.upper())
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(settings.log_format))
        logger.addHandler(handler)
