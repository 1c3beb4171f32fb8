"""Module logger setup."""

from __future__ import annotations

import logging

_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


def get_logger(name: str, level: int = logging.INFO) -> logging.Logger:
    """
    Return a logger with a single stream handler.
    Repeated calls for the same name do not stack handlers.
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)
    for h in logger.handlers[:]:
        logger.removeHandler(h)
    ch = logging.StreamHandler()
    ch.setLevel(level)
    ch.setFormatter(logging.Formatter(_FORMAT))
    logger.addHandler(ch)
    logger.propagate = False
    return logger
