from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from core.settings import LOG_PATH


ROOT_LOGGER_NAME = "thinkspace"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

# Library loggers stay silent until the host application opts in.
logging.getLogger(ROOT_LOGGER_NAME).addHandler(logging.NullHandler())


def configure_logging(log_path: Optional[Path] = None, level: int = logging.INFO) -> logging.Logger:
    """Attach the rotating file handler to the ``thinkspace`` logger once."""

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    if not any(isinstance(handler, RotatingFileHandler) for handler in logger.handlers):
        target = Path(log_path or LOG_PATH)
        target.parent.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(target, maxBytes=1_000_000, backupCount=3, encoding="utf-8")
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    logger.setLevel(level)
    return logger


def get_logger(name: str) -> logging.Logger:
    """Return ``thinkspace.<name>``; nothing is written until :func:`configure_logging` runs."""
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


__all__ = ["LOG_FORMAT", "ROOT_LOGGER_NAME", "configure_logging", "get_logger"]
