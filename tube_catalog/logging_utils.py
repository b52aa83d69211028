"""Centralized logging configuration for the video catalog."""

from __future__ import annotations

import logging
from logging import Logger
from pathlib import Path
from typing import Iterable, List, Optional


DEFAULT_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

_HANDLER_MARKER = "_tube_catalog_handler"


def get_log_file_path(storage_root: Path) -> Path:
    """Return the default path for the catalog log file."""

    return storage_root / "tube_catalog.log"


def build_handlers(storage_root: Optional[Path] = None) -> List[logging.Handler]:
    """Return a stream handler plus a file handler under *storage_root*."""

    formatter = logging.Formatter(DEFAULT_LOG_FORMAT)
    handlers: List[logging.Handler] = []
    if storage_root is not None:
        file_handler = logging.FileHandler(get_log_file_path(storage_root), encoding="utf-8")
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)
    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)
    handlers.append(stream_handler)
    return handlers


def configure_logging(level: int = logging.INFO, *, handlers: Iterable[logging.Handler] | None = None) -> Logger:
    """Configure the root logger, replacing handlers installed by a previous call."""

    logger = logging.getLogger()
    logger.setLevel(level)

    for existing in list(logger.handlers):
        if getattr(existing, _HANDLER_MARKER, False):
            logger.removeHandler(existing)
            existing.close()

    for handler in handlers if handlers is not None else build_handlers():
        setattr(handler, _HANDLER_MARKER, True)
        logger.addHandler(handler)

    return logger


__all__ = ["DEFAULT_LOG_FORMAT", "build_handlers", "configure_logging", "get_log_file_path"]
