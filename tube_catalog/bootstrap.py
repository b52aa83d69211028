"""Bootstrap logic that prepares runtime directories and the collection files."""

from __future__ import annotations

import logging
from dataclasses import replace
from pathlib import Path

from . import config as config_module
from .config import AppConfig, load_config
from .services.records import Teacher
from .services.storage import RecordStore

LOGGER = logging.getLogger(__name__)


DEFAULT_TEACHER = Teacher(
    id="t_default_geography",
    name="Людмила Петровна",
    subject="География",
    nickname="географичка",
)


class BootstrapError(RuntimeError):
    """Raised when initialization cannot be completed."""


class Bootstrapper:
    """High level object orchestrating initialization steps."""

    def __init__(self, config: AppConfig) -> None:
        self._config = config

    @property
    def config(self) -> AppConfig:
        return self._config

    def initialize(self) -> None:
        """Run all bootstrap tasks."""

        LOGGER.debug("Starting bootstrap sequence")
        self._ensure_directories()
        self._ensure_collections()
        LOGGER.info("Bootstrap completed successfully")

    def _ensure_directories(self) -> None:
        for label, path in (
            ("storage", self._config.storage_root),
            ("data", self._config.data_dir),
            ("uploads", self._config.uploads_dir),
        ):
            if not config_module._ensure_writable_directory(path):
                raise BootstrapError(
                    f"Unable to prepare {label} directory '{path}'. It is not writable. "
                    "Update config/default.json or adjust permissions."
                )
            LOGGER.debug("Ensured %s directory exists: %s", label, path)

    def _ensure_collections(self) -> None:
        store = RecordStore.from_config(self._config)
        with store.teachers.update() as teachers:
            if not teachers:
                teachers.append(replace(DEFAULT_TEACHER))
                LOGGER.info("Seeded default teacher %s", DEFAULT_TEACHER.id)
        for collection in (store.videos, store.requests):
            if not collection.path.exists():
                collection.save([])
                LOGGER.debug("Created empty %s collection at %s", collection.name, collection.path)


def initialize_app(config_path: Path | None = None) -> AppConfig:
    """Convenience helper that loads configuration and runs initialization."""

    config = load_config(config_path=config_path)
    bootstrapper = Bootstrapper(config)
    bootstrapper.initialize()
    return config


__all__ = ["BootstrapError", "Bootstrapper", "DEFAULT_TEACHER", "initialize_app"]
