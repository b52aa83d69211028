"""Configuration loading utilities for the video catalog."""

from __future__ import annotations

import contextlib
import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Tuple


LOGGER = logging.getLogger(__name__)


_PERMISSION_SENTINEL = ".tube_catalog_write_check"

DEFAULT_MAX_UPLOAD_BYTES = 1024 * 1024 * 1024
MAX_UPLOAD_ENV = "TUBE_CATALOG_MAX_UPLOAD_BYTES"


def _ensure_writable_directory(path: Path) -> bool:
    """Return ``True`` if *path* can be created and written to."""

    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError:
        return False

    test_file = path / _PERMISSION_SENTINEL
    try:
        with test_file.open("w", encoding="utf-8") as handle:
            handle.write("ok")
    except OSError:
        return False
    finally:
        with contextlib.suppress(OSError):
            test_file.unlink()

    return True


def _select_writable_directory(
    preferred: Path,
    *,
    label: str,
    fallbacks: Iterable[Path] = (),
) -> Tuple[Path, bool]:
    """Return a usable directory based on ``preferred`` and ``fallbacks``.

    The first writable candidate wins and the flag reports whether a
    fallback was used. When nothing can be prepared the original
    ``preferred`` path is returned so that bootstrap can report it.
    """

    preferred = preferred.resolve()
    if _ensure_writable_directory(preferred):
        return preferred, False

    for fallback in fallbacks:
        candidate = fallback.resolve()
        if candidate == preferred:
            continue
        if _ensure_writable_directory(candidate):
            LOGGER.warning(
                "Preferred %s directory '%s' is not writable; using fallback '%s'.",
                label,
                preferred,
                candidate,
            )
            return candidate, True

    LOGGER.warning(
        "%s directory '%s' is not writable and no fallback is available.",
        label.capitalize(),
        preferred,
    )
    return preferred, False


def _resolve_max_upload_bytes(configured: Any) -> int:
    raw_env = (os.environ.get(MAX_UPLOAD_ENV) or "").strip()
    if raw_env:
        try:
            return int(raw_env)
        except ValueError:
            LOGGER.warning(
                "Ignoring invalid %s value '%s'; falling back to configuration.",
                MAX_UPLOAD_ENV,
                raw_env,
            )
    if configured is None:
        return DEFAULT_MAX_UPLOAD_BYTES
    try:
        return int(configured)
    except (TypeError, ValueError):
        LOGGER.warning(
            "Invalid max_upload_bytes '%s' in configuration; using %s.",
            configured,
            DEFAULT_MAX_UPLOAD_BYTES,
        )
        return DEFAULT_MAX_UPLOAD_BYTES


@dataclass(frozen=True)
class AppConfig:
    """Runtime paths and limits for the catalog."""

    storage_root: Path
    data_dir: Path
    uploads_dir: Path
    max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES

    @property
    def upload_limit(self) -> Optional[int]:
        """Effective upload ceiling, ``None`` when uploads are unbounded."""

        return self.max_upload_bytes if self.max_upload_bytes > 0 else None

    @classmethod
    def from_mapping(cls, mapping: Dict[str, Any], *, base_path: Path) -> "AppConfig":
        preferred_storage = (base_path / mapping["storage_root"]).resolve()
        storage_fallback = Path.home() / ".tube_catalog" / "storage"
        storage_root, storage_fallback_used = _select_writable_directory(
            preferred_storage,
            label="storage",
            fallbacks=(storage_fallback,),
        )

        resolved: Dict[str, Path] = {}
        for key, default_name in (("data_dir", "data"), ("uploads_dir", "uploads")):
            preferred = (base_path / mapping.get(key, f"{mapping['storage_root']}/{default_name}")).resolve()
            if storage_fallback_used:
                try:
                    preferred = (storage_root / preferred.relative_to(preferred_storage)).resolve()
                except ValueError:
                    pass
            resolved[key], _ = _select_writable_directory(
                preferred,
                label=key.replace("_dir", ""),
                fallbacks=(storage_root / default_name,),
            )

        return cls(
            storage_root=storage_root,
            data_dir=resolved["data_dir"],
            uploads_dir=resolved["uploads_dir"],
            max_upload_bytes=_resolve_max_upload_bytes(mapping.get("max_upload_bytes")),
        )


def load_config(config_path: Path | None = None) -> AppConfig:
    """Load the configuration from ``config/default.json`` by default."""

    base_path = Path(__file__).resolve().parent.parent
    if config_path is None:
        config_path = base_path / "config" / "default.json"

    with config_path.open("r", encoding="utf-8") as config_file:
        raw_config = json.load(config_file)

    return AppConfig.from_mapping(raw_config, base_path=base_path)


__all__ = ["AppConfig", "DEFAULT_MAX_UPLOAD_BYTES", "MAX_UPLOAD_ENV", "load_config"]
