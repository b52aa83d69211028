"""Identifier generation and blob naming helpers."""

from __future__ import annotations

import re
import secrets
import threading
import time
from pathlib import PurePath
from typing import Optional

__all__ = [
    "DEFAULT_VIDEO_EXTENSION",
    "UPLOADS_URL_PREFIX",
    "build_blob_name",
    "blob_stem",
    "new_id",
    "public_url",
]

UPLOADS_URL_PREFIX = "/uploads"
DEFAULT_VIDEO_EXTENSION = ".mp4"

# 64 random bits per identifier.
_SUFFIX_BYTES = 8
_EXTENSION_PATTERN = re.compile(r"^\.[A-Za-z0-9]{1,10}$")

_clock_lock = threading.Lock()
_last_timestamp_ms = 0


def _next_timestamp_ms() -> int:
    """Return the current epoch milliseconds, never lower than a previous call."""

    global _last_timestamp_ms
    now = time.time_ns() // 1_000_000
    with _clock_lock:
        if now < _last_timestamp_ms:
            now = _last_timestamp_ms
        _last_timestamp_ms = now
    return now


def new_id(prefix: str) -> str:
    """Return ``<prefix>_<timestamp>_<random>`` for a new record."""

    return f"{prefix}_{_next_timestamp_ms()}_{secrets.token_hex(_SUFFIX_BYTES)}"


def _extension_for(original_name: Optional[str]) -> str:
    if not original_name:
        return DEFAULT_VIDEO_EXTENSION
    # Clients may send Windows paths as the multipart filename.
    suffix = PurePath(original_name.replace("\\", "/")).suffix
    if not _EXTENSION_PATTERN.match(suffix):
        return DEFAULT_VIDEO_EXTENSION
    return suffix.lower()


def build_blob_name(original_name: Optional[str] = None) -> str:
    """Return a fresh ``v_<timestamp>_<random><ext>`` name for an uploaded video."""

    return new_id("v") + _extension_for(original_name)


def blob_stem(file_name: str) -> str:
    """Return *file_name* without its extension; this is the video record id."""

    return PurePath(file_name).stem


def public_url(file_name: str) -> str:
    """Return the stable public path under which a stored blob is served."""

    return f"{UPLOADS_URL_PREFIX}/{file_name}"
