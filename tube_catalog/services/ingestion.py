"""Upload pipeline turning an incoming video stream into a catalog entry."""

from __future__ import annotations

import contextlib
import logging
import os
import time
from pathlib import Path
from typing import BinaryIO, Optional

from ..config import AppConfig
from .errors import NotFoundError, PayloadTooLargeError, StorageIOError, ValidationError
from .events import emit_file_event
from .naming import build_blob_name
from .records import Video
from .teachers import TeacherCatalog
from .videos import VideoCatalog


LOGGER = logging.getLogger(__name__)

VIDEO_MIME_PREFIX = "video/"
DEFAULT_CHUNK_SIZE = 1024 * 1024


class VideoIngestor:
    """Validate, store and register uploaded videos.

    Only the declared MIME type is checked; the bytes themselves are not
    sniffed, so a mislabelled upload is accepted.
    """

    def __init__(
        self,
        config: AppConfig,
        teachers: TeacherCatalog,
        videos: VideoCatalog,
        *,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> None:
        self._max_bytes = config.upload_limit
        self._teachers = teachers
        self._videos = videos
        self._chunk_size = chunk_size

    @property
    def max_bytes(self) -> Optional[int]:
        return self._max_bytes

    def ingest(
        self,
        teacher_id: Optional[str],
        title: Optional[str],
        description: Optional[str],
        source: BinaryIO,
        mime_type: Optional[str],
        original_name: Optional[str] = None,
    ) -> Video:
        """Store *source* as a new blob and return the registered video."""

        if not (mime_type or "").strip().lower().startswith(VIDEO_MIME_PREFIX):
            raise ValidationError("Only video files can be uploaded")
        teacher_id = (teacher_id or "").strip()
        if not teacher_id:
            raise ValidationError("teacherId is required")
        if not self._teachers.exists(teacher_id):
            raise NotFoundError(f"Teacher '{teacher_id}' not found")

        blob_name = build_blob_name(original_name)
        target = self._videos.blob_path(blob_name)
        LOGGER.debug("Ingesting upload '%s' as %s", original_name or "<unnamed>", blob_name)
        self._write_blob(source, target)

        try:
            return self._videos.create(
                teacher_id,
                (title or "").strip(),
                (description or "").strip(),
                blob_name,
            )
        except Exception:
            # The record never became visible; drop the blob it would have owned.
            with contextlib.suppress(OSError):
                target.unlink()
            raise

    def _write_blob(self, source: BinaryIO, target: Path) -> None:
        """Stream *source* to *target*; the final name appears only once complete."""

        partial = target.with_name(f".{target.name}.part")
        start = time.perf_counter()
        written = 0
        completed = False
        try:
            with contextlib.suppress(AttributeError, OSError, ValueError):
                source.seek(0)
            try:
                target.parent.mkdir(parents=True, exist_ok=True)
                with partial.open("wb") as buffer:
                    while True:
                        chunk = source.read(self._chunk_size)
                        if not chunk:
                            break
                        written += len(chunk)
                        if self._max_bytes is not None and written > self._max_bytes:
                            raise PayloadTooLargeError(self._max_bytes)
                        buffer.write(chunk)
                os.replace(partial, target)
            except OSError as error:
                raise StorageIOError(f"Failed to store video file '{target.name}': {error}") from error
            completed = True
        finally:
            duration_ms = (time.perf_counter() - start) * 1000.0
            if not completed:
                with contextlib.suppress(OSError):
                    partial.unlink()
                emit_file_event(
                    "store_blob_aborted",
                    payload={"file_name": target.name, "bytes": written},
                    duration_ms=duration_ms,
                    level=logging.WARNING,
                )
            else:
                emit_file_event(
                    "store_blob",
                    payload={"file_name": target.name, "bytes": written},
                    duration_ms=duration_ms,
                )


__all__ = ["DEFAULT_CHUNK_SIZE", "VIDEO_MIME_PREFIX", "VideoIngestor"]
