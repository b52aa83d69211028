"""Video catalog: metadata records plus the blob files they own."""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import List, Optional

from .errors import NotFoundError, ValidationError
from .events import emit_file_event
from .naming import blob_stem, public_url
from .records import Video
from .storage import RecordStore
from .teachers import TeacherCatalog


LOGGER = logging.getLogger(__name__)


class VideoCatalog:
    """Create, list and delete videos whose files live in ``blob_dir``."""

    def __init__(self, store: RecordStore, teachers: TeacherCatalog, blob_dir: Path) -> None:
        self._store = store
        self._teachers = teachers
        self._blob_dir = blob_dir

    @property
    def blob_dir(self) -> Path:
        return self._blob_dir

    def blob_path(self, file_name: str) -> Path:
        """Return the on-disk location of *file_name* inside the blob store."""

        name = Path(file_name).name
        if not name or name in {".", ".."}:
            raise ValidationError(f"Invalid blob name '{file_name}'")
        return self._blob_dir / name

    def list(self, teacher_id: Optional[str] = None) -> List[Video]:
        videos = self._store.videos.load()
        if teacher_id:
            videos = [video for video in videos if video.teacher_id == teacher_id]
        return videos

    def get(self, video_id: str) -> Optional[Video]:
        for video in self._store.videos.load():
            if video.id == video_id:
                return video
        return None

    def create(
        self,
        teacher_id: str,
        title: str,
        description: str,
        stored_blob_name: str,
    ) -> Video:
        """Register an already stored blob as a video of *teacher_id*.

        The record id is the blob's base name, so the record and its file
        always share one identifier.
        """

        if not teacher_id:
            raise ValidationError("teacherId is required")
        if not self._teachers.exists(teacher_id):
            raise NotFoundError(f"Teacher '{teacher_id}' not found")
        blob = self.blob_path(stored_blob_name)
        if not blob.is_file():
            raise ValidationError(f"Stored video file '{stored_blob_name}' does not exist")

        video = Video(
            id=blob_stem(blob.name),
            teacher_id=teacher_id,
            title=title,
            description=description,
            file_name=blob.name,
            url=public_url(blob.name),
            created_at=int(time.time() * 1000),
        )
        with self._store.videos.update() as videos:
            videos.append(video)
        LOGGER.info("Registered video %s for teacher %s", video.id, teacher_id)
        return video

    def delete(self, video_id: str) -> Video:
        """Remove the record and, best effort, its blob.

        The blob is only touched once the record is gone from disk, so a
        failed save leaves both in place.
        """

        with self._store.videos.update() as videos:
            video = next((item for item in videos if item.id == video_id), None)
            if video is None:
                raise NotFoundError(f"Video '{video_id}' not found")
            videos[:] = [item for item in videos if item.id != video_id]
        self._remove_blob(video.file_name)
        LOGGER.info("Deleted video %s", video_id)
        return video

    def _remove_blob(self, file_name: str) -> None:
        start = time.perf_counter()
        try:
            target = self.blob_path(file_name)
            existed = target.exists()
            target.unlink(missing_ok=True)
        except (OSError, ValidationError) as error:
            emit_file_event(
                "remove_blob_failed",
                payload={"file_name": file_name, "error": f"{error.__class__.__name__}: {error}"},
                duration_ms=(time.perf_counter() - start) * 1000.0,
                level=logging.WARNING,
            )
            return
        emit_file_event(
            "remove_blob",
            payload={"file_name": file_name, "existed": existed},
            duration_ms=(time.perf_counter() - start) * 1000.0,
        )


__all__ = ["VideoCatalog"]
