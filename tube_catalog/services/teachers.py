"""Teacher catalog backed by the ``teachers`` collection."""

from __future__ import annotations

import logging
from collections import Counter
from typing import List, Optional, Tuple

from .naming import new_id
from .records import Teacher, TeacherSummary
from .storage import RecordStore


LOGGER = logging.getLogger(__name__)


class TeacherCatalog:
    """Query and create teachers; video counts are computed on demand."""

    def __init__(self, store: RecordStore) -> None:
        self._store = store

    def list(self) -> List[Teacher]:
        return self._store.teachers.load()

    def list_with_video_counts(self) -> List[TeacherSummary]:
        """Return every teacher with the number of videos referencing it."""

        teachers = self._store.teachers.load()
        counts = Counter(video.teacher_id for video in self._store.videos.load())
        return [TeacherSummary(teacher=teacher, video_count=counts.get(teacher.id, 0)) for teacher in teachers]

    def get(self, teacher_id: str) -> Optional[Teacher]:
        for teacher in self._store.teachers.load():
            if teacher.id == teacher_id:
                return teacher
        return None

    def exists(self, teacher_id: str) -> bool:
        return self.get(teacher_id) is not None

    def exists_by_name_subject(self, name: str, subject: str) -> bool:
        return any(
            teacher.name == name and teacher.subject == subject
            for teacher in self._store.teachers.load()
        )

    def create(self, name: str, subject: str, nickname: str = "") -> Teacher:
        teacher = Teacher(id=new_id("t"), name=name, subject=subject, nickname=nickname)
        with self._store.teachers.update() as teachers:
            teachers.append(teacher)
        LOGGER.info("Created teacher %s (%s, %s)", teacher.id, name, subject)
        return teacher

    def ensure(self, name: str, subject: str, nickname: str = "") -> Tuple[Teacher, bool]:
        """Return the teacher matching ``(name, subject)``, creating it when absent.

        The lookup and the insert happen under the collection lock, so two
        callers in this process can never both create the same pair.
        """

        collection = self._store.teachers
        with collection.lock:
            for teacher in collection.load():
                if teacher.name == name and teacher.subject == subject:
                    return teacher, False
            teacher = Teacher(id=new_id("t"), name=name, subject=subject, nickname=nickname)
            with collection.update() as teachers:
                teachers.append(teacher)
        LOGGER.info("Created teacher %s (%s, %s)", teacher.id, name, subject)
        return teacher, True


__all__ = ["TeacherCatalog"]
