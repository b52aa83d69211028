"""Shared helpers for building overview snapshots of the catalog."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Dict, List

from ..services.catalog import CatalogServices
from ..services.records import TeacherSummary, Video


@dataclass
class TeacherOverview:
    summary: TeacherSummary
    videos: List[Video]


@dataclass
class OverviewSnapshot:
    teachers: List[TeacherOverview]
    teacher_count: int
    video_count: int
    request_totals: Dict[str, int]


def collect_overview(services: CatalogServices) -> OverviewSnapshot:
    """Aggregate catalog data into a convenient snapshot for UIs."""

    videos = services.videos.list()
    by_teacher: Dict[str, List[Video]] = {}
    for video in videos:
        by_teacher.setdefault(video.teacher_id, []).append(video)

    teachers = [
        TeacherOverview(summary=summary, videos=by_teacher.get(summary.teacher.id, []))
        for summary in services.teachers.list_with_video_counts()
    ]
    statuses = Counter(request.status.value for request in services.requests.list())

    return OverviewSnapshot(
        teachers=teachers,
        teacher_count=len(teachers),
        video_count=len(videos),
        request_totals={status: statuses.get(status, 0) for status in ("pending", "approved", "declined")},
    )


__all__ = ["OverviewSnapshot", "TeacherOverview", "collect_overview"]
