"""Plain-text overview for terminals without Rich styling."""

from __future__ import annotations

from typing import Iterable

from ..services.catalog import CatalogServices
from .overview import TeacherOverview, collect_overview


class ConsoleUI:
    """Minimal console UI that prints teachers and their videos."""

    def __init__(self, services: CatalogServices) -> None:
        self._services = services

    def run(self) -> None:
        snapshot = collect_overview(self._services)
        print("Tube Catalog – Console Overview")
        print("=" * 40)
        if not snapshot.teachers:
            print("(no teachers)")
        for overview in snapshot.teachers:
            teacher = overview.summary.teacher
            title = f"{teacher.name} – {teacher.subject} [{overview.summary.video_count} video(s)]"
            print(title)
            print("-" * len(title))
            for line in self._format_videos(overview):
                print(line)
            print()
        totals = ", ".join(f"{status}: {count}" for status, count in snapshot.request_totals.items())
        print(f"Requests – {totals}")

    @staticmethod
    def _format_videos(overview: TeacherOverview) -> Iterable[str]:
        if not overview.videos:
            yield "  (no videos)"
            return
        for video in overview.videos:
            yield f"  {video.id}: {video.title or video.file_name} -> {video.url}"


__all__ = ["ConsoleUI"]
