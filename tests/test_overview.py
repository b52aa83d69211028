from __future__ import annotations

import io

from rich.console import Console

from tube_catalog.bootstrap import DEFAULT_TEACHER
from tube_catalog.config import AppConfig
from tube_catalog.services.catalog import CatalogServices
from tube_catalog.ui.modern import ModernUI
from tube_catalog.ui.overview import collect_overview


def test_collect_overview_groups_videos_by_teacher(services: CatalogServices) -> None:
    services.ingestor.ingest(DEFAULT_TEACHER.id, "Rivers", "", io.BytesIO(b"x"), "video/mp4", "a.mp4")
    services.requests.submit("Ann", "Math")
    declined = services.requests.submit("Bob", "Art")
    services.requests.decline(declined.id)

    snapshot = collect_overview(services)

    assert snapshot.teacher_count == 1
    assert snapshot.video_count == 1
    assert [video.title for video in snapshot.teachers[0].videos] == ["Rivers"]
    assert snapshot.request_totals == {"pending": 1, "approved": 0, "declined": 1}


def test_modern_ui_renders_teachers_and_videos(services: CatalogServices) -> None:
    services.ingestor.ingest(DEFAULT_TEACHER.id, "Rivers", "", io.BytesIO(b"x"), "video/mp4", "a.mp4")
    console = Console(record=True, width=160, force_terminal=False)

    ModernUI(services, console=console).run()

    output = console.export_text()
    assert DEFAULT_TEACHER.name in output
    assert "Rivers" in output


def test_modern_ui_reports_empty_catalog(services: CatalogServices, temp_config: AppConfig) -> None:
    services.store.teachers.save([])
    console = Console(record=True, width=160, force_terminal=False)

    ModernUI(services, console=console).run()

    assert "No teachers are registered yet" in console.export_text()
