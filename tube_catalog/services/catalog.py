"""Wiring of the catalog services around one record store."""

from __future__ import annotations

from dataclasses import dataclass

from ..config import AppConfig
from .ingestion import VideoIngestor
from .storage import RecordStore
from .teacher_requests import RequestWorkflow
from .teachers import TeacherCatalog
from .videos import VideoCatalog


@dataclass
class CatalogServices:
    store: RecordStore
    teachers: TeacherCatalog
    videos: VideoCatalog
    ingestor: VideoIngestor
    requests: RequestWorkflow

    @classmethod
    def from_config(cls, config: AppConfig) -> "CatalogServices":
        store = RecordStore.from_config(config)
        teachers = TeacherCatalog(store)
        videos = VideoCatalog(store, teachers, config.uploads_dir)
        return cls(
            store=store,
            teachers=teachers,
            videos=videos,
            ingestor=VideoIngestor(config, teachers, videos),
            requests=RequestWorkflow(store, teachers),
        )


__all__ = ["CatalogServices"]
