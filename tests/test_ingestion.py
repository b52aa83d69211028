from __future__ import annotations

import io
from pathlib import Path

import pytest

from tube_catalog.bootstrap import DEFAULT_TEACHER
from tube_catalog.config import AppConfig
from tube_catalog.services.catalog import CatalogServices
from tube_catalog.services.errors import (
    NotFoundError,
    PayloadTooLargeError,
    StorageIOError,
    ValidationError,
)


def _uploads(config: AppConfig) -> list[str]:
    return sorted(path.name for path in config.uploads_dir.iterdir())


def test_ingest_stores_blob_then_registers_video(services: CatalogServices, temp_config: AppConfig) -> None:
    video = services.ingestor.ingest(
        DEFAULT_TEACHER.id,
        "  Rivers of Europe ",
        " Danube and Rhine ",
        io.BytesIO(b"fake video payload"),
        "video/quicktime",
        "rivers.MOV",
    )

    assert video.title == "Rivers of Europe"
    assert video.description == "Danube and Rhine"
    assert video.file_name == f"{video.id}.mov"
    assert video.id.startswith("v_")
    assert _uploads(temp_config) == [video.file_name]
    assert (temp_config.uploads_dir / video.file_name).read_bytes() == b"fake video payload"
    assert [item.id for item in services.videos.list(DEFAULT_TEACHER.id)] == [video.id]


def test_missing_extension_defaults_to_mp4(services: CatalogServices) -> None:
    video = services.ingestor.ingest(
        DEFAULT_TEACHER.id, "t", "d", io.BytesIO(b"x"), "video/mp4", "recording"
    )

    assert video.file_name.endswith(".mp4")


def test_non_video_content_type_is_rejected(services: CatalogServices, temp_config: AppConfig) -> None:
    with pytest.raises(ValidationError):
        services.ingestor.ingest(
            DEFAULT_TEACHER.id, "t", "d", io.BytesIO(b"png"), "image/png", "picture.png"
        )

    assert _uploads(temp_config) == []
    assert services.videos.list() == []


def test_mislabelled_upload_is_accepted(services: CatalogServices) -> None:
    video = services.ingestor.ingest(
        DEFAULT_TEACHER.id, "t", "d", io.BytesIO(b"\x89PNG\r\n"), "video/mp4", "picture.png"
    )

    assert video.file_name.endswith(".png")


@pytest.mark.parametrize("teacher_id", ["", "   ", None])
def test_missing_teacher_id_is_rejected(
    services: CatalogServices, temp_config: AppConfig, teacher_id
) -> None:
    with pytest.raises(ValidationError):
        services.ingestor.ingest(teacher_id, "t", "d", io.BytesIO(b"x"), "video/mp4", "a.mp4")

    assert _uploads(temp_config) == []


def test_unknown_teacher_is_rejected(services: CatalogServices, temp_config: AppConfig) -> None:
    with pytest.raises(NotFoundError):
        services.ingestor.ingest("t_missing", "t", "d", io.BytesIO(b"x"), "video/mp4", "a.mp4")

    assert _uploads(temp_config) == []


def test_oversized_upload_leaves_no_file(services: CatalogServices, temp_config: AppConfig) -> None:
    assert services.ingestor.max_bytes == 1024

    with pytest.raises(PayloadTooLargeError) as excinfo:
        services.ingestor.ingest(
            DEFAULT_TEACHER.id, "t", "d", io.BytesIO(b"x" * 1025), "video/mp4", "big.mp4"
        )

    assert excinfo.value.limit == 1024
    assert _uploads(temp_config) == []
    assert services.videos.list() == []


def test_upload_at_exact_limit_is_accepted(services: CatalogServices) -> None:
    video = services.ingestor.ingest(
        DEFAULT_TEACHER.id, "t", "d", io.BytesIO(b"x" * 1024), "video/mp4", "edge.mp4"
    )

    assert services.videos.get(video.id) is not None


def test_blob_is_removed_when_registration_fails(
    services: CatalogServices, temp_config: AppConfig, monkeypatch
) -> None:
    def failing_save(records) -> None:
        raise StorageIOError("disk full")

    monkeypatch.setattr(services.store.videos, "save", failing_save)

    with pytest.raises(StorageIOError):
        services.ingestor.ingest(
            DEFAULT_TEACHER.id, "t", "d", io.BytesIO(b"x"), "video/mp4", "a.mp4"
        )

    assert _uploads(temp_config) == []


def test_record_is_not_visible_while_blob_is_written(
    services: CatalogServices, temp_config: AppConfig
) -> None:
    observed: list[int] = []

    class ObservingStream(io.BytesIO):
        def read(self, size: int = -1) -> bytes:
            observed.append(len(services.videos.list()))
            return super().read(size)

    services.ingestor.ingest(
        DEFAULT_TEACHER.id, "t", "d", ObservingStream(b"y" * 10), "video/mp4", "a.mp4"
    )

    assert observed and set(observed) == {0}
    assert len(services.videos.list()) == 1


def test_unbounded_when_limit_disabled(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.delenv("TUBE_CATALOG_MAX_UPLOAD_BYTES", raising=False)
    config = AppConfig.from_mapping(
        {
            "storage_root": "storage",
            "data_dir": "storage/data",
            "uploads_dir": "storage/uploads",
            "max_upload_bytes": 0,
        },
        base_path=tmp_path,
    )
    from tube_catalog.bootstrap import Bootstrapper

    Bootstrapper(config).initialize()
    services = CatalogServices.from_config(config)

    video = services.ingestor.ingest(
        DEFAULT_TEACHER.id, "t", "d", io.BytesIO(b"z" * 5000), "video/mp4", "a.mp4"
    )

    assert (config.uploads_dir / video.file_name).stat().st_size == 5000
