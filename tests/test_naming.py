from __future__ import annotations

import re

import pytest

from tube_catalog.services import naming
from tube_catalog.services.naming import blob_stem, build_blob_name, new_id, public_url


_ID_PATTERN = re.compile(r"^(?P<prefix>[a-z]+)_(?P<stamp>\d{13,})_(?P<suffix>[0-9a-f]{16})$")


def test_new_id_format() -> None:
    match = _ID_PATTERN.match(new_id("t"))

    assert match is not None
    assert match.group("prefix") == "t"


def test_burst_of_ids_is_unique_and_ordered() -> None:
    ids = [new_id("r") for _ in range(2000)]

    assert len(set(ids)) == len(ids)
    stamps = [int(_ID_PATTERN.match(value).group("stamp")) for value in ids]
    assert stamps == sorted(stamps)


def test_timestamp_never_moves_backwards(monkeypatch) -> None:
    readings = [5_000_000_000_000_000_000, 4_000_000_000_000_000_000]
    monkeypatch.setattr(naming.time, "time_ns", lambda: readings.pop(0) if readings else 4_000_000_000_000_000_000)
    monkeypatch.setattr(naming, "_last_timestamp_ms", 0)

    first = new_id("v")
    second = new_id("v")

    assert first.split("_")[1] == second.split("_")[1] == "5000000000000"


@pytest.mark.parametrize(
    ("original", "extension"),
    [
        ("lesson.MOV", ".mov"),
        ("clip.webm", ".webm"),
        ("archive.tar.mkv", ".mkv"),
        ("C:\\Users\\me\\video.avi", ".avi"),
        ("no_extension", ".mp4"),
        ("", ".mp4"),
        (None, ".mp4"),
        ("weird.m p4", ".mp4"),
    ],
)
def test_blob_name_extension(original, extension) -> None:
    name = build_blob_name(original)

    assert name.startswith("v_")
    assert name.endswith(extension)
    assert _ID_PATTERN.match(blob_stem(name)) is not None


def test_public_url_is_derived_from_file_name() -> None:
    assert public_url("v_1_ab.mp4") == "/uploads/v_1_ab.mp4"
    assert blob_stem("v_1_ab.mp4") == "v_1_ab"
