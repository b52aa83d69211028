from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from tube_catalog.bootstrap import Bootstrapper
from tube_catalog.config import MAX_UPLOAD_ENV, AppConfig
from tube_catalog.services.catalog import CatalogServices


@pytest.fixture()
def temp_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> AppConfig:
    monkeypatch.delenv(MAX_UPLOAD_ENV, raising=False)
    monkeypatch.chdir(tmp_path)

    config = AppConfig.from_mapping(
        {
            "storage_root": "storage",
            "data_dir": "storage/data",
            "uploads_dir": "storage/uploads",
            "max_upload_bytes": 1024,
        },
        base_path=tmp_path,
    )

    Bootstrapper(config).initialize()
    return config


@pytest.fixture()
def services(temp_config: AppConfig) -> CatalogServices:
    return CatalogServices.from_config(temp_config)
