"""Tests for the run.py entrypoint helpers."""

from __future__ import annotations

from types import SimpleNamespace

import pytest
from typer.testing import CliRunner

import run
from tube_catalog.bootstrap import DEFAULT_TEACHER
from tube_catalog.services.catalog import CatalogServices


def _setup_serve(monkeypatch, tmp_path, upload_limit):
    captured = {}

    monkeypatch.setattr(
        run,
        "initialize_app",
        lambda: SimpleNamespace(storage_root=tmp_path, max_upload_bytes=upload_limit),
    )
    monkeypatch.setattr(run, "_prepare_logging", lambda storage_root: None)
    monkeypatch.setattr(run.CatalogServices, "from_config", classmethod(lambda cls, config: object()))

    dummy_app = SimpleNamespace(state=SimpleNamespace())
    monkeypatch.setattr(run, "create_app", lambda services, config, root_path: dummy_app)

    class DummyConfig:
        def __init__(self, app, limit_max_request_size=None, **kwargs):
            captured["app"] = app
            if limit_max_request_size is not None:
                kwargs["limit_max_request_size"] = limit_max_request_size
            captured["config_kwargs"] = kwargs

    class DummyServer:
        def __init__(self, config):
            captured["server_config"] = config
            captured["server_instance"] = self

        def run(self):
            captured["server_run"] = True

    monkeypatch.setattr(run.uvicorn, "Config", DummyConfig)
    monkeypatch.setattr(run.uvicorn, "Server", DummyServer)

    run.serve(host="0.0.0.0", port=9000, root_path="/api")

    captured["app_state_server"] = dummy_app.state.server
    return captured


def test_serve_applies_request_size_limit(monkeypatch, tmp_path):
    captured = _setup_serve(monkeypatch, tmp_path, upload_limit=50 * 1024 * 1024)

    assert captured["config_kwargs"]["limit_max_request_size"] == 50 * 1024 * 1024
    assert captured["app_state_server"] is captured["server_instance"]
    assert captured["server_run"] is True


def test_serve_omits_limit_when_disabled(monkeypatch, tmp_path):
    captured = _setup_serve(monkeypatch, tmp_path, upload_limit=0)

    assert "limit_max_request_size" not in captured["config_kwargs"]


@pytest.fixture()
def cli_services(monkeypatch, services: CatalogServices) -> CatalogServices:
    monkeypatch.setattr(run, "_load_services", lambda: services)
    return services


def test_request_commands(cli_services: CatalogServices) -> None:
    runner = CliRunner()

    submitted = runner.invoke(run.cli, ["submit-request", "Ann", "Math"])
    assert submitted.exit_code == 0
    request_id = cli_services.requests.list()[0].id

    approved = runner.invoke(run.cli, ["approve", request_id])
    assert approved.exit_code == 0
    assert "approved" in approved.output
    assert cli_services.teachers.exists_by_name_subject("Ann", "Math")

    listed = runner.invoke(run.cli, ["requests"])
    assert request_id in listed.output

    missing = runner.invoke(run.cli, ["decline", "r_missing"])
    assert missing.exit_code == 1


def test_upload_command_guesses_mime_type(cli_services: CatalogServices, tmp_path) -> None:
    source = tmp_path / "lesson.mp4"
    source.write_bytes(b"frames")
    runner = CliRunner()

    result = runner.invoke(run.cli, ["upload", str(source), "--teacher-id", DEFAULT_TEACHER.id, "--title", "Lesson"])

    assert result.exit_code == 0, result.output
    videos = cli_services.videos.list(DEFAULT_TEACHER.id)
    assert [video.title for video in videos] == ["Lesson"]


def test_upload_command_rejects_non_video(cli_services: CatalogServices, tmp_path) -> None:
    source = tmp_path / "notes.txt"
    source.write_text("hello", encoding="utf-8")

    result = CliRunner().invoke(run.cli, ["upload", str(source), "--teacher-id", DEFAULT_TEACHER.id])

    assert result.exit_code == 1
    assert cli_services.videos.list() == []


def test_overview_console_style(cli_services: CatalogServices) -> None:
    result = CliRunner().invoke(run.cli, ["overview", "--style", "console"])

    assert result.exit_code == 0
    assert DEFAULT_TEACHER.name in result.output


def test_fail_never_returns() -> None:
    assert run._fail.__annotations__["return"] == "NoReturn"

    with pytest.raises(run.typer.Exit) as excinfo:
        run._fail(run.CatalogError("boom"))

    assert excinfo.value.exit_code == 1
