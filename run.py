"""Entry-point for the Tube Catalog service."""

from __future__ import annotations

import inspect
import logging
import mimetypes
from enum import Enum
from pathlib import Path
from typing import NoReturn, Optional

import typer
import uvicorn

from tube_catalog.bootstrap import initialize_app
from tube_catalog.logging_utils import build_handlers, configure_logging
from tube_catalog.services.catalog import CatalogServices
from tube_catalog.services.errors import CatalogError
from tube_catalog.ui.console import ConsoleUI
from tube_catalog.ui.modern import ModernUI
from tube_catalog.web import create_app


LOGGER = logging.getLogger("tube_catalog.cli")


cli = typer.Typer(add_completion=False, help="Tube Catalog management commands")


DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 3000


def _prepare_logging(storage_root: Path) -> None:
    configure_logging(handlers=build_handlers(storage_root))


def _load_services() -> CatalogServices:
    config = initialize_app()
    _prepare_logging(config.storage_root)
    return CatalogServices.from_config(config)


def _fail(error: CatalogError) -> NoReturn:
    typer.echo(f"Error: {error}", err=True)
    raise typer.Exit(code=1) from error


class UIStyle(str, Enum):
    MODERN = "modern"
    CONSOLE = "console"


@cli.callback(invoke_without_command=True)
def main(ctx: typer.Context) -> None:
    """Launch the web server when no explicit command is provided."""

    if ctx.invoked_subcommand is None:
        ctx.invoke(serve, host=DEFAULT_HOST, port=DEFAULT_PORT, root_path=None)


@cli.command()
def serve(
    host: str = typer.Option(DEFAULT_HOST, help="Host interface for the web server"),
    port: int = typer.Option(DEFAULT_PORT, help="Port for the web server"),
    root_path: Optional[str] = typer.Option(
        None,
        help="Prefix the application expects when mounted behind a proxy",
        envvar="TUBE_CATALOG_ROOT_PATH",
    ),
) -> None:
    """Run the FastAPI server."""

    app_config = initialize_app()
    _prepare_logging(app_config.storage_root)

    services = CatalogServices.from_config(app_config)
    app = create_app(services, config=app_config, root_path=root_path)

    config_kwargs = {}
    max_upload_bytes = app_config.max_upload_bytes
    if max_upload_bytes > 0:
        config_signature = inspect.signature(uvicorn.Config.__init__)
        if "limit_max_request_size" in config_signature.parameters:
            config_kwargs["limit_max_request_size"] = max_upload_bytes
        else:
            LOGGER.debug(
                "uvicorn.Config does not support 'limit_max_request_size'; "
                "relying on the upload pipeline ceiling.",
            )

    server_config = uvicorn.Config(
        app,
        host=host,
        port=port,
        log_config=None,
        **config_kwargs,
    )
    server = uvicorn.Server(server_config)
    app.state.server = server
    LOGGER.info("Tube Catalog running at http://%s:%s", host, port)
    server.run()


@cli.command()
def overview(
    style: UIStyle = typer.Option(
        UIStyle.MODERN,
        "--style",
        "-s",
        help="Select the overview presentation style.",
        show_default=True,
    ),
) -> None:
    """Render teachers, their videos and request totals."""

    services = _load_services()
    ui = ModernUI(services) if style is UIStyle.MODERN else ConsoleUI(services)
    ui.run()


@cli.command()
def upload(
    video: Path = typer.Argument(
        ...,
        exists=True,
        file_okay=True,
        dir_okay=False,
        resolve_path=True,
        help="Path to the video file to add.",
    ),
    teacher_id: str = typer.Option(..., "--teacher-id", help="Identifier of the owning teacher"),
    title: str = typer.Option("", help="Video title"),
    description: str = typer.Option("", help="Video description"),
    mime_type: Optional[str] = typer.Option(
        None,
        help="Declared content type; guessed from the file name when omitted",
    ),
) -> None:
    """Add a local video file to the catalog."""

    services = _load_services()
    declared = mime_type or mimetypes.guess_type(video.name)[0] or ""
    try:
        with video.open("rb") as source:
            record = services.ingestor.ingest(teacher_id, title, description, source, declared, video.name)
    except CatalogError as error:
        _fail(error)
    typer.echo(f"Stored video {record.id} at {record.url}")


@cli.command("requests")
def list_requests() -> None:
    """List teacher requests."""

    services = _load_services()
    entries = services.requests.list()
    if not entries:
        typer.echo("No requests.")
    for entry in entries:
        typer.echo(f"{entry.id}  {entry.status.value:<8}  {entry.name} – {entry.subject}")


@cli.command("submit-request")
def submit_request(
    name: str = typer.Argument(..., help="Teacher name"),
    subject: str = typer.Argument(..., help="Subject taught"),
) -> None:
    """Submit a request to add a teacher."""

    services = _load_services()
    try:
        request = services.requests.submit(name, subject)
    except CatalogError as error:
        _fail(error)
    typer.echo(f"Submitted request {request.id}")


@cli.command()
def approve(request_id: str = typer.Argument(..., help="Request identifier")) -> None:
    """Approve a pending request, adding the teacher if needed."""

    services = _load_services()
    try:
        request = services.requests.approve(request_id)
    except CatalogError as error:
        _fail(error)
    typer.echo(f"Request {request.id} is {request.status.value}")


@cli.command()
def decline(request_id: str = typer.Argument(..., help="Request identifier")) -> None:
    """Decline a pending request."""

    services = _load_services()
    try:
        request = services.requests.decline(request_id)
    except CatalogError as error:
        _fail(error)
    typer.echo(f"Request {request.id} is {request.status.value}")


if __name__ == "__main__":
    cli()
