"""FastAPI application exposing the catalog over HTTP."""

from __future__ import annotations

import asyncio
import contextvars
import functools
import logging
import uuid
from typing import Any, Dict, Optional

from fastapi import FastAPI, File, Form, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel
from starlette.types import ASGIApp, Receive, Scope, Send

from ..config import AppConfig
from ..services.catalog import CatalogServices
from ..services.errors import (
    CatalogError,
    NotFoundError,
    PayloadTooLargeError,
    StorageIOError,
    ValidationError,
)
from ..services.naming import UPLOADS_URL_PREFIX


_REQUEST_ID_VAR: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "tube_catalog_request_id",
    default=None,
)

_ERROR_STATUS = (
    (ValidationError, 400),
    (NotFoundError, 404),
    (PayloadTooLargeError, 413),
    (StorageIOError, 500),
)


class ContextualLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that injects the current request id into records."""

    def process(self, msg: Any, kwargs: Dict[str, Any]) -> tuple[Any, Dict[str, Any]]:  # type: ignore[override]
        extra: Dict[str, Any] = dict(self.extra)
        provided = kwargs.get("extra")
        if isinstance(provided, dict):
            extra.update(provided)
        request_id = _REQUEST_ID_VAR.get()
        if request_id:
            extra.setdefault("request_id", request_id)
            msg = f"{msg} [request_id={request_id}]"
        kwargs["extra"] = extra
        return msg, kwargs


LOGGER = ContextualLoggerAdapter(logging.getLogger(__name__), {})


class RequestContextMiddleware:
    """Assign a correlation identifier to each request and expose it via contextvars."""

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope.get("type") != "http":
            await self.app(scope, receive, send)
            return

        token = _REQUEST_ID_VAR.set(uuid.uuid4().hex)
        try:
            await self.app(scope, receive, send)
        finally:
            _REQUEST_ID_VAR.reset(token)


class TeacherRequestPayload(BaseModel):
    name: Optional[str] = None
    subject: Optional[str] = None


def _status_for(error: CatalogError) -> int:
    for error_type, code in _ERROR_STATUS:
        if isinstance(error, error_type):
            return code
    return 500


def _normalize_root_path(root_path: Optional[str]) -> str:
    if root_path is None:
        return ""
    normalized = root_path.strip()
    if not normalized:
        return ""
    if not normalized.startswith("/"):
        normalized = f"/{normalized}"
    return normalized.rstrip("/")


def create_app(
    services: CatalogServices,
    *,
    config: AppConfig,
    root_path: str | None = None,
) -> FastAPI:
    """Return a configured FastAPI application."""

    app = FastAPI(
        title="Tube Catalog",
        description="Teachers, their videos and teacher requests",
        root_path=_normalize_root_path(root_path),
    )
    app.state.server = None
    app.state.services = services
    app.add_middleware(RequestContextMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    config.uploads_dir.mkdir(parents=True, exist_ok=True)
    app.mount(UPLOADS_URL_PREFIX, StaticFiles(directory=config.uploads_dir), name="uploads")

    @app.exception_handler(CatalogError)
    async def handle_catalog_error(request: Request, error: CatalogError) -> JSONResponse:
        code = _status_for(error)
        if code >= 500:
            LOGGER.error("%s %s failed: %s", request.method, request.url.path, error)
        else:
            LOGGER.info("%s %s rejected (%s): %s", request.method, request.url.path, code, error)
        return JSONResponse(status_code=code, content={"error": str(error)})

    async def _run_blocking(operation, *args: Any) -> Any:
        loop = asyncio.get_running_loop()
        context = contextvars.copy_context()
        call = functools.partial(context.run, operation, *args)
        return await loop.run_in_executor(None, call)

    @app.get("/api/teachers")
    async def list_teachers() -> Dict[str, Any]:
        summaries = services.teachers.list_with_video_counts()
        return {"teachers": [summary.to_payload() for summary in summaries]}

    @app.get("/api/videos")
    async def list_videos(teacherId: Optional[str] = None) -> Dict[str, Any]:
        videos = services.videos.list(teacherId)
        return {"videos": [video.to_payload() for video in videos]}

    @app.post("/api/upload")
    async def upload_video(
        video: Optional[UploadFile] = File(None),
        teacherId: Optional[str] = Form(None),
        title: str = Form(""),
        description: str = Form(""),
    ) -> Dict[str, Any]:
        if video is None:
            raise ValidationError("video file is required")
        LOGGER.info(
            "Uploading '%s' (%s) for teacher %s",
            video.filename,
            video.content_type,
            teacherId,
        )
        try:
            record = await _run_blocking(
                services.ingestor.ingest,
                teacherId,
                title,
                description,
                video.file,
                video.content_type,
                video.filename,
            )
        finally:
            await video.close()
        return {"ok": True, "video": record.to_payload()}

    @app.delete("/api/videos/{video_id}")
    async def delete_video(video_id: str) -> Dict[str, Any]:
        services.videos.delete(video_id)
        return {"ok": True}

    @app.get("/api/requests")
    async def list_requests() -> Dict[str, Any]:
        return {"requests": [request.to_payload() for request in services.requests.list()]}

    @app.post("/api/requests")
    async def submit_request(payload: TeacherRequestPayload) -> Dict[str, Any]:
        request = services.requests.submit(payload.name, payload.subject)
        return {"ok": True, "request": request.to_payload()}

    @app.post("/api/requests/{request_id}/approve")
    async def approve_request(request_id: str) -> Dict[str, Any]:
        services.requests.approve(request_id)
        return {"ok": True}

    @app.post("/api/requests/{request_id}/decline")
    async def decline_request(request_id: str) -> Dict[str, Any]:
        services.requests.decline(request_id)
        return {"ok": True}

    return app


__all__ = ["ContextualLoggerAdapter", "RequestContextMiddleware", "create_app"]
