"""Workflow for requests to add new teachers."""

from __future__ import annotations

import logging
import time
from typing import List, Optional

from .errors import NotFoundError, ValidationError
from .naming import new_id
from .records import RequestStatus, TeacherRequest
from .storage import RecordStore
from .teachers import TeacherCatalog


LOGGER = logging.getLogger(__name__)


class RequestWorkflow:
    """Submit, approve and decline teacher requests.

    A request starts ``pending`` and moves once to ``approved`` or
    ``declined``. Approving or declining a request that already left
    ``pending`` changes nothing. The request and the teacher it may create
    are saved separately; a crash between the two saves can leave an
    approved request without its teacher.
    """

    def __init__(self, store: RecordStore, teachers: TeacherCatalog) -> None:
        self._store = store
        self._teachers = teachers

    def list(self) -> List[TeacherRequest]:
        return self._store.requests.load()

    def get(self, request_id: str) -> Optional[TeacherRequest]:
        for request in self._store.requests.load():
            if request.id == request_id:
                return request
        return None

    def submit(self, name: Optional[str], subject: Optional[str]) -> TeacherRequest:
        name = (name or "").strip()
        subject = (subject or "").strip()
        if not name or not subject:
            raise ValidationError("name and subject are required")

        request = TeacherRequest(
            id=new_id("r"),
            name=name,
            subject=subject,
            status=RequestStatus.PENDING,
            created_at=int(time.time() * 1000),
        )
        with self._store.requests.update() as requests:
            requests.append(request)
        LOGGER.info("Submitted teacher request %s (%s, %s)", request.id, name, subject)
        return request

    def approve(self, request_id: str) -> TeacherRequest:
        request, changed = self._transition(request_id, RequestStatus.APPROVED)
        if changed:
            teacher, created = self._teachers.ensure(request.name, request.subject)
            if not created:
                LOGGER.info(
                    "Request %s approved; teacher %s already covers (%s, %s)",
                    request_id,
                    teacher.id,
                    request.name,
                    request.subject,
                )
        return request

    def decline(self, request_id: str) -> TeacherRequest:
        request, _ = self._transition(request_id, RequestStatus.DECLINED)
        return request

    def _transition(self, request_id: str, target: RequestStatus) -> tuple[TeacherRequest, bool]:
        collection = self._store.requests
        with collection.lock:
            current = next((item for item in collection.load() if item.id == request_id), None)
            if current is None:
                raise NotFoundError(f"Request '{request_id}' not found")
            if current.status.is_terminal:
                LOGGER.info(
                    "Ignoring %s of request %s; it is already %s",
                    target.value,
                    request_id,
                    current.status.value,
                )
                return current, False
            with collection.update() as requests:
                request = next(item for item in requests if item.id == request_id)
                request.status = target
        LOGGER.info("Request %s marked %s", request_id, target.value)
        return request, True


__all__ = ["RequestWorkflow"]
