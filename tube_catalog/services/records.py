"""Record types persisted by the catalog and their JSON mapping."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Mapping, Type, TypeVar


class RecordSchemaError(ValueError):
    """Raised when a persisted record does not match its expected shape."""


class RequestStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    DECLINED = "declined"

    @property
    def is_terminal(self) -> bool:
        return self is not RequestStatus.PENDING


T = TypeVar("T")


def _require(payload: Mapping[str, Any], key: str, expected: Type[T]) -> T:
    if key not in payload:
        raise RecordSchemaError(f"Missing required field '{key}'")
    value = payload[key]
    # bool is an int subclass but never a valid timestamp.
    if not isinstance(value, expected) or (expected is int and isinstance(value, bool)):
        raise RecordSchemaError(
            f"Field '{key}' must be {expected.__name__}, got {type(value).__name__}"
        )
    return value


def _ensure_mapping(payload: Any) -> Mapping[str, Any]:
    if not isinstance(payload, Mapping):
        raise RecordSchemaError(f"Expected a JSON object, got {type(payload).__name__}")
    return payload


@dataclass
class Teacher:
    id: str
    name: str
    subject: str
    nickname: str = ""

    @classmethod
    def from_payload(cls, payload: Any) -> "Teacher":
        payload = _ensure_mapping(payload)
        nickname = payload.get("nickname", "")
        if not isinstance(nickname, str):
            raise RecordSchemaError("Field 'nickname' must be str")
        return cls(
            id=_require(payload, "id", str),
            name=_require(payload, "name", str),
            subject=_require(payload, "subject", str),
            nickname=nickname,
        )

    def to_payload(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "subject": self.subject,
            "nickname": self.nickname,
        }


@dataclass
class TeacherSummary:
    """A teacher together with the number of videos referencing it."""

    teacher: Teacher
    video_count: int

    def to_payload(self) -> Dict[str, Any]:
        return {**self.teacher.to_payload(), "videoCount": self.video_count}


@dataclass
class Video:
    id: str
    teacher_id: str
    title: str
    description: str
    file_name: str
    url: str
    created_at: int

    @classmethod
    def from_payload(cls, payload: Any) -> "Video":
        payload = _ensure_mapping(payload)
        return cls(
            id=_require(payload, "id", str),
            teacher_id=_require(payload, "teacherId", str),
            title=_require(payload, "title", str),
            description=_require(payload, "description", str),
            file_name=_require(payload, "fileName", str),
            url=_require(payload, "url", str),
            created_at=_require(payload, "createdAt", int),
        )

    def to_payload(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "teacherId": self.teacher_id,
            "title": self.title,
            "description": self.description,
            "fileName": self.file_name,
            "url": self.url,
            "createdAt": self.created_at,
        }


@dataclass
class TeacherRequest:
    id: str
    name: str
    subject: str
    status: RequestStatus
    created_at: int

    @classmethod
    def from_payload(cls, payload: Any) -> "TeacherRequest":
        payload = _ensure_mapping(payload)
        raw_status = _require(payload, "status", str)
        try:
            status = RequestStatus(raw_status)
        except ValueError as error:
            raise RecordSchemaError(f"Unknown request status '{raw_status}'") from error
        return cls(
            id=_require(payload, "id", str),
            name=_require(payload, "name", str),
            subject=_require(payload, "subject", str),
            status=status,
            created_at=_require(payload, "createdAt", int),
        )

    def to_payload(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "subject": self.subject,
            "status": self.status.value,
            "createdAt": self.created_at,
        }


__all__ = [
    "RecordSchemaError",
    "RequestStatus",
    "Teacher",
    "TeacherRequest",
    "TeacherSummary",
    "Video",
]
