"""File-backed record store: one pretty-printed JSON array per collection."""

from __future__ import annotations

import contextlib
import json
import logging
import os
import secrets
import threading
import time
from pathlib import Path
from typing import (
    Any,
    Callable,
    Dict,
    Generic,
    Iterable,
    Iterator,
    List,
    Optional,
    Protocol,
    Sequence,
    Type,
    TypeVar,
)

from ..config import AppConfig
from .errors import StorageIOError
from .events import emit_store_event
from .records import RecordSchemaError, Teacher, TeacherRequest, Video


LOGGER = logging.getLogger(__name__)


class SerializableRecord(Protocol):
    def to_payload(self) -> Dict[str, Any]:
        ...


R = TypeVar("R", bound=SerializableRecord)


_LOCKS: Dict[Path, threading.RLock] = {}
_LOCKS_GUARD = threading.Lock()


def _lock_for(path: Path) -> threading.RLock:
    """Return the process-wide lock guarding the collection file at *path*."""

    key = path.resolve()
    with _LOCKS_GUARD:
        lock = _LOCKS.get(key)
        if lock is None:
            lock = threading.RLock()
            _LOCKS[key] = lock
        return lock


class CollectionStore(Generic[R]):
    """Load and save a whole collection of records stored in a single file.

    Reads never fail: a missing, unreadable or malformed file yields the
    fallback value. Writes replace the file in one step and raise
    :class:`StorageIOError` when the filesystem refuses them.
    """

    def __init__(
        self,
        path: Path,
        decode: Callable[[Any], R],
        *,
        name: Optional[str] = None,
    ) -> None:
        self._path = path
        self._decode = decode
        self._name = name or path.stem
        self._lock = _lock_for(path)

    @property
    def name(self) -> str:
        return self._name

    @property
    def path(self) -> Path:
        return self._path

    @property
    def lock(self) -> threading.RLock:
        return self._lock

    @contextlib.contextmanager
    def _track_store_event(self, action: str, **payload: Any) -> Iterator[Dict[str, Any]]:
        start = time.perf_counter()
        event_payload: Dict[str, Any] = {"collection": self._name, **payload}
        try:
            yield event_payload
        except Exception as exc:
            event_payload.setdefault("status", "error")
            event_payload.setdefault("error", f"{exc.__class__.__name__}: {exc}")
            raise
        finally:
            event_payload.setdefault("status", "ok")
            emit_store_event(
                action,
                payload=event_payload,
                duration_ms=(time.perf_counter() - start) * 1000.0,
            )

    def load(self, fallback: Optional[Sequence[R]] = None) -> List[R]:
        """Return the stored records, or a copy of *fallback* when unavailable."""

        default = list(fallback) if fallback is not None else []
        with self._track_store_event("load", path=self._path) as event:
            if not self._path.exists():
                event["status"] = "missing"
                return default
            try:
                raw = json.loads(self._path.read_text(encoding="utf-8"))
            except (OSError, UnicodeDecodeError, json.JSONDecodeError) as error:
                LOGGER.warning(
                    "Could not read %s collection from %s; using fallback: %s",
                    self._name,
                    self._path,
                    error,
                )
                event["status"] = "recovered"
                return default
            if not isinstance(raw, list):
                LOGGER.warning(
                    "Collection file %s does not hold a JSON array; using fallback",
                    self._path,
                )
                event["status"] = "recovered"
                return default
            try:
                records = [self._decode(item) for item in raw]
            except RecordSchemaError as error:
                LOGGER.warning(
                    "Collection file %s holds an invalid %s record; using fallback: %s",
                    self._path,
                    self._name,
                    error,
                )
                event["status"] = "recovered"
                return default
            event["count"] = len(records)
            return records

    def save(self, records: Iterable[R]) -> None:
        """Serialise *records* and replace the collection file."""

        payload = [record.to_payload() for record in records]
        text = json.dumps(payload, indent=2, ensure_ascii=False) + "\n"
        with self._track_store_event("save", path=self._path, count=len(payload)):
            temp_path = self._path.with_name(f".{self._path.name}.{secrets.token_hex(4)}.tmp")
            try:
                self._path.parent.mkdir(parents=True, exist_ok=True)
                temp_path.write_text(text, encoding="utf-8")
                os.replace(temp_path, self._path)
            except OSError as error:
                with contextlib.suppress(OSError):
                    temp_path.unlink()
                raise StorageIOError(
                    f"Failed to write {self._name} collection to '{self._path}': {error}"
                ) from error

    @contextlib.contextmanager
    def update(self) -> Iterator[List[R]]:
        """Hold the collection lock across a load-mutate-save sequence.

        The yielded list is saved when the block completes; an exception
        inside the block leaves the file untouched.
        """

        with self._lock:
            records = self.load()
            yield records
            self.save(records)


COLLECTION_TYPES: Dict[str, Type[Any]] = {
    "teachers": Teacher,
    "videos": Video,
    "requests": TeacherRequest,
}


class RecordStore:
    """Registry of the catalog's independently stored collections."""

    def __init__(self, data_dir: Path) -> None:
        self._data_dir = data_dir
        self._collections: Dict[str, CollectionStore[Any]] = {}
        self._guard = threading.Lock()

    @classmethod
    def from_config(cls, config: AppConfig) -> "RecordStore":
        return cls(config.data_dir)

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    def collection(self, name: str) -> CollectionStore[Any]:
        try:
            record_type = COLLECTION_TYPES[name]
        except KeyError:
            raise ValueError(f"Unknown collection '{name}'") from None
        with self._guard:
            store = self._collections.get(name)
            if store is None:
                store = CollectionStore(
                    self._data_dir / f"{name}.json",
                    record_type.from_payload,
                    name=name,
                )
                self._collections[name] = store
            return store

    @property
    def teachers(self) -> CollectionStore[Teacher]:
        return self.collection("teachers")

    @property
    def videos(self) -> CollectionStore[Video]:
        return self.collection("videos")

    @property
    def requests(self) -> CollectionStore[TeacherRequest]:
        return self.collection("requests")

    def load(self, name: str, fallback: Optional[Sequence[Any]] = None) -> List[Any]:
        return self.collection(name).load(fallback)

    def save(self, name: str, records: Iterable[Any]) -> None:
        self.collection(name).save(records)


__all__ = ["COLLECTION_TYPES", "CollectionStore", "RecordStore"]
