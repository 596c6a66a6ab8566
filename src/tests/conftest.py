"""In-memory stand-ins for the BigQuery and Firestore clients."""

from __future__ import annotations

import base64
import json
import logging
import threading
from typing import Any, Dict, List, Optional, Tuple

import pytest


class FakeSnapshot:
    def __init__(self, data: Optional[Dict[str, Any]]) -> None:
        self._data = data

    @property
    def exists(self) -> bool:
        return self._data is not None

    def to_dict(self) -> Optional[Dict[str, Any]]:
        return dict(self._data) if self._data is not None else None


class FakeDocument:
    def __init__(self, store: "FakeFirestore", path: Tuple[str, str]) -> None:
        self._store = store
        self._path = path

    def get(self) -> FakeSnapshot:
        if self._store.get_error is not None:
            raise self._store.get_error
        return FakeSnapshot(self._store.docs.get(self._path))

    def set(self, data: Dict[str, Any], merge: bool = False) -> None:
        with self._store.lock:
            self._store.docs[self._path] = dict(data)


class FakeCollection:
    def __init__(self, store: "FakeFirestore", name: str) -> None:
        self._store = store
        self._name = name

    def document(self, doc_id: str) -> FakeDocument:
        return FakeDocument(self._store, (self._name, doc_id))


class FakeFirestore:
    def __init__(self) -> None:
        self.docs: Dict[Tuple[str, str], Dict[str, Any]] = {}
        self.get_error: Optional[BaseException] = None
        self.closed = False
        self.lock = threading.Lock()

    def collection(self, name: str) -> FakeCollection:
        return FakeCollection(self, name)

    def close(self) -> None:
        self.closed = True


class FakeBigQuery:
    project = "test-project"

    def __init__(self) -> None:
        self.inserts: List[Dict[str, Any]] = []
        self.errors_to_return: List[Dict[str, Any]] = []
        self.raise_on_insert: Optional[BaseException] = None
        self.lock = threading.Lock()

    def insert_rows_json(self, table: str, json_rows: List[Dict[str, Any]], row_ids=None):
        if self.raise_on_insert is not None:
            raise self.raise_on_insert
        if self.errors_to_return:
            return list(self.errors_to_return)
        with self.lock:
            self.inserts.append({"table": table, "rows": list(json_rows), "row_ids": list(row_ids or [])})
        return []


def push_body(data: bytes, message_id: str = "m1", subscription: str = "sub-a", **extra: Any) -> bytes:
    message: Dict[str, Any] = {"data": base64.b64encode(data).decode("ascii"), "id": message_id}
    message.update(extra)
    return json.dumps({"message": message, "subscription": subscription}).encode("utf-8")


@pytest.fixture
def fake_bigquery() -> FakeBigQuery:
    return FakeBigQuery()


@pytest.fixture
def fake_firestore() -> FakeFirestore:
    return FakeFirestore()


@pytest.fixture
def make_push_body():
    return push_body


class RecordingJob:
    def __init__(self, factory: "RecordingJobFactory", sequence: int) -> None:
        self.factory = factory
        self.sequence = sequence

    def process(self, ctx) -> None:
        self.factory.processed.append(ctx)
        if self.factory.barrier is not None:
            self.factory.barrier.wait()
        if self.factory.process_error is not None:
            raise self.factory.process_error


class RecordingJobFactory:
    """Scriptable JobFactory that records every create/process call."""

    def __init__(
        self,
        *,
        create_error: Optional[BaseException] = None,
        process_error: Optional[BaseException] = None,
        barrier: Optional[threading.Barrier] = None,
    ) -> None:
        self.create_error = create_error
        self.process_error = process_error
        self.barrier = barrier
        self.created: List[Tuple[bytes, int, Any, Any]] = []
        self.processed: List[Any] = []
        self._lock = threading.Lock()

    def create(self, payload: bytes, sequence: int, warehouse: Any, document_store: Any) -> RecordingJob:
        with self._lock:
            self.created.append((payload, sequence, warehouse, document_store))
        if self.create_error is not None:
            raise self.create_error
        return RecordingJob(self, sequence)


@pytest.fixture
def job_factory() -> RecordingJobFactory:
    return RecordingJobFactory()


class ListHandler(logging.Handler):
    def __init__(self) -> None:
        super().__init__()
        self.records: List[logging.LogRecord] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)

    def messages(self, level: int = logging.NOTSET) -> List[str]:
        return [r.getMessage() for r in self.records if r.levelno >= level]


@pytest.fixture
def capture_logs():
    """Attach a ListHandler to a module logger (they don't propagate to root)."""
    attached: List[Tuple[logging.Logger, logging.Handler]] = []

    def _capture(name: str) -> ListHandler:
        handler = ListHandler()
        target = logging.getLogger(name)
        target.addHandler(handler)
        attached.append((target, handler))
        return handler

    yield _capture

    for target, handler in attached:
        target.removeHandler(handler)
