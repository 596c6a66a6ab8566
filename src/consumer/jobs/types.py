from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any, Dict, Protocol

from src.consumer.jobs.errors import RetryableJobError


@dataclass
class JobContext:
    """
    Per-request execution context handed to `Job.process`.

    Created fresh for every delivery. Jobs should call `raise_if_cancelled()`
    before each downstream call; there is no deadline here.
    """

    sequence: int
    message_id: str = ""
    subscription: str = ""
    attributes: Dict[str, str] = field(default_factory=dict)
    _cancelled: threading.Event = field(default_factory=threading.Event, init=False, repr=False)

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def raise_if_cancelled(self) -> None:
        if self._cancelled.is_set():
            raise RetryableJobError(f"job {self.sequence} cancelled")


class Job(Protocol):
    sequence: int

    def process(self, ctx: JobContext) -> None: ...


class JobFactory(Protocol):
    """
    Builds a Job from a raw payload.

    Raises JobError (or anything classify_exception understands) when the
    payload cannot become a Job.
    """

    def create(
        self,
        payload: bytes,
        sequence: int,
        warehouse: Any,
        document_store: Any,
    ) -> Job: ...
