"""
Application event job.

Payload (JSON, one event per message):

    {"operation": "add", "objectID": "...", "userID": "...",
     "company": "...", "role": "...", "status": "...",
     "appliedDate": 1718000000, "link": "...", "locations": ["..."]}

Processing:
1) Skip if the Firestore ledger already marks this payload as done
2) Stream one row into the BigQuery events table
3) Mark the payload done in the Firestore ledger

Idempotency is keyed on the SHA-256 of the payload bytes, never on the
sequence number. BigQuery also gets it as the insertId for best-effort dedup.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Optional

from google.cloud import firestore
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from src.consumer.config.settings import settings
from src.consumer.infra.bigquery import events_table_id
from src.consumer.jobs.errors import PermanentJobError, RetryableJobError
from src.consumer.jobs.types import JobContext
from src.consumer.logging.logger import setup_logger

logger = setup_logger(__name__)

# insertAll per-row error reasons worth another delivery
RETRYABLE_INSERT_REASONS = frozenset(
    {"backendError", "internalError", "timeout", "rateLimitExceeded", "stopped"}
)


class ApplicationEvent(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    operation: Literal["add", "edit", "delete"]
    object_id: str = Field(alias="objectID", min_length=1)
    user_id: str = Field(alias="userID", min_length=1)
    company: Optional[str] = None
    role: Optional[str] = None
    status: Optional[str] = None
    applied_date: Optional[int] = Field(default=None, alias="appliedDate")
    link: Optional[str] = None
    locations: List[str] = Field(default_factory=list)


def payload_key(payload: bytes) -> str:
    return hashlib.sha256(payload).hexdigest()


@dataclass
class ApplicationEventJob:
    sequence: int
    event: ApplicationEvent
    event_key: str
    warehouse: Any
    document_store: Any

    def process(self, ctx: JobContext) -> None:
        ctx.raise_if_cancelled()
        ledger = self.document_store.collection(settings.firestore_collection).document(self.event_key)

        snapshot = ledger.get()
        if snapshot.exists and (snapshot.to_dict() or {}).get("state") == "done":
            logger.info(
                "Event already processed, skipping | sequence=%s | event_key=%s | object_id=%s",
                self.sequence,
                self.event_key,
                self.event.object_id,
            )
            return

        ctx.raise_if_cancelled()
        self._insert_row(ctx)

        # Row is in; record it even if the request was cancelled meanwhile
        ledger.set(
            {
                "state": "done",
                "sequence": self.sequence,
                "operation": self.event.operation,
                "objectID": self.event.object_id,
                "userID": self.event.user_id,
                "messageId": ctx.message_id,
                "processedAt": firestore.SERVER_TIMESTAMP,
            }
        )
        logger.info(
            "Event processed | sequence=%s | operation=%s | object_id=%s | user_id=%s",
            self.sequence,
            self.event.operation,
            self.event.object_id,
            self.event.user_id,
        )

    def _build_row(self, ctx: JobContext) -> Dict[str, Any]:
        return {
            "event_key": self.event_key,
            "message_id": ctx.message_id,
            "operation": self.event.operation,
            "object_id": self.event.object_id,
            "user_id": self.event.user_id,
            "company": self.event.company,
            "role": self.event.role,
            "status": self.event.status,
            "applied_date": self.event.applied_date,
            "link": self.event.link,
            "locations": list(self.event.locations),
            "received_at": datetime.now(timezone.utc).isoformat(),
        }

    def _insert_row(self, ctx: JobContext) -> None:
        table_id = events_table_id(self.warehouse)
        errors = self.warehouse.insert_rows_json(
            table_id,
            [self._build_row(ctx)],
            row_ids=[self.event_key],
        )
        if not errors:
            return

        reasons = {
            (err.get("reason") or "")
            for entry in errors
            for err in entry.get("errors", [])
        }
        message = f"BigQuery rejected row for {table_id}: {errors}"
        if reasons and reasons <= RETRYABLE_INSERT_REASONS:
            raise RetryableJobError(message)
        raise PermanentJobError(message)


class ApplicationEventJobFactory:
    def create(
        self,
        payload: bytes,
        sequence: int,
        warehouse: Any,
        document_store: Any,
    ) -> ApplicationEventJob:
        if not payload:
            raise PermanentJobError(f"job {sequence}: empty payload")

        try:
            event = ApplicationEvent.model_validate_json(payload)
        except ValidationError as exc:
            raise PermanentJobError(
                f"job {sequence}: payload is not a valid application event ({exc.error_count()} errors)"
            ) from exc

        return ApplicationEventJob(
            sequence=sequence,
            event=event,
            event_key=payload_key(payload),
            warehouse=warehouse,
            document_store=document_store,
        )
