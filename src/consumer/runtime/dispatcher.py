"""
Work dispatcher (execution runtime).

Responsibilities:
- Assign a process-unique sequence number to each accepted payload
- Build a Job through the JobFactory (`create`)
- Run it (`process`) with a fresh per-request JobContext
- Translate the outcome into the HTTP status Pub/Sub reads as ack / nack

NOTE:
- Every job failure stops here and becomes a DispatchResult.
- Task cancellation is not a job failure: the context is cancelled and the
  CancelledError is re-raised to the host.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Dict, Optional

import anyio
import anyio.to_thread

from src.consumer.jobs.errors import JobError, classify_exception
from src.consumer.jobs.types import JobContext, JobFactory
from src.consumer.logging.logger import setup_logger
from src.consumer.runtime.outcome import CLASSIFIED_POLICY, FailurePolicy, Outcome
from src.consumer.runtime.sequence import SequenceCounter

logger = setup_logger(__name__)


@dataclass(frozen=True)
class DispatchResult:
    sequence: int
    outcome: Outcome
    status_code: int
    detail: str = ""


class WorkDispatcher:
    def __init__(
        self,
        *,
        job_factory: JobFactory,
        warehouse: Any,
        document_store: Any,
        counter: SequenceCounter,
        policy: FailurePolicy = CLASSIFIED_POLICY,
        limiter: Optional[anyio.CapacityLimiter] = None,
    ) -> None:
        self.job_factory = job_factory
        self.warehouse = warehouse
        self.document_store = document_store
        self.counter = counter
        self.policy = policy
        # None falls back to anyio's shared default limiter
        self.limiter = limiter

    async def dispatch(
        self,
        payload: bytes,
        *,
        message_id: str = "",
        subscription: str = "",
        attributes: Optional[Dict[str, str]] = None,
    ) -> DispatchResult:
        sequence = self.counter.next()
        ctx = JobContext(
            sequence=sequence,
            message_id=message_id,
            subscription=subscription,
            attributes=dict(attributes or {}),
        )

        try:
            job = await anyio.to_thread.run_sync(
                self.job_factory.create,
                payload,
                sequence,
                self.warehouse,
                self.document_store,
                abandon_on_cancel=True,
                limiter=self.limiter,
            )
        except asyncio.CancelledError:
            self._on_cancelled(ctx, stage="create")
            raise
        except Exception as exc:
            # Unclassified construction errors are permanent
            error = classify_exception(exc, default_retryable=False)
            return self._failed(ctx, error, stage="create")

        try:
            await anyio.to_thread.run_sync(
                job.process, ctx, abandon_on_cancel=True, limiter=self.limiter
            )
        except asyncio.CancelledError:
            self._on_cancelled(ctx, stage="process")
            raise
        except Exception as exc:
            error = classify_exception(exc, default_retryable=True)
            return self._failed(ctx, error, stage="process")

        logger.info(
            "Job done, acking message | sequence=%s | message_id=%s",
            sequence,
            message_id,
        )
        return DispatchResult(
            sequence=sequence,
            outcome=Outcome.SUCCEEDED,
            status_code=self.policy.status_for(Outcome.SUCCEEDED),
        )

    def _failed(self, ctx: JobContext, error: JobError, *, stage: str) -> DispatchResult:
        outcome = Outcome.FAILED_RETRYABLE if error.retryable else Outcome.FAILED_PERMANENT
        status_code = self.policy.status_for(outcome)
        logger.error(
            "Failed to %s job | sequence=%s | message_id=%s | outcome=%s | status=%s | error=%s",
            stage,
            ctx.sequence,
            ctx.message_id,
            outcome.value,
            status_code,
            error,
        )
        return DispatchResult(
            sequence=ctx.sequence,
            outcome=outcome,
            status_code=status_code,
            detail=f"Failed to {stage} job {ctx.sequence}: {error}",
        )

    @staticmethod
    def _on_cancelled(ctx: JobContext, *, stage: str) -> None:
        ctx.cancel()
        logger.warning(
            "Request cancelled, job abandoned | stage=%s | sequence=%s | message_id=%s",
            stage,
            ctx.sequence,
            ctx.message_id,
        )
