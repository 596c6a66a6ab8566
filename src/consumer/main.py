"""
FastAPI service entrypoint.

Responsibilities:
- Create FastAPI app
- Initialize BigQuery + Firestore clients at startup (fatal on failure)
- Wire the WorkDispatcher and register the push + health routes
- Run under uvicorn on $PORT (default 8080)

IMPORTANT:
- Push-based subscription only; Pub/Sub POSTs each message to us.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional

import anyio
import uvicorn
from fastapi import FastAPI

from src.consumer.api.health import router as health_router
from src.consumer.api.pubsub_push import router as pubsub_router
from src.consumer.config.settings import settings
from src.consumer.infra.bigquery import init_bigquery_client
from src.consumer.infra.firestore import close_firestore_client, init_firestore_client
from src.consumer.jobs.application_event import ApplicationEventJobFactory
from src.consumer.jobs.types import JobFactory
from src.consumer.logging.logger import setup_logger
from src.consumer.runtime.dispatcher import WorkDispatcher
from src.consumer.runtime.outcome import get_failure_policy
from src.consumer.runtime.sequence import SequenceCounter

logger = setup_logger(__name__)


def create_app(
    *,
    warehouse_client: Any = None,
    document_store_client: Any = None,
    job_factory: Optional[JobFactory] = None,
    counter: Optional[SequenceCounter] = None,
) -> FastAPI:
    """
    FastAPI application factory.

    Clients passed in are used as-is and not closed on shutdown; otherwise they
    are created from settings when the app starts.
    """
    policy = get_failure_policy(settings.failure_policy)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        warehouse = warehouse_client if warehouse_client is not None else init_bigquery_client()
        document_store = (
            document_store_client if document_store_client is not None else init_firestore_client()
        )

        app.state.dispatcher = WorkDispatcher(
            job_factory=job_factory or ApplicationEventJobFactory(),
            warehouse=warehouse,
            document_store=document_store,
            counter=counter or SequenceCounter(settings.job_sequence_start),
            policy=policy,
            limiter=anyio.CapacityLimiter(settings.job_max_threads),
        )
        logger.info(
            "Push subscription consumer ready | path=%s | failure_policy=%s | job_max_threads=%s | sequence_start=%s",
            settings.push_path,
            policy.name,
            settings.job_max_threads,
            app.state.dispatcher.counter.current,
        )
        try:
            yield
        finally:
            app.state.dispatcher = None
            if document_store_client is None:
                close_firestore_client(document_store)

    app = FastAPI(title="Pub/Sub Push Consumer", lifespan=lifespan)
    app.state.dispatcher = None

    app.include_router(health_router)
    app.include_router(pubsub_router)

    logger.info("FastAPI push consumer initialized | env=%s", settings.app_env)
    return app


# ASGI entrypoint (required by uvicorn)
app = create_app()


def run() -> None:
    logger.info("Starting push subscription server | port=%s", settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.app_log_level.lower())


if __name__ == "__main__":
    run()
