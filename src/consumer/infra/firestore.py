"""
Firestore client initialisation.

Errors propagate; the service must not serve traffic without this client.
"""

from __future__ import annotations

from google.cloud import firestore

from src.consumer.config.settings import settings
from src.consumer.logging.logger import setup_logger

logger = setup_logger(__name__)


def init_firestore_client() -> firestore.Client:
    logger.info(
        "Initializing Firestore client | project=%s | database=%s",
        settings.gcp_project_id or "(default)",
        settings.firestore_database,
    )
    try:
        client = firestore.Client(
            project=settings.gcp_project_id,
            database=settings.firestore_database,
        )
    except Exception as exc:
        logger.error("Failed to initialize Firestore client", exc_info=exc)
        raise

    logger.info("Firestore client initialized | project=%s", client.project)
    return client


def close_firestore_client(client: firestore.Client) -> None:
    try:
        client.close()
        logger.info("Firestore client closed")
    except Exception as exc:
        logger.warning("Error closing Firestore client", exc_info=exc)
