"""
BigQuery client initialisation.

Responsibilities:
- Build the process-wide BigQuery client from settings
- Resolve the fully-qualified events table id
- Log client lifecycle clearly

NOTE:
- Errors propagate; the service must not serve traffic without this client.
"""

from __future__ import annotations

from google.cloud import bigquery

from src.consumer.config.settings import settings
from src.consumer.logging.logger import setup_logger

logger = setup_logger(__name__)


def init_bigquery_client() -> bigquery.Client:
    logger.info(
        "Initializing BigQuery client | project=%s | dataset=%s | location=%s",
        settings.gcp_project_id or "(default)",
        settings.bigquery_dataset,
        settings.bigquery_location or "(default)",
    )
    try:
        client = bigquery.Client(
            project=settings.gcp_project_id,
            location=settings.bigquery_location,
        )
    except Exception as exc:
        logger.error("Failed to initialize BigQuery client", exc_info=exc)
        raise

    logger.info("BigQuery client initialized | project=%s", client.project)
    return client


def events_table_id(client: bigquery.Client) -> str:
    return f"{client.project}.{settings.bigquery_dataset}.{settings.bigquery_table}"
