from typing import Literal

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # App
    app_env: str = "local"
    app_log_level: str = "INFO"

    # HTTP server (Cloud Run injects PORT)
    host: str = "0.0.0.0"
    port: int = Field(default=8080, validation_alias=AliasChoices("PORT", "port"))
    push_path: str = "/"

    # Google Cloud
    gcp_project_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices("GCP_PROJECT_ID", "GOOGLE_CLOUD_PROJECT", "gcp_project_id"),
    )

    # BigQuery (analytical warehouse)
    bigquery_dataset: str = "applications"
    bigquery_table: str = "application_events"
    bigquery_location: str | None = None

    # Firestore (lookup/state store)
    firestore_database: str = "(default)"
    firestore_collection: str = "processed_events"

    # Dispatch
    # The first delivery gets job_sequence_start + 1.
    job_sequence_start: int = 1
    # "classified": permanent failures -> 4xx, retryable -> 5xx
    # "retry_all": every failure -> 5xx (legacy behaviour)
    failure_policy: Literal["classified", "retry_all"] = "classified"
    # Worker threads reserved for job create/process, separate from Starlette's pool
    job_max_threads: int = Field(default=64, ge=1)

    # Receipt logging
    log_payload_max_chars: int = 2048

    model_config = SettingsConfigDict(
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
    )


settings = Settings()
