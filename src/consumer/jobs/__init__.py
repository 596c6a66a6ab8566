"""
Job abstraction package.

Public API:
- JobFactory / Job protocols and the per-request JobContext
- JobError taxonomy (retryable vs permanent)
- ApplicationEventJobFactory, the production job
"""

from src.consumer.jobs.application_event import ApplicationEventJobFactory
from src.consumer.jobs.errors import JobError, PermanentJobError, RetryableJobError, classify_exception
from src.consumer.jobs.types import Job, JobContext, JobFactory

__all__ = [
    "ApplicationEventJobFactory",
    "Job",
    "JobContext",
    "JobError",
    "JobFactory",
    "PermanentJobError",
    "RetryableJobError",
    "classify_exception",
]
