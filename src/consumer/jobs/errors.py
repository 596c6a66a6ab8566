"""
Job failure taxonomy.

Every failure raised out of `JobFactory.create` or `Job.process` is either
retryable (redelivering the same message may succeed) or permanent
(redelivering will fail the same way). The dispatcher only looks at
`JobError.retryable`; foreign exceptions are classified first.
"""

from __future__ import annotations

from google.api_core import exceptions as google_exceptions
from pydantic import ValidationError


class JobError(Exception):
    retryable: bool = True

    def __init__(self, message: str, *, retryable: bool | None = None) -> None:
        super().__init__(message)
        if retryable is not None:
            self.retryable = retryable


class RetryableJobError(JobError):
    """Transient failure: downstream unavailable, timeout, throttling, cancellation."""

    retryable = True


class PermanentJobError(JobError):
    """Malformed payload, rejected rows, data-integrity conflicts."""

    retryable = False


_RETRYABLE_CLIENT_ERRORS = (
    google_exceptions.TooManyRequests,
    google_exceptions.Aborted,
)


def is_retryable_exception(exc: BaseException, *, default: bool) -> bool:
    """
    Decide retryability for an exception that is not a JobError.

    `default` is used when nothing about the exception says otherwise.
    """
    if isinstance(exc, JobError):
        return exc.retryable
    if isinstance(exc, google_exceptions.ServerError):
        return True
    if isinstance(exc, _RETRYABLE_CLIENT_ERRORS):
        return True
    if isinstance(exc, google_exceptions.ClientError):
        return False
    if isinstance(exc, google_exceptions.RetryError):
        return True
    if isinstance(exc, (ConnectionError, TimeoutError)):
        return True
    if isinstance(exc, (ValidationError, UnicodeDecodeError, ValueError)):
        return False
    return default


def classify_exception(exc: BaseException, *, default_retryable: bool) -> JobError:
    """Wrap any exception into the JobError taxonomy (JobErrors pass through)."""
    if isinstance(exc, JobError):
        return exc
    retryable = is_retryable_exception(exc, default=default_retryable)
    message = f"{exc.__class__.__name__}: {exc}"
    if retryable:
        return RetryableJobError(message)
    return PermanentJobError(message)
