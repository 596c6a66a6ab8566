"""
Delivery outcome -> HTTP status policy.

Pub/Sub push reads the status code as the ack protocol:
- 200 with an empty body acknowledges the message
- 4xx means do-not-retry
- 5xx means redeliver later
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping


class Outcome(str, Enum):
    SUCCEEDED = "succeeded"
    FAILED_RETRYABLE = "failed_retryable"
    FAILED_PERMANENT = "failed_permanent"


@dataclass(frozen=True)
class FailurePolicy:
    name: str
    statuses: Mapping[Outcome, int]

    def status_for(self, outcome: Outcome) -> int:
        return self.statuses[outcome]


CLASSIFIED_POLICY = FailurePolicy(
    name="classified",
    statuses=MappingProxyType(
        {
            Outcome.SUCCEEDED: 200,
            Outcome.FAILED_RETRYABLE: 500,
            Outcome.FAILED_PERMANENT: 422,
        }
    ),
)

# Every failure is redelivered, permanent ones included.
RETRY_ALL_POLICY = FailurePolicy(
    name="retry_all",
    statuses=MappingProxyType(
        {
            Outcome.SUCCEEDED: 200,
            Outcome.FAILED_RETRYABLE: 500,
            Outcome.FAILED_PERMANENT: 500,
        }
    ),
)

_POLICIES = {p.name: p for p in (CLASSIFIED_POLICY, RETRY_ALL_POLICY)}


def get_failure_policy(name: str) -> FailurePolicy:
    try:
        return _POLICIES[name]
    except KeyError:
        raise ValueError(f"Unknown failure policy: {name!r}") from None
