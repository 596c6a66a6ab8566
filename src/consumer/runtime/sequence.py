"""
Process-wide job sequence numbers.

The counter is the only mutable state shared between concurrent deliveries.
Values are a correlation aid for logs: unique within one running process, meaningless
across restarts or replicas, and never used as an idempotency key.
"""

from __future__ import annotations

import threading


class SequenceCounter:
    def __init__(self, start: int = 0) -> None:
        self._value = start
        self._lock = threading.Lock()

    def next(self) -> int:
        """Increment and return the new value as one indivisible step."""
        with self._lock:
            self._value += 1
            return self._value

    @property
    def current(self) -> int:
        with self._lock:
            return self._value
