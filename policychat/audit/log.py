"""Append-only diagnostic log."""

import threading
from collections.abc import Iterator

from policychat.audit.models import ApiCallRecord
from policychat.observability.logging import get_logger

logger = get_logger(__name__)


class DiagnosticLog:
    """Insertion-ordered record of every remote call attempted.

    Records are never reordered, deduplicated or evicted. Appends are
    guarded by a lock so call sites on other threads can share one log.
    """

    def __init__(self) -> None:
        self._records: list[ApiCallRecord] = []
        self._lock = threading.Lock()

    def record(self, entry: ApiCallRecord) -> None:
        """Append a record."""
        with self._lock:
            self._records.append(entry)
            position = len(self._records)

        logger.debug(
            "api_call_recorded",
            position=position,
            method=entry.http_method,
            endpoint=entry.endpoint_path,
            status_code=entry.status_code,
            succeeded=entry.succeeded,
        )

    def snapshot(self) -> tuple[ApiCallRecord, ...]:
        """Return the records in the order they were appended."""
        with self._lock:
            return tuple(self._records)

    def failures(self) -> tuple[ApiCallRecord, ...]:
        """Return only the records of calls that failed."""
        return tuple(r for r in self.snapshot() if not r.succeeded)

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def __iter__(self) -> Iterator[ApiCallRecord]:
        return iter(self.snapshot())
