"""Audit sinks - where AuditEntry values end up.

Sinks are append-only: there is no update or delete. Entries never carry
emails or tokens, only identifiers and status values.
"""

import logging
import threading
from typing import Protocol

from portal.core.audit import AuditEntry
from portal.db.enums import AuditOutcome

logger = logging.getLogger(__name__)


class AuditSink(Protocol):
    def append(self, entry: AuditEntry) -> None: ...

    def list_for_resource(self, resource_id: str) -> list[AuditEntry]: ...


class InMemoryAuditSink:
    """Ordered, append-only store."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: list[AuditEntry] = []

    def append(self, entry: AuditEntry) -> None:
        with self._lock:
            self._entries.append(entry)

    def list_for_resource(self, resource_id: str) -> list[AuditEntry]:
        with self._lock:
            return [e for e in self._entries if e.resource_id == resource_id]

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


def _loggable(entry: AuditEntry) -> dict:
    """Entry fields for the log line, without the free-text reason."""
    data = entry.to_dict()
    data.pop("reason", None)
    return data


class LoggingAuditSink:
    """Emit one structured log line per entry, then delegate to `inner`."""

    def __init__(self, inner: AuditSink, log: logging.Logger | None = None) -> None:
        self._inner = inner
        self._log = log or logger

    def append(self, entry: AuditEntry) -> None:
        level = logging.INFO if entry.outcome == AuditOutcome.APPLIED else logging.WARNING
        self._log.log(
            level,
            "audit %s",
            entry.event_type.value,
            extra={"audit": _loggable(entry)},
        )
        self._inner.append(entry)

    def list_for_resource(self, resource_id: str) -> list[AuditEntry]:
        return self._inner.list_for_resource(resource_id)
