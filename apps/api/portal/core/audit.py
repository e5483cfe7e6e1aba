"""Audit entries for status change attempts.

An AuditEntry is built once per attempt, applied or rejected, and never
modified afterwards. Building an entry has no side effects; handing it to a
sink is the caller's job.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any
from uuid import UUID, uuid4

from portal.db.enums import AuditEventType, AuditOutcome


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _value(status: Any) -> str | None:
    if status is None:
        return None
    if isinstance(status, Enum):
        return str(status.value)
    return str(status)


@dataclass(frozen=True)
class AuditEntry:
    event_type: AuditEventType
    resource_id: str
    actor_id: str
    outcome: AuditOutcome = AuditOutcome.APPLIED
    old_status: str | None = None
    new_status: str | None = None
    old_broker_status: str | None = None
    new_broker_status: str | None = None
    reason: str | None = None
    error_kind: str | None = None
    id: UUID = field(default_factory=uuid4)
    occurred_at: datetime = field(default_factory=_utcnow)

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready representation."""
        data = asdict(self)
        data["id"] = str(self.id)
        data["event_type"] = self.event_type.value
        data["outcome"] = self.outcome.value
        data["occurred_at"] = self.occurred_at.isoformat()
        return data


def build_status_audit_entry(
    resource_id: str,
    actor_id: str,
    old_status: Any,
    new_status: Any,
    reason: str | None = None,
) -> AuditEntry:
    """Record an applied quote status change."""
    return AuditEntry(
        event_type=AuditEventType.QUOTE_STATUS_CHANGED,
        resource_id=resource_id,
        actor_id=actor_id,
        old_status=_value(old_status),
        new_status=_value(new_status),
        reason=reason,
    )


def build_broker_status_audit_entry(
    resource_id: str,
    actor_id: str,
    old_broker_status: Any,
    new_broker_status: Any,
    reason: str | None = None,
) -> AuditEntry:
    """Record an applied broker status change."""
    return AuditEntry(
        event_type=AuditEventType.QUOTE_BROKER_STATUS_CHANGED,
        resource_id=resource_id,
        actor_id=actor_id,
        old_broker_status=_value(old_broker_status),
        new_broker_status=_value(new_broker_status),
        reason=reason,
    )


def build_rejected_audit_entry(
    resource_id: str,
    actor_id: str,
    error_kind: str,
    *,
    broker: bool = False,
    current: Any = None,
    requested: Any = None,
    reason: str | None = None,
) -> AuditEntry:
    """
    Record an attempt that did not take effect.

    error_kind is one of invalid_status, illegal_transition, forbidden or
    company_scope_violation. Access denials get ACCESS_DENIED regardless of
    track; transition rejections get the track's *_REJECTED event.
    """
    if error_kind in ("forbidden", "company_scope_violation"):
        event_type = AuditEventType.ACCESS_DENIED
    elif broker:
        event_type = AuditEventType.QUOTE_BROKER_STATUS_CHANGE_REJECTED
    else:
        event_type = AuditEventType.QUOTE_STATUS_CHANGE_REJECTED

    status_fields: dict[str, str | None]
    if broker:
        status_fields = {
            "old_broker_status": _value(current),
            "new_broker_status": _value(requested),
        }
    else:
        status_fields = {"old_status": _value(current), "new_status": _value(requested)}

    return AuditEntry(
        event_type=event_type,
        resource_id=resource_id,
        actor_id=actor_id,
        outcome=AuditOutcome.REJECTED,
        error_kind=error_kind,
        reason=reason,
        **status_fields,
    )
