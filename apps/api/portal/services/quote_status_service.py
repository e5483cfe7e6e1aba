"""Quote status changes: authorize, decide, compare-and-set, audit.

The pure decisions live in core.access_control and core.status_engine; this
module applies them. Access is always checked before the transition is
decided, so a denied principal never learns whether the move was legal.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, TypedDict

from portal.core.access_control import AuthorizationError, authorize
from portal.core.audit import (
    AuditEntry,
    build_broker_status_audit_entry,
    build_rejected_audit_entry,
    build_status_audit_entry,
)
from portal.core.config import settings
from portal.core.permissions import PermissionKey
from portal.core.policies import POLICIES
from portal.core.status_engine import (
    TransitionError,
    TransitionResult,
    get_valid_broker_transitions,
    get_valid_transitions,
    transition_broker_status,
    transition_status,
)
from portal.core.structured_logging import build_log_context
from portal.db.enums import BrokerStatus, QuoteStatus
from portal.db.repository import QuoteRepository
from portal.schemas.auth import Principal
from portal.schemas.quote import QuoteRecord
from portal.services.audit_service import AuditSink

logger = logging.getLogger(__name__)


# =============================================================================
# Errors
# =============================================================================

class QuoteStatusServiceError(Exception):
    """Base class for quote status change failures."""


class QuoteNotFoundError(QuoteStatusServiceError):
    def __init__(self, quote_id: str):
        self.quote_id = quote_id
        super().__init__(f"Quote {quote_id} not found")


class AuthorizationDenied(QuoteStatusServiceError):
    """Carries the Forbidden / CompanyScopeViolation that caused the denial."""

    def __init__(self, error: AuthorizationError):
        self.error = error
        super().__init__(error.kind)


class TransitionRejected(QuoteStatusServiceError):
    """Carries the InvalidStatus / IllegalTransition from the status engine."""

    def __init__(self, error: TransitionError, current: str):
        self.error = error
        self.current = current
        super().__init__(error.message)


class StaleStatusError(QuoteStatusServiceError):
    """The stored status changed between read and write."""

    def __init__(self, quote_id: str, expected: str, field: str):
        self.quote_id = quote_id
        self.expected = expected
        self.field = field
        super().__init__(f"Quote {quote_id} {field} is no longer '{expected}'")


class StatusChangeResult(TypedDict):
    """Result of an applied status change."""

    quote: QuoteRecord
    previous: str
    current: str
    audit_entry: AuditEntry


# =============================================================================
# Tracks
# =============================================================================

@dataclass(frozen=True)
class _Track:
    field: str
    broker: bool
    permission: PermissionKey
    decide: Callable[[Any, Any], TransitionResult]
    build_entry: Callable[..., AuditEntry]

    def current(self, quote: QuoteRecord) -> QuoteStatus | BrokerStatus:
        return quote.broker_status if self.broker else quote.status

    def compare_and_set(self, repo: QuoteRepository, quote_id: str, expected, new):
        if self.broker:
            return repo.compare_and_set_broker_status(quote_id, expected, new)
        return repo.compare_and_set_status(quote_id, expected, new)


STATUS_TRACK = _Track(
    field="status",
    broker=False,
    permission=POLICIES["quotes"].actions["change_status"],
    decide=transition_status,
    build_entry=build_status_audit_entry,
)

BROKER_STATUS_TRACK = _Track(
    field="broker_status",
    broker=True,
    permission=POLICIES["quotes"].actions["change_broker_status"],
    decide=transition_broker_status,
    build_entry=build_broker_status_audit_entry,
)


def _record_rejection(
    sink: AuditSink,
    track: _Track,
    principal: Principal,
    quote: QuoteRecord,
    error_kind: str,
    requested: Any,
    reason: str | None,
) -> None:
    if not settings.AUDIT_REJECTED_ATTEMPTS:
        return
    sink.append(
        build_rejected_audit_entry(
            quote.id,
            principal.id,
            error_kind,
            broker=track.broker,
            current=track.current(quote),
            requested=requested,
            reason=reason,
        )
    )


def _change(
    track: _Track,
    repo: QuoteRepository,
    sink: AuditSink,
    principal: Principal,
    quote_id: str,
    target: Any,
    reason: str | None,
) -> StatusChangeResult:
    quote = repo.get(quote_id)
    if quote is None:
        raise QuoteNotFoundError(quote_id)

    log_context = build_log_context(
        user_id=principal.id, company_id=quote.company_id, quote_id=quote.id
    )

    auth = authorize(principal, track.permission, quote.company_id)
    if not auth.ok:
        logger.warning(
            "quote_%s_change_denied kind=%s", track.field, auth.error.kind, extra=log_context
        )
        _record_rejection(sink, track, principal, quote, auth.error.kind, target, reason)
        raise AuthorizationDenied(auth.error)

    decision = track.decide(quote, target)
    if not decision.ok:
        logger.info(
            "quote_%s_change_rejected kind=%s", track.field, decision.error.kind, extra=log_context
        )
        _record_rejection(sink, track, principal, quote, decision.error.kind, target, reason)
        raise TransitionRejected(decision.error, decision.previous)

    expected = track.current(quote)
    updated = track.compare_and_set(repo, quote.id, expected, decision.value)
    if updated is None:
        logger.warning("quote_%s_change_conflict", track.field, extra=log_context)
        raise StaleStatusError(quote.id, expected.value, track.field)

    entry = track.build_entry(quote.id, principal.id, expected, decision.value, reason)
    sink.append(entry)
    logger.info(
        "quote_%s_changed from=%s to=%s",
        track.field,
        expected.value,
        decision.value.value,
        extra=log_context,
    )
    return StatusChangeResult(
        quote=updated,
        previous=expected.value,
        current=decision.value.value,
        audit_entry=entry,
    )


# =============================================================================
# Public API
# =============================================================================

def change_status(
    repo: QuoteRepository,
    sink: AuditSink,
    principal: Principal,
    quote_id: str,
    target: Any,
    reason: str | None = None,
) -> StatusChangeResult:
    """
    Move a quote along the customer-facing track.

    Raises:
        QuoteNotFoundError: no quote with this id
        AuthorizationDenied: missing edit_quotes or company out of scope
        TransitionRejected: unknown target or edge not in the table
        StaleStatusError: another writer changed the status first
    """
    return _change(STATUS_TRACK, repo, sink, principal, quote_id, target, reason)


def change_broker_status(
    repo: QuoteRepository,
    sink: AuditSink,
    principal: Principal,
    quote_id: str,
    target: Any,
    reason: str | None = None,
) -> StatusChangeResult:
    """Move a quote along the broker track. Raises as change_status."""
    return _change(BROKER_STATUS_TRACK, repo, sink, principal, quote_id, target, reason)


def allowed_actions(principal: Principal, quote: QuoteRecord) -> dict[str, Any]:
    """
    Capability view of a quote for one principal.

    UIs render buttons from this instead of checking roles themselves.
    """
    can_view = authorize(principal, POLICIES["quotes"].default, quote.company_id).ok
    can_edit_status = authorize(principal, STATUS_TRACK.permission, quote.company_id).ok
    can_edit_broker = authorize(principal, BROKER_STATUS_TRACK.permission, quote.company_id).ok

    valid = get_valid_transitions(quote.status)
    valid_broker = get_valid_broker_transitions(quote.broker_status)
    return {
        "can_view": can_view,
        "can_edit": can_edit_status,
        "next_statuses": [s for s in QuoteStatus if s in valid] if can_edit_status else [],
        "next_broker_statuses": (
            [s for s in BrokerStatus if s in valid_broker] if can_edit_broker else []
        ),
    }
