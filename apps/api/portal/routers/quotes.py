"""Quote status routes."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from portal.core.access_control import accessible_company_ids, can_access_company
from portal.core.audit import AuditEntry
from portal.core.deps import (
    get_audit_sink,
    get_current_principal,
    get_quote_repository,
    require_csrf_header,
    require_permission,
)
from portal.core.policies import POLICIES
from portal.core.status_engine import (
    IllegalTransition,
    broker_label,
    broker_progress_fraction,
    broker_style_class,
    label,
    progress_fraction,
    style_class,
)
from portal.core.status_normalization import filter_by_statuses
from portal.core.structured_logging import build_log_context
from portal.db.repository import QuoteRepository
from portal.schemas.auth import Principal
from portal.schemas.quote import (
    AuditEntryRead,
    BrokerStatusChangeRequest,
    QuoteRead,
    QuoteRecord,
    StatusChangeRequest,
    StatusChangeResponse,
    StatusOption,
    TransitionsRead,
)
from portal.services import quote_status_service
from portal.services.audit_service import AuditSink

logger = logging.getLogger(__name__)

router = APIRouter()


def _quote_to_read(quote: QuoteRecord) -> QuoteRead:
    return QuoteRead(
        id=quote.id,
        company_id=quote.company_id,
        status=quote.status,
        status_label=label(quote.status),
        broker_status=quote.broker_status,
        broker_status_label=broker_label(quote.broker_status),
        progress=progress_fraction(quote.status),
        broker_progress=broker_progress_fraction(quote.broker_status),
        version=quote.version,
    )


def _entry_to_read(entry: AuditEntry) -> AuditEntryRead:
    return AuditEntryRead(
        id=str(entry.id),
        event_type=entry.event_type.value,
        resource_id=entry.resource_id,
        actor_id=entry.actor_id,
        outcome=entry.outcome.value,
        old_status=entry.old_status,
        new_status=entry.new_status,
        old_broker_status=entry.old_broker_status,
        new_broker_status=entry.new_broker_status,
        reason=entry.reason,
        error_kind=entry.error_kind,
        occurred_at=entry.occurred_at,
    )


def _get_scoped_quote(
    request: Request,
    repo: QuoteRepository,
    principal: Principal,
    quote_id: str,
) -> QuoteRecord:
    """Load a quote and enforce company scope (404 / 403)."""
    quote = repo.get(quote_id)
    if quote is None:
        raise HTTPException(status_code=404, detail="Quote not found")
    if not can_access_company(principal, quote.company_id):
        logger.warning(
            "quote_access_denied kind=company_scope_violation",
            extra=build_log_context(
                user_id=principal.id,
                company_id=quote.company_id,
                quote_id=quote.id,
                route=request.url.path,
                method=request.method,
            ),
        )
        raise HTTPException(status_code=403, detail="Quote belongs to a company outside your scope")
    return quote


def _run_change(change, *args) -> StatusChangeResponse:
    """Call a service change function and map its errors onto HTTP codes."""
    try:
        result = change(*args)
    except quote_status_service.QuoteNotFoundError:
        raise HTTPException(status_code=404, detail="Quote not found")
    except quote_status_service.AuthorizationDenied as e:
        raise HTTPException(status_code=403, detail={"error": e.error.kind})
    except quote_status_service.TransitionRejected as e:
        error = e.error
        if isinstance(error, IllegalTransition):
            from_, to = error.from_, error.to
        else:
            from_, to = e.current, error.value
        raise HTTPException(
            status_code=422,
            detail={
                "error": error.kind,
                "field": error.field,
                "from": from_,
                "to": to,
                "message": error.message,
            },
        )
    except quote_status_service.StaleStatusError as e:
        raise HTTPException(
            status_code=409,
            detail={"error": "stale_status", "field": e.field, "expected": e.expected},
        )

    return StatusChangeResponse(
        quote_id=result["quote"].id,
        previous=result["previous"],
        current=result["current"],
        version=result["quote"].version,
        audit_id=str(result["audit_entry"].id),
    )


# =============================================================================
# Reads
# =============================================================================

@router.get("", response_model=list[QuoteRead])
def list_quotes(
    principal: Principal = Depends(require_permission(POLICIES["quotes"].default)),
    repo: QuoteRepository = Depends(get_quote_repository),
    status: list[str] | None = Query(None, description="Filter by status (repeatable)"),
):
    """
    Quotes in the caller's company scope, optionally filtered by status.

    Status filters are compared case and spacing insensitively, so
    `?status=In Transit` matches `in_transit`.
    """
    scope = accessible_company_ids(principal)
    quotes = repo.list_for_companies(None if scope.unrestricted else set(scope.company_ids))
    if status:
        quotes = filter_by_statuses(quotes, status)
    return [_quote_to_read(q) for q in sorted(quotes, key=lambda q: q.id)]


@router.get("/{quote_id}", response_model=QuoteRead)
def get_quote(
    quote_id: str,
    request: Request,
    principal: Principal = Depends(require_permission(POLICIES["quotes"].default)),
    repo: QuoteRepository = Depends(get_quote_repository),
):
    """Get a quote's status fields with labels and progress."""
    quote = _get_scoped_quote(request, repo, principal, quote_id)
    return _quote_to_read(quote)


@router.get("/{quote_id}/transitions", response_model=TransitionsRead)
def get_transitions(
    quote_id: str,
    request: Request,
    principal: Principal = Depends(require_permission(POLICIES["quotes"].default)),
    repo: QuoteRepository = Depends(get_quote_repository),
):
    """
    Next statuses the caller may request on this quote.

    Empty lists when the caller cannot edit the quote.
    """
    quote = _get_scoped_quote(request, repo, principal, quote_id)
    actions = quote_status_service.allowed_actions(principal, quote)
    return TransitionsRead(
        quote_id=quote.id,
        status=quote.status,
        broker_status=quote.broker_status,
        can_edit=actions["can_edit"],
        next_statuses=[
            StatusOption(value=s.value, label=label(s), style_class=style_class(s))
            for s in actions["next_statuses"]
        ],
        next_broker_statuses=[
            StatusOption(value=s.value, label=broker_label(s), style_class=broker_style_class(s))
            for s in actions["next_broker_statuses"]
        ],
    )


@router.get("/{quote_id}/audit", response_model=list[AuditEntryRead])
def get_quote_audit(
    quote_id: str,
    request: Request,
    principal: Principal = Depends(require_permission(POLICIES["quotes"].actions["view_audit"])),
    repo: QuoteRepository = Depends(get_quote_repository),
    sink: AuditSink = Depends(get_audit_sink),
):
    """Status history of a quote, oldest first."""
    quote = _get_scoped_quote(request, repo, principal, quote_id)
    return [_entry_to_read(e) for e in sink.list_for_resource(quote.id)]


# =============================================================================
# Status changes
# =============================================================================

@router.patch(
    "/{quote_id}/status",
    response_model=StatusChangeResponse,
    dependencies=[Depends(require_csrf_header)],
)
def change_status(
    quote_id: str,
    data: StatusChangeRequest,
    principal: Principal = Depends(get_current_principal),
    repo: QuoteRepository = Depends(get_quote_repository),
    sink: AuditSink = Depends(get_audit_sink),
):
    """
    Move a quote along the customer-facing track.

    Permission and company scope are checked by the service so that denials
    land in the audit trail next to rejected transitions.
    """
    return _run_change(
        quote_status_service.change_status,
        repo,
        sink,
        principal,
        quote_id,
        data.status,
        data.reason,
    )


@router.patch(
    "/{quote_id}/broker-status",
    response_model=StatusChangeResponse,
    dependencies=[Depends(require_csrf_header)],
)
def change_broker_status(
    quote_id: str,
    data: BrokerStatusChangeRequest,
    principal: Principal = Depends(get_current_principal),
    repo: QuoteRepository = Depends(get_quote_repository),
    sink: AuditSink = Depends(get_audit_sink),
):
    """Move a quote along the broker track (audited)."""
    return _run_change(
        quote_status_service.change_broker_status,
        repo,
        sink,
        principal,
        quote_id,
        data.broker_status,
        data.reason,
    )
