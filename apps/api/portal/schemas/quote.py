"""Pydantic schemas for quotes and their status tracks."""

from datetime import datetime

from pydantic import BaseModel, Field

from portal.db.enums import DEFAULT_BROKER_STATUS, DEFAULT_QUOTE_STATUS, BrokerStatus, QuoteStatus


class QuoteRecord(BaseModel):
    """
    Status-bearing slice of a stored quote.

    `version` increases on every applied write; it is informational, the
    compare-and-set itself keys on the status value.
    """
    id: str
    company_id: str
    status: QuoteStatus = DEFAULT_QUOTE_STATUS
    broker_status: BrokerStatus = DEFAULT_BROKER_STATUS
    version: int = 1


class StatusChangeRequest(BaseModel):
    """Request to move a quote along its customer-facing track."""
    status: str = Field(..., min_length=1, max_length=50)
    reason: str | None = Field(None, max_length=500)


class BrokerStatusChangeRequest(BaseModel):
    """Request to move a quote along the broker track."""
    broker_status: str = Field(..., min_length=1, max_length=50)
    reason: str | None = Field(None, max_length=500)


class StatusOption(BaseModel):
    value: str
    label: str
    style_class: str


class QuoteRead(BaseModel):
    id: str
    company_id: str
    status: QuoteStatus
    status_label: str
    broker_status: BrokerStatus
    broker_status_label: str
    progress: float
    broker_progress: float
    version: int


class TransitionsRead(BaseModel):
    """Next statuses the caller may request, already filtered by permission."""
    quote_id: str
    status: QuoteStatus
    broker_status: BrokerStatus
    can_edit: bool
    next_statuses: list[StatusOption]
    next_broker_statuses: list[StatusOption]


class StatusChangeResponse(BaseModel):
    quote_id: str
    previous: str
    current: str
    version: int
    audit_id: str


class AuditEntryRead(BaseModel):
    id: str
    event_type: str
    resource_id: str
    actor_id: str
    outcome: str
    old_status: str | None
    new_status: str | None
    old_broker_status: str | None
    new_broker_status: str | None
    reason: str | None
    error_kind: str | None
    occurred_at: datetime
