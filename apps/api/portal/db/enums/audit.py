"""Audit enums."""

from enum import Enum


class AuditEventType(str, Enum):
    """
    Audit events produced around quote status changes.

    Groups:
    - QUOTE_*: Applied transitions
    - QUOTE_*_REJECTED: Attempts refused by the status engine
    - ACCESS_*: Attempts refused by access control
    """

    QUOTE_STATUS_CHANGED = "quote_status_changed"
    QUOTE_BROKER_STATUS_CHANGED = "quote_broker_status_changed"

    QUOTE_STATUS_CHANGE_REJECTED = "quote_status_change_rejected"
    QUOTE_BROKER_STATUS_CHANGE_REJECTED = "quote_broker_status_change_rejected"

    ACCESS_DENIED = "access_denied"


class AuditOutcome(str, Enum):
    """Whether the audited attempt took effect."""

    APPLIED = "applied"
    REJECTED = "rejected"
