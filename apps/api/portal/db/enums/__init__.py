"""Enum definitions for application constants."""

from portal.db.enums.audit import AuditEventType, AuditOutcome
from portal.db.enums.auth import Role, UserType
from portal.db.enums.defaults import DEFAULT_BROKER_STATUS, DEFAULT_QUOTE_STATUS
from portal.db.enums.quotes import BrokerStatus, QuoteStatus

__all__ = [
    "AuditEventType",
    "AuditOutcome",
    "BrokerStatus",
    "DEFAULT_BROKER_STATUS",
    "DEFAULT_QUOTE_STATUS",
    "QuoteStatus",
    "Role",
    "UserType",
]
