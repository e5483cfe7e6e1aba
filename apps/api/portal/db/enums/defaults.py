"""Centralized defaults for enums."""

from portal.db.enums.quotes import BrokerStatus, QuoteStatus


DEFAULT_QUOTE_STATUS: QuoteStatus = QuoteStatus.PENDING
DEFAULT_BROKER_STATUS: BrokerStatus = BrokerStatus.IN_PROGRESS
