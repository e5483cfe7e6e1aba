"""Shipping quote enums."""

from enum import Enum


class QuoteStatus(str, Enum):
    """
    Customer-facing lifecycle of a shipping quote.

        pending → quoted → approved → order → in_transit → delivered → archived

    Any non-final state may branch to cancelled; pending/quoted may branch to
    rejected. Branches only lead to archived.
    """

    PENDING = "pending"  # Created by the shipper
    QUOTED = "quoted"  # Sales rep provided a price
    APPROVED = "approved"  # Customer accepted the price
    ORDER = "order"  # Converted to an order
    IN_TRANSIT = "in_transit"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    REJECTED = "rejected"
    ARCHIVED = "archived"

    @classmethod
    def has_value(cls, value: str) -> bool:
        """Check if value is a canonical quote status."""
        return value in cls._value2member_map_


class BrokerStatus(str, Enum):
    """
    Broker-side handling of the same shipment.

    Evolves independently of QuoteStatus; nothing synchronizes the two.
    """

    IN_PROGRESS = "in_progress"
    NEED_MORE_INFO = "need_more_info"
    PRICED = "priced"
    DISPATCHED = "dispatched"  # Handed to a carrier
    PICKED_UP = "picked_up"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"

    @classmethod
    def has_value(cls, value: str) -> bool:
        """Check if value is a canonical broker status."""
        return value in cls._value2member_map_
