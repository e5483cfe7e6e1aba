"""Quote and broker status tables: transitions, labels, styles and ordering.

Each table is the single source of truth for its concern. The tables are
read-only mappings built once at import and checked for completeness against
the enums before anything else can use them.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

from portal.db.enums import BrokerStatus, QuoteStatus

Q = QuoteStatus
B = BrokerStatus


# =============================================================================
# Transitions
# =============================================================================

QUOTE_STATUS_TRANSITIONS: Mapping[QuoteStatus, frozenset[QuoteStatus]] = MappingProxyType(
    {
        Q.PENDING: frozenset({Q.QUOTED, Q.CANCELLED, Q.REJECTED}),
        Q.QUOTED: frozenset({Q.APPROVED, Q.REJECTED, Q.CANCELLED}),
        Q.APPROVED: frozenset({Q.ORDER, Q.CANCELLED}),
        Q.ORDER: frozenset({Q.IN_TRANSIT, Q.CANCELLED}),
        Q.IN_TRANSIT: frozenset({Q.DELIVERED, Q.CANCELLED}),
        Q.DELIVERED: frozenset({Q.ARCHIVED}),
        Q.CANCELLED: frozenset({Q.ARCHIVED}),
        Q.REJECTED: frozenset({Q.ARCHIVED}),
        Q.ARCHIVED: frozenset(),  # Terminal
    }
)

BROKER_STATUS_TRANSITIONS: Mapping[BrokerStatus, frozenset[BrokerStatus]] = MappingProxyType(
    {
        B.IN_PROGRESS: frozenset({B.NEED_MORE_INFO, B.PRICED, B.CANCELLED}),
        B.NEED_MORE_INFO: frozenset({B.IN_PROGRESS, B.PRICED, B.CANCELLED}),
        B.PRICED: frozenset({B.DISPATCHED, B.CANCELLED}),
        B.DISPATCHED: frozenset({B.PICKED_UP, B.CANCELLED}),
        B.PICKED_UP: frozenset({B.DELIVERED, B.CANCELLED}),
        B.DELIVERED: frozenset(),  # Terminal
        B.CANCELLED: frozenset(),  # Terminal
    }
)


# =============================================================================
# Display
# =============================================================================

QUOTE_STATUS_LABELS: Mapping[QuoteStatus, str] = MappingProxyType(
    {
        Q.PENDING: "Pending",
        Q.QUOTED: "Quoted",
        Q.APPROVED: "Approved",
        Q.ORDER: "Order",
        Q.IN_TRANSIT: "In Transit",
        Q.DELIVERED: "Delivered",
        Q.CANCELLED: "Cancelled",
        Q.REJECTED: "Rejected",
        Q.ARCHIVED: "Archived",
    }
)

BROKER_STATUS_LABELS: Mapping[BrokerStatus, str] = MappingProxyType(
    {
        B.IN_PROGRESS: "In Progress",
        B.NEED_MORE_INFO: "Need More Info",
        B.PRICED: "Priced",
        B.DISPATCHED: "Dispatched",
        B.PICKED_UP: "Picked Up",
        B.DELIVERED: "Delivered",
        B.CANCELLED: "Cancelled",
    }
)

NEUTRAL_STYLE = "bg-gray-50 text-gray-700 border-gray-200"

QUOTE_STATUS_STYLES: Mapping[QuoteStatus, str] = MappingProxyType(
    {
        Q.PENDING: "bg-yellow-50 text-yellow-700 border-yellow-200",
        Q.QUOTED: "bg-blue-50 text-blue-700 border-blue-200",
        Q.APPROVED: "bg-green-50 text-green-700 border-green-200",
        Q.ORDER: "bg-purple-50 text-purple-700 border-purple-200",
        Q.IN_TRANSIT: "bg-indigo-50 text-indigo-700 border-indigo-200",
        Q.DELIVERED: "bg-emerald-50 text-emerald-700 border-emerald-200",
        Q.CANCELLED: "bg-red-50 text-red-700 border-red-200",
        Q.REJECTED: "bg-red-50 text-red-700 border-red-200",
        Q.ARCHIVED: NEUTRAL_STYLE,
    }
)

BROKER_STATUS_STYLES: Mapping[BrokerStatus, str] = MappingProxyType(
    {
        B.IN_PROGRESS: "bg-blue-50 text-blue-700 border-blue-200",
        B.NEED_MORE_INFO: "bg-amber-50 text-amber-700 border-amber-200",
        B.PRICED: "bg-green-50 text-green-700 border-green-200",
        B.DISPATCHED: "bg-purple-50 text-purple-700 border-purple-200",
        B.PICKED_UP: "bg-indigo-50 text-indigo-700 border-indigo-200",
        B.DELIVERED: "bg-emerald-50 text-emerald-700 border-emerald-200",
        B.CANCELLED: "bg-red-50 text-red-700 border-red-200",
    }
)


# =============================================================================
# Progress ordering
# =============================================================================

# cancelled/rejected are branches, not progress points
QUOTE_STATUS_ORDER: tuple[QuoteStatus, ...] = (
    Q.PENDING,
    Q.QUOTED,
    Q.APPROVED,
    Q.ORDER,
    Q.IN_TRANSIT,
    Q.DELIVERED,
    Q.ARCHIVED,
)

BROKER_STATUS_ORDER: tuple[BrokerStatus, ...] = (
    B.IN_PROGRESS,
    B.NEED_MORE_INFO,
    B.PRICED,
    B.DISPATCHED,
    B.PICKED_UP,
    B.DELIVERED,
)


# =============================================================================
# Startup completeness check
# =============================================================================

def _check_table(name: str, enum_cls: type, table: Mapping) -> None:
    missing = set(enum_cls) - set(table)
    extra = set(table) - set(enum_cls)
    if missing or extra:
        raise RuntimeError(
            f"{name} out of sync with {enum_cls.__name__}: "
            f"missing={sorted(m.value for m in missing)} extra={sorted(map(str, extra))}"
        )


def _check_transitions(name: str, enum_cls: type, table: Mapping) -> None:
    _check_table(name, enum_cls, table)
    for source, targets in table.items():
        unknown = [t for t in targets if not isinstance(t, enum_cls)]
        if unknown:
            raise RuntimeError(f"{name}[{source.value}] has unknown targets: {unknown}")
        if source in targets:
            raise RuntimeError(f"{name}[{source.value}] contains a self transition")


def validate_status_tables() -> None:
    """Raise RuntimeError if any status table misses or adds enum members."""
    _check_transitions("QUOTE_STATUS_TRANSITIONS", QuoteStatus, QUOTE_STATUS_TRANSITIONS)
    _check_transitions("BROKER_STATUS_TRANSITIONS", BrokerStatus, BROKER_STATUS_TRANSITIONS)
    _check_table("QUOTE_STATUS_LABELS", QuoteStatus, QUOTE_STATUS_LABELS)
    _check_table("BROKER_STATUS_LABELS", BrokerStatus, BROKER_STATUS_LABELS)
    _check_table("QUOTE_STATUS_STYLES", QuoteStatus, QUOTE_STATUS_STYLES)
    _check_table("BROKER_STATUS_STYLES", BrokerStatus, BROKER_STATUS_STYLES)


validate_status_tables()
