"""Status engine - transition decisions for the quote and broker status tracks.

Every function here is pure and total: malformed input produces a typed
failure value (or False / an empty set), never an exception. Nothing is
persisted or logged; callers apply the returned decision themselves.

The two tracks are independent state machines. A broker status change never
implies a quote status change and vice versa.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, Mapping, TypeVar

from portal.core.status_definitions import (
    BROKER_STATUS_LABELS,
    BROKER_STATUS_ORDER,
    BROKER_STATUS_STYLES,
    BROKER_STATUS_TRANSITIONS,
    NEUTRAL_STYLE,
    QUOTE_STATUS_LABELS,
    QUOTE_STATUS_ORDER,
    QUOTE_STATUS_STYLES,
    QUOTE_STATUS_TRANSITIONS,
)
from portal.db.enums import BrokerStatus, QuoteStatus

E = TypeVar("E", bound=Enum)

STATUS_FIELD = "status"
BROKER_STATUS_FIELD = "broker_status"

_WHITESPACE_RUN = re.compile(r"\s+")


# =============================================================================
# Result types
# =============================================================================

@dataclass(frozen=True)
class InvalidStatus:
    """A current or target value is not a member of the enumeration."""

    kind: ClassVar[str] = "invalid_status"

    value: str
    field: str = STATUS_FIELD

    @property
    def message(self) -> str:
        return f"'{self.value}' is not a valid {self.field}"


@dataclass(frozen=True)
class IllegalTransition:
    """Both values are well formed but the edge is not in the table."""

    kind: ClassVar[str] = "illegal_transition"

    from_: str
    to: str
    field: str = STATUS_FIELD

    @property
    def message(self) -> str:
        return f"Cannot change {self.field} from '{self.from_}' to '{self.to}'"


TransitionError = InvalidStatus | IllegalTransition


@dataclass(frozen=True)
class TransitionResult:
    """
    Outcome of a transition decision.

    On success `value` holds the new status and `previous` the status it
    replaces; on failure `error` is set and `value` is None.
    """

    previous: str
    value: QuoteStatus | BrokerStatus | None = None
    error: TransitionError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


# =============================================================================
# Helpers
# =============================================================================

def _raw(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


def _member(enum_cls: type[E], value: Any) -> E | None:
    """Return the enum member for a canonical value, or None."""
    if isinstance(value, enum_cls):
        return value
    # A member of the other track is not a canonical value here.
    if isinstance(value, Enum) or not isinstance(value, str):
        return None
    try:
        return enum_cls(value)
    except ValueError:
        return None


def _decide(
    enum_cls: type[E],
    table: Mapping[E, frozenset[E]],
    current: Any,
    target: Any,
    field: str,
) -> TransitionResult:
    previous = _raw(current)
    target_member = _member(enum_cls, target)
    if target_member is None:
        return TransitionResult(previous=previous, error=InvalidStatus(_raw(target), field))

    current_member = _member(enum_cls, current)
    if current_member is None:
        return TransitionResult(previous=previous, error=InvalidStatus(previous, field))

    if target_member not in table[current_member]:
        return TransitionResult(
            previous=previous,
            error=IllegalTransition(current_member.value, target_member.value, field),
        )
    return TransitionResult(previous=previous, value=target_member)


# =============================================================================
# Validation
# =============================================================================

def is_valid_status(value: Any) -> bool:
    """Membership test against QuoteStatus (canonical lowercase form only)."""
    return _member(QuoteStatus, value) is not None


def is_valid_broker_status(value: Any) -> bool:
    """Membership test against BrokerStatus (canonical lowercase form only)."""
    return _member(BrokerStatus, value) is not None


def normalize_status(raw: str | None) -> str:
    """
    Lowercase and collapse each whitespace run into one underscore.

    "In Progress" -> "in_progress"; None or "" -> "".
    """
    if not raw:
        return ""
    return _WHITESPACE_RUN.sub("_", str(raw).lower())


# =============================================================================
# Transitions
# =============================================================================

def can_transition(current: Any, target: Any) -> bool:
    """True iff target is a legal next quote status from current."""
    current_member = _member(QuoteStatus, current)
    target_member = _member(QuoteStatus, target)
    if current_member is None or target_member is None:
        return False
    return target_member in QUOTE_STATUS_TRANSITIONS[current_member]


def can_transition_broker(current: Any, target: Any) -> bool:
    """True iff target is a legal next broker status from current."""
    current_member = _member(BrokerStatus, current)
    target_member = _member(BrokerStatus, target)
    if current_member is None or target_member is None:
        return False
    return target_member in BROKER_STATUS_TRANSITIONS[current_member]


def transition_status(resource: Any, target: Any) -> TransitionResult:
    """Decide a quote status change for anything exposing `.status`."""
    current = getattr(resource, STATUS_FIELD, None)
    return _decide(QuoteStatus, QUOTE_STATUS_TRANSITIONS, current, target, STATUS_FIELD)


def transition_broker_status(resource: Any, target: Any) -> TransitionResult:
    """Decide a broker status change for anything exposing `.broker_status`."""
    current = getattr(resource, BROKER_STATUS_FIELD, None)
    return _decide(
        BrokerStatus, BROKER_STATUS_TRANSITIONS, current, target, BROKER_STATUS_FIELD
    )


def get_valid_transitions(current: Any) -> frozenset[QuoteStatus]:
    """Allowed next quote statuses (empty for terminal or unknown input)."""
    member = _member(QuoteStatus, current)
    if member is None:
        return frozenset()
    return QUOTE_STATUS_TRANSITIONS[member]


def get_valid_broker_transitions(current: Any) -> frozenset[BrokerStatus]:
    """Allowed next broker statuses (empty for terminal or unknown input)."""
    member = _member(BrokerStatus, current)
    if member is None:
        return frozenset()
    return BROKER_STATUS_TRANSITIONS[member]


def is_terminal(status: Any) -> bool:
    member = _member(QuoteStatus, status)
    return member is not None and not QUOTE_STATUS_TRANSITIONS[member]


def is_terminal_broker(status: Any) -> bool:
    member = _member(BrokerStatus, status)
    return member is not None and not BROKER_STATUS_TRANSITIONS[member]


# =============================================================================
# Presentation
# =============================================================================

def label(status: Any) -> str:
    member = _member(QuoteStatus, status)
    return QUOTE_STATUS_LABELS[member] if member is not None else _raw(status)


def style_class(status: Any) -> str:
    member = _member(QuoteStatus, status)
    return QUOTE_STATUS_STYLES[member] if member is not None else NEUTRAL_STYLE


def broker_label(status: Any) -> str:
    member = _member(BrokerStatus, status)
    return BROKER_STATUS_LABELS[member] if member is not None else _raw(status)


def broker_style_class(status: Any) -> str:
    member = _member(BrokerStatus, status)
    return BROKER_STATUS_STYLES[member] if member is not None else NEUTRAL_STYLE


def _fraction(order: tuple, member: Enum | None) -> float:
    if member is None or member not in order:
        return 0.0
    return order.index(member) / (len(order) - 1)


def progress_fraction(status: Any) -> float:
    """Position in the linear quote ordering, in [0, 1]; 0 for branch statuses."""
    return _fraction(QUOTE_STATUS_ORDER, _member(QuoteStatus, status))


def broker_progress_fraction(status: Any) -> float:
    """Position in the linear broker ordering, in [0, 1]; 0 for cancelled."""
    return _fraction(BROKER_STATUS_ORDER, _member(BrokerStatus, status))
