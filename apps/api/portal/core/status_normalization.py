"""Normalization boundary for legacy free-text status values.

Stored data predates the status enums and mixes spellings such as "Quote",
"quote" and "quoted". Values are converted once, when they enter the system,
through coerce_quote_status / coerce_broker_status. Everything past that
boundary works with QuoteStatus / BrokerStatus only.

The matching and filtering helpers are read-side conveniences for data that
has not been migrated yet.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from enum import Enum
from types import MappingProxyType
from typing import Any, TypeVar

from portal.core.status_engine import normalize_status
from portal.db.enums import (
    DEFAULT_BROKER_STATUS,
    DEFAULT_QUOTE_STATUS,
    BrokerStatus,
    QuoteStatus,
)

T = TypeVar("T")


class LegacyStatusError(ValueError):
    """Raised when a stored status cannot be mapped onto the enumeration."""

    def __init__(self, raw: str, field: str):
        self.raw = raw
        self.field = field
        super().__init__(f"Unrecognized legacy {field}: {raw!r}")


# Keys are normalized spellings; anything not listed must normalize to a
# canonical member on its own.
LEGACY_QUOTE_STATUS_MAP: Mapping[str, QuoteStatus] = MappingProxyType({
    "quote": QuoteStatus.QUOTED,
    "order": QuoteStatus.ORDER,
    "archived": QuoteStatus.ARCHIVED,
    "rejected": QuoteStatus.REJECTED,
    "cancelled": QuoteStatus.CANCELLED,
    "pending": QuoteStatus.PENDING,
    "delivered": QuoteStatus.DELIVERED,
})

LEGACY_BROKER_STATUS_MAP: Mapping[str, BrokerStatus] = MappingProxyType({
    "in_progress": BrokerStatus.IN_PROGRESS,
    "need_more_info": BrokerStatus.NEED_MORE_INFO,
    "priced": BrokerStatus.PRICED,
    "dispatched": BrokerStatus.DISPATCHED,
    "picked_up": BrokerStatus.PICKED_UP,
    "delivered": BrokerStatus.DELIVERED,
    "cancelled": BrokerStatus.CANCELLED,
})


def _target_value(target: Any) -> str:
    if isinstance(target, Enum):
        return str(target.value)
    return normalize_status(target)


def _status_of(item: Any) -> Any:
    if isinstance(item, Mapping):
        return item.get("status")
    return getattr(item, "status", None)


def status_matches(value: Any, target: Any) -> bool:
    """Case and spacing insensitive comparison ("In Progress" matches in_progress)."""
    if isinstance(value, Enum):
        value = value.value
    if value is not None and not isinstance(value, str):
        return False
    normalized = normalize_status(value)
    return bool(normalized) and normalized == _target_value(target)


def filter_by_status(items: Iterable[T], target: Any) -> list[T]:
    """Keep items (objects or mappings) whose `status` matches target."""
    return [item for item in items if status_matches(_status_of(item), target)]


def filter_by_statuses(items: Iterable[T], targets: Iterable[Any]) -> list[T]:
    """Keep items whose `status` matches any of targets."""
    wanted = {_target_value(t) for t in targets}
    wanted.discard("")
    result = []
    for item in items:
        status = _status_of(item)
        if isinstance(status, Enum):
            status = status.value
        if isinstance(status, str) and normalize_status(status) in wanted:
            result.append(item)
    return result


def display_name(raw: Any) -> str:
    """Title Case rendition of a status, "Unknown" when empty."""
    if isinstance(raw, Enum):
        raw = raw.value
    if not raw:
        return "Unknown"
    normalized = normalize_status(str(raw))
    return " ".join(word[:1].upper() + word[1:] for word in normalized.split("_"))


def _coerce(raw: Any, enum_cls: type, legacy: Mapping, default: Enum, field: str):
    if isinstance(raw, enum_cls):
        return raw
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return default
    if not isinstance(raw, str):
        raise LegacyStatusError(repr(raw), field)

    normalized = normalize_status(raw.strip())
    if normalized in legacy:
        return legacy[normalized]
    if enum_cls.has_value(normalized):
        return enum_cls(normalized)
    raise LegacyStatusError(raw, field)


def coerce_quote_status(raw: Any) -> QuoteStatus:
    """
    Convert a stored quote status to QuoteStatus.

    Empty input yields the default (pending). Raises LegacyStatusError for
    values outside the legacy map that do not normalize to a member.
    """
    return _coerce(raw, QuoteStatus, LEGACY_QUOTE_STATUS_MAP, DEFAULT_QUOTE_STATUS, "status")


def coerce_broker_status(raw: Any) -> BrokerStatus:
    """Convert a stored broker status to BrokerStatus (default in_progress)."""
    return _coerce(
        raw, BrokerStatus, LEGACY_BROKER_STATUS_MAP, DEFAULT_BROKER_STATUS, "broker_status"
    )
