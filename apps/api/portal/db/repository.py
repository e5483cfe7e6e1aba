"""Quote repository and principal directory interfaces, with in-memory implementations.

Status writes go through compare-and-set: the write applies only if the
stored value still equals the value the caller decided on. A concurrent
writer that got there first makes the call return None instead of being
silently overwritten.
"""

import threading
from typing import Protocol

from portal.db.enums import BrokerStatus, QuoteStatus
from portal.schemas.auth import UserRecord
from portal.schemas.quote import QuoteRecord


class QuoteRepository(Protocol):
    def get(self, quote_id: str) -> QuoteRecord | None: ...

    def list_for_companies(self, company_ids: set[str] | None) -> list[QuoteRecord]: ...

    def compare_and_set_status(
        self, quote_id: str, expected: QuoteStatus, new: QuoteStatus
    ) -> QuoteRecord | None:
        """Return the updated record, or None if the stored status differs."""
        ...

    def compare_and_set_broker_status(
        self, quote_id: str, expected: BrokerStatus, new: BrokerStatus
    ) -> QuoteRecord | None: ...


class InMemoryQuoteRepository:
    """Process-local store used by the HTTP layer and tests."""

    def __init__(self, quotes: list[QuoteRecord] | None = None):
        self._lock = threading.Lock()
        self._quotes: dict[str, QuoteRecord] = {}
        for quote in quotes or []:
            self._quotes[quote.id] = quote

    def add(self, quote: QuoteRecord) -> QuoteRecord:
        with self._lock:
            if quote.id in self._quotes:
                raise ValueError(f"Quote {quote.id} already exists")
            self._quotes[quote.id] = quote
        return quote

    def get(self, quote_id: str) -> QuoteRecord | None:
        with self._lock:
            return self._quotes.get(quote_id)

    def list_for_companies(self, company_ids: set[str] | None) -> list[QuoteRecord]:
        """All quotes, or only those in company_ids when given."""
        with self._lock:
            quotes = list(self._quotes.values())
        if company_ids is None:
            return quotes
        return [q for q in quotes if q.company_id in company_ids]

    def compare_and_set_status(
        self, quote_id: str, expected: QuoteStatus, new: QuoteStatus
    ) -> QuoteRecord | None:
        with self._lock:
            current = self._quotes.get(quote_id)
            if current is None or current.status != expected:
                return None
            updated = current.model_copy(update={"status": new, "version": current.version + 1})
            self._quotes[quote_id] = updated
            return updated

    def compare_and_set_broker_status(
        self, quote_id: str, expected: BrokerStatus, new: BrokerStatus
    ) -> QuoteRecord | None:
        with self._lock:
            current = self._quotes.get(quote_id)
            if current is None or current.broker_status != expected:
                return None
            updated = current.model_copy(
                update={"broker_status": new, "version": current.version + 1}
            )
            self._quotes[quote_id] = updated
            return updated


# =============================================================================
# Principal directory
# =============================================================================

class PrincipalDirectory(Protocol):
    """Users and their staff company assignments, read on every request."""

    def get_user(self, user_id: str) -> UserRecord | None: ...

    def assigned_company_ids(self, user_id: str) -> frozenset[str]: ...


class InMemoryPrincipalDirectory:
    """
    Process-local users plus a company <-> sales user link table.

    Assignments are kept apart from the user record so a company can be
    taken away from a user without touching the user itself.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._users: dict[str, UserRecord] = {}
        self._assignments: set[tuple[str, str]] = set()  # (company_id, user_id)

    def save_user(self, user: UserRecord) -> UserRecord:
        """Insert or replace a user."""
        with self._lock:
            self._users[user.id] = user
        return user

    def get_user(self, user_id: str) -> UserRecord | None:
        with self._lock:
            return self._users.get(user_id)

    def assign_company(self, company_id: str, user_id: str) -> None:
        with self._lock:
            if user_id not in self._users:
                raise KeyError(f"User {user_id} not found")
            self._assignments.add((company_id, user_id))

    def unassign_company(self, company_id: str, user_id: str) -> None:
        with self._lock:
            self._assignments.discard((company_id, user_id))

    def assigned_company_ids(self, user_id: str) -> frozenset[str]:
        with self._lock:
            return frozenset(c for c, u in self._assignments if u == user_id)
