"""
Test configuration and fixtures.

Provides:
- Principal factories for each role / user type
- In-memory quote repository, audit sink and principal directory (fresh per test)
- JWT token minting for authenticated tests
- HTTPX AsyncClient factory with session cookie and CSRF header
"""
import os
import uuid
from typing import AsyncGenerator, Callable

import pytest
from httpx import AsyncClient, ASGITransport

os.environ.setdefault("ENV", "test")
os.environ.setdefault("JWT_SECRET", "test-secret-0123456789abcdef0123456789")

from portal.main import app
from portal.core.deps import (
    COOKIE_NAME,
    CSRF_HEADER,
    CSRF_HEADER_VALUE,
    get_audit_sink,
    get_principal_directory,
    get_quote_repository,
)
from portal.core.security import create_session_token
from portal.db.enums import Role, UserType
from portal.core.role_rules import role_to_storage_value
from portal.db.repository import InMemoryPrincipalDirectory, InMemoryQuoteRepository
from portal.schemas.auth import Principal, UserRecord
from portal.schemas.quote import QuoteRecord
from portal.services.audit_service import InMemoryAuditSink


# =============================================================================
# Companies & Principals
# =============================================================================

@pytest.fixture
def company_a() -> str:
    return str(uuid.uuid4())


@pytest.fixture
def company_b() -> str:
    return str(uuid.uuid4())


def build_principal(
    role: Role | str,
    user_type: UserType | None = None,
    company_id: str | None = None,
    assigned: set[str] | frozenset[str] | None = None,
) -> Principal:
    if user_type is None:
        user_type = UserType.SHIPPER if role == Role.SHIPPER else UserType.NTS_USER
    return Principal(
        id=str(uuid.uuid4()),
        user_type=user_type,
        role=role,
        company_id=company_id,
        assigned_company_ids=frozenset(assigned or ()),
        email=f"user-{uuid.uuid4().hex[:8]}@test.com",
    )


@pytest.fixture
def make_principal() -> Callable[..., Principal]:
    """Factory: make_principal(Role.SALES_REP, assigned={company_a})."""
    return build_principal


# =============================================================================
# Storage Fixtures
# =============================================================================

@pytest.fixture
def repo() -> InMemoryQuoteRepository:
    return InMemoryQuoteRepository()


@pytest.fixture
def sink() -> InMemoryAuditSink:
    return InMemoryAuditSink()


@pytest.fixture
def directory() -> InMemoryPrincipalDirectory:
    return InMemoryPrincipalDirectory()


def register_principal(directory: InMemoryPrincipalDirectory, principal: Principal) -> None:
    """Store a principal's user record and company assignments."""
    directory.save_user(
        UserRecord(
            id=principal.id,
            user_type=principal.user_type,
            role=role_to_storage_value(principal.role) or principal.role_value,
            company_id=principal.company_id,
            email=principal.email,
        )
    )
    for company_id in principal.assigned_company_ids:
        directory.assign_company(company_id, principal.id)


@pytest.fixture
def pending_quote(repo: InMemoryQuoteRepository, company_a: str) -> QuoteRecord:
    """A freshly created quote owned by company_a."""
    return repo.add(QuoteRecord(id=str(uuid.uuid4()), company_id=company_a))


# =============================================================================
# Client Fixtures
# =============================================================================

@pytest.fixture
async def client_as(
    repo: InMemoryQuoteRepository,
    sink: InMemoryAuditSink,
    directory: InMemoryPrincipalDirectory,
) -> AsyncGenerator[Callable[..., AsyncClient], None]:
    """
    Factory for AsyncClients bound to this test's repository and sink.

    client_as(principal) registers the principal in the directory and sends
    its session cookie and the CSRF header; client_as(None) is
    unauthenticated.
    """
    app.dependency_overrides[get_quote_repository] = lambda: repo
    app.dependency_overrides[get_audit_sink] = lambda: sink
    app.dependency_overrides[get_principal_directory] = lambda: directory
    clients: list[AsyncClient] = []

    def _make(principal: Principal | None = None, csrf: bool = True) -> AsyncClient:
        cookies = {}
        if principal is not None:
            register_principal(directory, principal)
            cookies[COOKIE_NAME] = create_session_token(principal.id, principal.user_type)
        headers = {CSRF_HEADER: CSRF_HEADER_VALUE} if csrf else {}
        c = AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test",
            cookies=cookies,
            headers=headers,
        )
        clients.append(c)
        return c

    yield _make

    for c in clients:
        await c.aclose()
    app.dependency_overrides.clear()


@pytest.fixture
async def client(client_as) -> AsyncClient:
    """Unauthenticated AsyncClient for public endpoints."""
    return client_as(None)
