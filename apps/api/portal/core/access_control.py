"""Access control - role permissions and company scoping.

Permission checks and company scope checks are separate questions with
separate failure kinds: Forbidden means the role lacks the permission,
CompanyScopeViolation means the role holds it but the target company is out
of reach. Both become 403 over HTTP; audit records keep the difference.

Stateless: every call receives a fresh Principal.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import ClassVar

from portal.core.permissions import PermissionKey, get_role_default_permissions
from portal.db.enums import Role, UserType
from portal.schemas.auth import Principal

UNRESTRICTED_ROLES = frozenset({Role.ADMIN, Role.SUPER_ADMIN})
ASSIGNMENT_SCOPED_ROLES = frozenset({Role.SALES_REP, Role.MANAGER})


@dataclass(frozen=True)
class CompanyScope:
    """Companies a principal may act on. `unrestricted` is the "any" marker."""

    unrestricted: bool = False
    company_ids: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def any(cls) -> "CompanyScope":
        return cls(unrestricted=True)

    @classmethod
    def of(cls, company_ids: Iterable[str]) -> "CompanyScope":
        return cls(company_ids=frozenset(c for c in company_ids if c))

    def contains(self, company_id: str | None) -> bool:
        if self.unrestricted:
            return True
        return bool(company_id) and company_id in self.company_ids


@dataclass(frozen=True)
class Forbidden:
    """The principal's role does not hold the permission."""

    kind: ClassVar[str] = "forbidden"

    permission: PermissionKey
    role: str


@dataclass(frozen=True)
class CompanyScopeViolation:
    """The permission is held but the company is outside the principal's scope."""

    kind: ClassVar[str] = "company_scope_violation"

    permission: PermissionKey
    company_id: str


AuthorizationError = Forbidden | CompanyScopeViolation


@dataclass(frozen=True)
class AuthorizationResult:
    error: AuthorizationError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


ALLOWED = AuthorizationResult()


# =============================================================================
# Permissions
# =============================================================================

def permissions_for(role: Role | str) -> frozenset[PermissionKey]:
    """Permissions granted to a role; unknown roles get none."""
    return get_role_default_permissions(role)


def has_permission(principal: Principal, permission: PermissionKey) -> bool:
    return permission in permissions_for(principal.role)


def has_any_permission(principal: Principal, permissions: Iterable[PermissionKey]) -> bool:
    granted = permissions_for(principal.role)
    return any(p in granted for p in permissions)


def has_all_permissions(principal: Principal, permissions: Iterable[PermissionKey]) -> bool:
    granted = permissions_for(principal.role)
    return all(p in granted for p in permissions)


# =============================================================================
# Company scope
# =============================================================================

def accessible_company_ids(principal: Principal) -> CompanyScope:
    """
    Derive the company scope.

    admin/super_admin: any company. Shipper users: their own company, or
    nothing when unset. sales_rep/manager staff: their assigned companies.
    Everyone else: nothing.
    """
    if principal.role in UNRESTRICTED_ROLES:
        return CompanyScope.any()
    if principal.user_type == UserType.SHIPPER:
        return CompanyScope.of([principal.company_id] if principal.company_id else [])
    if principal.role in ASSIGNMENT_SCOPED_ROLES:
        return CompanyScope.of(principal.assigned_company_ids)
    return CompanyScope()


def can_access_company(principal: Principal, company_id: str | None) -> bool:
    return accessible_company_ids(principal).contains(company_id)


# =============================================================================
# Composite check
# =============================================================================

def authorize(
    principal: Principal,
    permission: PermissionKey,
    resource_company_id: str | None = None,
) -> AuthorizationResult:
    """
    Require `permission`, then (when a company is given) company scope.

    The permission check always runs first, so a role without the permission
    gets Forbidden regardless of the company.
    """
    assert principal is not None, "authorize() requires a principal"

    if not has_permission(principal, permission):
        return AuthorizationResult(Forbidden(permission, principal.role_value))
    if resource_company_id is not None and not can_access_company(principal, resource_company_id):
        return AuthorizationResult(CompanyScopeViolation(permission, resource_company_id))
    return ALLOWED
