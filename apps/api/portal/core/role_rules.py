"""Role rules: legacy role mapping, display text and role assignment."""

from types import MappingProxyType
from typing import Mapping

from portal.db.enums import Role


# Stored role strings seen in user records, after trim + lowercase.
LEGACY_ROLE_MAP: Mapping[str, Role] = MappingProxyType({
    "shipper": Role.SHIPPER,
    "sales": Role.SALES_REP,
    "sales_rep": Role.SALES_REP,
    "broker": Role.SALES_REP,
    "manager": Role.MANAGER,
    "admin": Role.ADMIN,
    "administrator": Role.ADMIN,
    "super_admin": Role.SUPER_ADMIN,
    "superadmin": Role.SUPER_ADMIN,
    "support": Role.SUPPORT,
    "customer_support": Role.SUPPORT,
})

# Role -> string written to user records. Sales reps are still stored as "sales".
ROLE_STORAGE_VALUES: Mapping[Role, str] = MappingProxyType({
    Role.SHIPPER: "shipper",
    Role.SALES_REP: "sales",
    Role.MANAGER: "manager",
    Role.ADMIN: "admin",
    Role.SUPER_ADMIN: "super_admin",
    Role.SUPPORT: "support",
})

ROLE_DISPLAY_NAMES: Mapping[Role, str] = MappingProxyType({
    Role.SHIPPER: "Shipper",
    Role.SALES_REP: "Sales Representative",
    Role.MANAGER: "Manager",
    Role.ADMIN: "Administrator",
    Role.SUPER_ADMIN: "Super Administrator",
    Role.SUPPORT: "Support",
})

ROLE_DESCRIPTIONS: Mapping[Role, str] = MappingProxyType({
    Role.SHIPPER: "Shipper access, can create quotes and manage their company profile",
    Role.SALES_REP: "Sales representative access, can manage assigned companies and quotes",
    Role.MANAGER: "Manager access, sales duties plus company and user editing",
    Role.ADMIN: "Administrative access, can manage users, companies, and system settings",
    Role.SUPER_ADMIN: "Full system access, can manage everything including other admins",
    Role.SUPPORT: "Support team access, can view data and handle support tickets",
})

ELEVATED_ROLES = frozenset({Role.MANAGER, Role.ADMIN, Role.SUPER_ADMIN})
ADMIN_ROLES = frozenset({Role.ADMIN, Role.SUPER_ADMIN})
MANAGER_ASSIGNABLE_ROLES = frozenset({Role.SALES_REP, Role.SUPPORT, Role.SHIPPER})


def _as_role(role) -> Role | None:
    if isinstance(role, Role):
        return role
    if isinstance(role, str) and Role.has_value(role):
        return Role(role)
    return None


def normalize_legacy_role(raw: str | None) -> Role | None:
    """
    Map a stored role string onto Role.

    Returns None for anything not in LEGACY_ROLE_MAP; callers treat that as
    a principal without permissions.
    """
    if not isinstance(raw, str):
        return None
    return LEGACY_ROLE_MAP.get(raw.strip().lower())


def role_to_storage_value(role) -> str | None:
    """
    Stored form of a role, the inverse of normalize_legacy_role.

    None for unknown roles so a bad value is never written back.
    """
    member = _as_role(role)
    return ROLE_STORAGE_VALUES[member] if member is not None else None


def role_display_name(role) -> str:
    member = _as_role(role)
    return ROLE_DISPLAY_NAMES[member] if member else "Unknown role"


def role_description(role) -> str:
    member = _as_role(role)
    return ROLE_DESCRIPTIONS[member] if member else "Unknown role"


def is_elevated_role(role) -> bool:
    return _as_role(role) in ELEVATED_ROLES


def has_admin_privileges(role) -> bool:
    return _as_role(role) in ADMIN_ROLES


def can_manage_users(role) -> bool:
    """Only admins and super admins manage other user accounts."""
    return _as_role(role) in ADMIN_ROLES


def can_assign_role(assigner, target) -> bool:
    """
    Whether a user holding `assigner` may give another user `target`.

    - super_admin is assigned only by super_admin
    - admin is assigned by admin or super_admin
    - admins assign every other role
    - managers assign sales_rep, support and shipper
    """
    assigner_role = _as_role(assigner)
    target_role = _as_role(target)
    if assigner_role is None or target_role is None:
        return False

    if target_role == Role.SUPER_ADMIN:
        return assigner_role == Role.SUPER_ADMIN
    if target_role == Role.ADMIN:
        return assigner_role in ADMIN_ROLES
    if assigner_role in ADMIN_ROLES:
        return True
    if assigner_role == Role.MANAGER:
        return target_role in MANAGER_ASSIGNABLE_ROLES
    return False


def assignable_roles(assigner) -> list[Role]:
    """Roles `assigner` may hand out, in Role declaration order."""
    return [role for role in Role if can_assign_role(assigner, role)]
