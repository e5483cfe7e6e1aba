"""Permission registry with metadata for UI and validation.

All permissions are defined here with labels, descriptions, and categories.
Each role's grants are listed explicitly in ROLE_DEFAULTS; nothing is
inherited from another role. Unknown roles hold no permissions.
"""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping

from portal.db.enums import Role


class PermissionKey(str, Enum):
    """Atomic capability tokens. Values are the stored permission strings."""

    # Quotes
    VIEW_QUOTES = "view_quotes"
    CREATE_QUOTES = "create_quotes"
    EDIT_QUOTES = "edit_quotes"
    DELETE_QUOTES = "delete_quotes"
    APPROVE_QUOTES = "approve_quotes"

    # Orders
    VIEW_ORDERS = "view_orders"
    CREATE_ORDERS = "create_orders"
    EDIT_ORDERS = "edit_orders"
    DELETE_ORDERS = "delete_orders"
    FULFILL_ORDERS = "fulfill_orders"

    # Companies
    VIEW_COMPANIES = "view_companies"
    CREATE_COMPANIES = "create_companies"
    EDIT_COMPANIES = "edit_companies"
    DELETE_COMPANIES = "delete_companies"
    ASSIGN_SALES_USERS = "assign_sales_users"

    # Users
    VIEW_USERS = "view_users"
    CREATE_USERS = "create_users"
    EDIT_USERS = "edit_users"
    DELETE_USERS = "delete_users"
    MANAGE_ROLES = "manage_roles"

    # Reports
    VIEW_REPORTS = "view_reports"
    VIEW_ANALYTICS = "view_analytics"
    EXPORT_DATA = "export_data"

    # System
    SYSTEM_CONFIG = "system_config"
    DATABASE_ACCESS = "database_access"
    API_ACCESS = "api_access"

    # Support
    VIEW_CHAT = "view_chat"
    SUPPORT_TICKETS = "support_tickets"

    @classmethod
    def has_value(cls, value: str) -> bool:
        return value in cls._value2member_map_


@dataclass(frozen=True)
class PermissionDef:
    """Permission definition with metadata."""
    key: PermissionKey
    label: str
    description: str
    category: str


class PermissionCategory(str, Enum):
    """Permission categories for UI grouping."""
    QUOTES = "Quotes"
    ORDERS = "Orders"
    COMPANIES = "Companies"
    USERS = "Users"
    REPORTS = "Reports"
    SYSTEM = "System"
    SUPPORT = "Support"


P = PermissionKey
C = PermissionCategory


# =============================================================================
# Permission Registry
# =============================================================================

PERMISSION_REGISTRY: Mapping[PermissionKey, PermissionDef] = MappingProxyType({
    # Quotes
    P.VIEW_QUOTES: PermissionDef(
        P.VIEW_QUOTES, "View Quotes",
        "See quote requests and their status", C.QUOTES
    ),
    P.CREATE_QUOTES: PermissionDef(
        P.CREATE_QUOTES, "Create Quotes",
        "Submit new shipping quote requests", C.QUOTES
    ),
    P.EDIT_QUOTES: PermissionDef(
        P.EDIT_QUOTES, "Edit Quotes",
        "Modify quotes and move them between statuses", C.QUOTES
    ),
    P.DELETE_QUOTES: PermissionDef(
        P.DELETE_QUOTES, "Delete Quotes",
        "Remove quote requests", C.QUOTES
    ),
    P.APPROVE_QUOTES: PermissionDef(
        P.APPROVE_QUOTES, "Approve Quotes",
        "Accept a priced quote", C.QUOTES
    ),

    # Orders
    P.VIEW_ORDERS: PermissionDef(
        P.VIEW_ORDERS, "View Orders",
        "See orders and shipment progress", C.ORDERS
    ),
    P.CREATE_ORDERS: PermissionDef(
        P.CREATE_ORDERS, "Create Orders",
        "Convert approved quotes into orders", C.ORDERS
    ),
    P.EDIT_ORDERS: PermissionDef(
        P.EDIT_ORDERS, "Edit Orders",
        "Modify order details", C.ORDERS
    ),
    P.DELETE_ORDERS: PermissionDef(
        P.DELETE_ORDERS, "Delete Orders",
        "Remove orders", C.ORDERS
    ),
    P.FULFILL_ORDERS: PermissionDef(
        P.FULFILL_ORDERS, "Fulfill Orders",
        "Dispatch, pick up and deliver orders", C.ORDERS
    ),

    # Companies
    P.VIEW_COMPANIES: PermissionDef(
        P.VIEW_COMPANIES, "View Companies",
        "See shipper companies", C.COMPANIES
    ),
    P.CREATE_COMPANIES: PermissionDef(
        P.CREATE_COMPANIES, "Create Companies",
        "Register new shipper companies", C.COMPANIES
    ),
    P.EDIT_COMPANIES: PermissionDef(
        P.EDIT_COMPANIES, "Edit Companies",
        "Modify company information", C.COMPANIES
    ),
    P.DELETE_COMPANIES: PermissionDef(
        P.DELETE_COMPANIES, "Delete Companies",
        "Remove companies", C.COMPANIES
    ),
    P.ASSIGN_SALES_USERS: PermissionDef(
        P.ASSIGN_SALES_USERS, "Assign Sales Users",
        "Assign sales representatives to companies", C.COMPANIES
    ),

    # Users
    P.VIEW_USERS: PermissionDef(
        P.VIEW_USERS, "View Users",
        "See user accounts", C.USERS
    ),
    P.CREATE_USERS: PermissionDef(
        P.CREATE_USERS, "Create Users",
        "Invite and create user accounts", C.USERS
    ),
    P.EDIT_USERS: PermissionDef(
        P.EDIT_USERS, "Edit Users",
        "Modify user accounts", C.USERS
    ),
    P.DELETE_USERS: PermissionDef(
        P.DELETE_USERS, "Delete Users",
        "Remove user accounts", C.USERS
    ),
    P.MANAGE_ROLES: PermissionDef(
        P.MANAGE_ROLES, "Manage Roles",
        "Change user roles", C.USERS
    ),

    # Reports
    P.VIEW_REPORTS: PermissionDef(
        P.VIEW_REPORTS, "View Reports",
        "Access operational reports", C.REPORTS
    ),
    P.VIEW_ANALYTICS: PermissionDef(
        P.VIEW_ANALYTICS, "View Analytics",
        "Access analytics dashboards", C.REPORTS
    ),
    P.EXPORT_DATA: PermissionDef(
        P.EXPORT_DATA, "Export Data",
        "Download data exports", C.REPORTS
    ),

    # System
    P.SYSTEM_CONFIG: PermissionDef(
        P.SYSTEM_CONFIG, "System Configuration",
        "Change portal-wide settings", C.SYSTEM
    ),
    P.DATABASE_ACCESS: PermissionDef(
        P.DATABASE_ACCESS, "Database Access",
        "Run maintenance against the data store", C.SYSTEM
    ),
    P.API_ACCESS: PermissionDef(
        P.API_ACCESS, "API Access",
        "Use the programmatic API", C.SYSTEM
    ),

    # Support
    P.VIEW_CHAT: PermissionDef(
        P.VIEW_CHAT, "View Chat",
        "Read and answer chat conversations", C.SUPPORT
    ),
    P.SUPPORT_TICKETS: PermissionDef(
        P.SUPPORT_TICKETS, "Support Tickets",
        "Handle support tickets", C.SUPPORT
    ),
})


# =============================================================================
# Default Role Permissions
# =============================================================================

ROLE_DEFAULTS: Mapping[Role, frozenset[PermissionKey]] = MappingProxyType({
    Role.SHIPPER: frozenset({
        P.VIEW_QUOTES,
        P.CREATE_QUOTES,
        P.EDIT_QUOTES,
        P.VIEW_ORDERS,
        P.APPROVE_QUOTES,
        P.VIEW_CHAT,
    }),
    Role.SALES_REP: frozenset({
        P.VIEW_QUOTES,
        P.CREATE_QUOTES,
        P.EDIT_QUOTES,
        P.VIEW_ORDERS,
        P.CREATE_ORDERS,
        P.EDIT_ORDERS,
        P.FULFILL_ORDERS,
        P.VIEW_COMPANIES,
        P.VIEW_USERS,
        P.VIEW_REPORTS,
        P.VIEW_CHAT,
        P.SUPPORT_TICKETS,
    }),
    Role.MANAGER: frozenset({
        P.VIEW_QUOTES,
        P.CREATE_QUOTES,
        P.EDIT_QUOTES,
        P.DELETE_QUOTES,
        P.VIEW_ORDERS,
        P.CREATE_ORDERS,
        P.EDIT_ORDERS,
        P.DELETE_ORDERS,
        P.FULFILL_ORDERS,
        P.VIEW_COMPANIES,
        P.EDIT_COMPANIES,
        P.ASSIGN_SALES_USERS,
        P.VIEW_USERS,
        P.EDIT_USERS,
        P.VIEW_REPORTS,
        P.VIEW_ANALYTICS,
        P.EXPORT_DATA,
        P.VIEW_CHAT,
        P.SUPPORT_TICKETS,
    }),
    Role.ADMIN: frozenset({
        P.VIEW_QUOTES,
        P.CREATE_QUOTES,
        P.EDIT_QUOTES,
        P.DELETE_QUOTES,
        P.VIEW_ORDERS,
        P.CREATE_ORDERS,
        P.EDIT_ORDERS,
        P.DELETE_ORDERS,
        P.FULFILL_ORDERS,
        P.VIEW_COMPANIES,
        P.CREATE_COMPANIES,
        P.EDIT_COMPANIES,
        P.DELETE_COMPANIES,
        P.ASSIGN_SALES_USERS,
        P.VIEW_USERS,
        P.CREATE_USERS,
        P.EDIT_USERS,
        P.DELETE_USERS,
        P.MANAGE_ROLES,
        P.VIEW_REPORTS,
        P.VIEW_ANALYTICS,
        P.EXPORT_DATA,
        P.VIEW_CHAT,
        P.SUPPORT_TICKETS,
        P.API_ACCESS,
    }),
    Role.SUPER_ADMIN: frozenset(PermissionKey),  # All permissions
    Role.SUPPORT: frozenset({
        P.VIEW_QUOTES,
        P.VIEW_ORDERS,
        P.VIEW_COMPANIES,
        P.VIEW_USERS,
        P.VIEW_CHAT,
        P.SUPPORT_TICKETS,
    }),
})


# =============================================================================
# Helper Functions
# =============================================================================

def get_all_permissions() -> list[PermissionDef]:
    """Get all permissions sorted by category."""
    return sorted(PERMISSION_REGISTRY.values(), key=lambda p: (p.category, p.key))


def get_permission(key: str) -> PermissionDef | None:
    """Get permission by key."""
    if not PermissionKey.has_value(key):
        return None
    return PERMISSION_REGISTRY.get(PermissionKey(key))


def is_valid_permission(key: str) -> bool:
    """Check if permission key exists."""
    return PermissionKey.has_value(key)


def get_role_default_permissions(role: Role | str) -> frozenset[PermissionKey]:
    """Get the permissions granted to a role (empty for unknown roles)."""
    if isinstance(role, Role):
        return ROLE_DEFAULTS[role]
    if isinstance(role, str) and Role.has_value(role):
        return ROLE_DEFAULTS[Role(role)]
    return frozenset()


def get_permissions_by_category() -> dict[str, list[PermissionDef]]:
    """Group permissions by category for UI."""
    result: dict[str, list[PermissionDef]] = {}
    for perm in PERMISSION_REGISTRY.values():
        result.setdefault(perm.category.value, []).append(perm)
    return result


def validate_permission_tables() -> None:
    """Raise RuntimeError if the registry or role table misses an enum member."""
    missing = set(PermissionKey) - set(PERMISSION_REGISTRY)
    if missing:
        raise RuntimeError(
            f"PERMISSION_REGISTRY missing: {sorted(p.value for p in missing)}"
        )
    for key, definition in PERMISSION_REGISTRY.items():
        if definition.key is not key:
            raise RuntimeError(f"PERMISSION_REGISTRY[{key.value}] has key {definition.key}")
    missing_roles = set(Role) - set(ROLE_DEFAULTS)
    if missing_roles:
        raise RuntimeError(
            f"ROLE_DEFAULTS missing roles: {sorted(r.value for r in missing_roles)}"
        )


validate_permission_tables()
