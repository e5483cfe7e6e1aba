"""Centralized RBAC policies for API resources."""

from dataclasses import dataclass

from portal.core.permissions import PermissionKey as P


@dataclass(frozen=True)
class ResourcePolicy:
    """Default permission + per-action overrides for a resource."""

    default: P | None
    actions: dict[str, P]

    def permission_for(self, action: str | None = None) -> P | None:
        if action is None:
            return self.default
        return self.actions[action]


POLICIES: dict[str, ResourcePolicy] = {
    "quotes": ResourcePolicy(
        default=P.VIEW_QUOTES,
        actions={
            "create": P.CREATE_QUOTES,
            "edit": P.EDIT_QUOTES,
            "change_status": P.EDIT_QUOTES,
            "change_broker_status": P.EDIT_QUOTES,
            "delete": P.DELETE_QUOTES,
            "approve": P.APPROVE_QUOTES,
            "view_audit": P.VIEW_QUOTES,
        },
    ),
    "orders": ResourcePolicy(
        default=P.VIEW_ORDERS,
        actions={
            "create": P.CREATE_ORDERS,
            "edit": P.EDIT_ORDERS,
            "delete": P.DELETE_ORDERS,
            "fulfill": P.FULFILL_ORDERS,
        },
    ),
    "companies": ResourcePolicy(
        default=P.VIEW_COMPANIES,
        actions={
            "create": P.CREATE_COMPANIES,
            "edit": P.EDIT_COMPANIES,
            "delete": P.DELETE_COMPANIES,
            "assign_sales_users": P.ASSIGN_SALES_USERS,
        },
    ),
    "users": ResourcePolicy(
        default=P.VIEW_USERS,
        actions={
            "create": P.CREATE_USERS,
            "edit": P.EDIT_USERS,
            "delete": P.DELETE_USERS,
            "manage_roles": P.MANAGE_ROLES,
        },
    ),
    "reports": ResourcePolicy(
        default=P.VIEW_REPORTS,
        actions={
            "analytics": P.VIEW_ANALYTICS,
            "export": P.EXPORT_DATA,
        },
    ),
    "system": ResourcePolicy(
        default=P.SYSTEM_CONFIG,
        actions={
            "database": P.DATABASE_ACCESS,
            "api": P.API_ACCESS,
        },
    ),
    "support": ResourcePolicy(
        default=P.VIEW_CHAT,
        actions={"tickets": P.SUPPORT_TICKETS},
    ),
}


def get_policy(resource: str) -> ResourcePolicy:
    """Fetch a resource policy or raise KeyError."""
    return POLICIES[resource]
