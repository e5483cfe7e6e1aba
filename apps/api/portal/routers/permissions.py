"""Permissions router - read-only views of the role permission model.

Endpoints for:
- Listing every permission with metadata
- Listing roles with their grants
- The caller's own effective permissions and company scope
"""

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from portal.core.access_control import accessible_company_ids, permissions_for
from portal.core.deps import get_current_principal, require_permission
from portal.core.permissions import (
    get_all_permissions,
    get_permissions_by_category,
    get_role_default_permissions,
)
from portal.core.policies import POLICIES
from portal.core.role_rules import (
    assignable_roles,
    can_manage_users,
    role_description,
    role_display_name,
)
from portal.db.enums import Role
from portal.schemas.auth import MeResponse, Principal


router = APIRouter(prefix="/settings/permissions", tags=["Permissions"])


# =============================================================================
# Schemas
# =============================================================================

class PermissionInfo(BaseModel):
    """Permission metadata for UI."""
    key: str
    label: str
    description: str
    category: str


class RoleSummary(BaseModel):
    """Role with permission count."""
    role: str
    label: str
    description: str
    permission_count: int
    assignable: bool  # by the caller


class RolePermissionRead(BaseModel):
    """Permission in role context."""
    key: str
    label: str
    description: str
    is_granted: bool


class RoleDetail(BaseModel):
    """Role with all permissions grouped by category."""
    role: str
    label: str
    permissions_by_category: dict[str, list[RolePermissionRead]]


# =============================================================================
# Available Permissions
# =============================================================================

@router.get("/available", response_model=list[PermissionInfo])
def list_available_permissions(
    principal: Principal = Depends(require_permission(POLICIES["users"].default)),
):
    """
    List all available permissions with metadata.

    Requires: view_users
    """
    return [
        PermissionInfo(
            key=p.key.value,
            label=p.label,
            description=p.description,
            category=p.category.value,
        )
        for p in get_all_permissions()
    ]


# =============================================================================
# Roles
# =============================================================================

@router.get("/roles", response_model=list[RoleSummary])
def list_roles(
    principal: Principal = Depends(require_permission(POLICIES["users"].default)),
):
    """
    List roles with permission counts, flagging the ones the caller may assign.

    Requires: view_users
    """
    assignable = set(assignable_roles(principal.role))
    return [
        RoleSummary(
            role=role.value,
            label=role_display_name(role),
            description=role_description(role),
            permission_count=len(get_role_default_permissions(role)),
            assignable=role in assignable,
        )
        for role in Role
    ]


@router.get("/roles/{role}", response_model=RoleDetail)
def get_role_detail(
    role: str,
    principal: Principal = Depends(require_permission(POLICIES["users"].default)),
):
    """
    Role grants grouped by category.

    Requires: view_users
    """
    if not Role.has_value(role):
        raise HTTPException(status_code=404, detail=f"Unknown role '{role}'")

    granted = get_role_default_permissions(Role(role))
    by_category = {
        category: [
            RolePermissionRead(
                key=p.key.value,
                label=p.label,
                description=p.description,
                is_granted=p.key in granted,
            )
            for p in perms
        ]
        for category, perms in get_permissions_by_category().items()
    }
    return RoleDetail(
        role=role,
        label=role_display_name(role),
        permissions_by_category=by_category,
    )


# =============================================================================
# Effective permissions
# =============================================================================

@router.get("/effective/me", response_model=MeResponse)
def get_my_permissions(
    principal: Principal = Depends(get_current_principal),
):
    """The caller's permissions and company scope (null scope means every company)."""
    scope = accessible_company_ids(principal)
    granted = permissions_for(principal.role)
    return MeResponse(
        user_id=principal.id,
        user_type=principal.user_type,
        role=principal.role_value,
        company_id=principal.company_id,
        permissions=sorted(p.value for p in granted),
        can_manage_users=can_manage_users(principal.role),
        company_scope=None if scope.unrestricted else sorted(scope.company_ids),
    )
