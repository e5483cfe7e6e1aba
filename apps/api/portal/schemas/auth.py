"""Authentication-related Pydantic schemas."""

from pydantic import BaseModel, ConfigDict, Field

from portal.db.enums import Role, UserType


class TokenPayload(BaseModel):
    """Decoded JWT payload structure. Role and companies are looked up per request."""
    sub: str  # user_id
    user_type: UserType


class UserRecord(BaseModel):
    """
    A stored portal user.

    `role` is the value as stored (e.g. "sales"); it is mapped onto Role when
    the principal is resolved. Company assignments for staff live apart from
    the user, in the principal directory.
    """
    id: str
    user_type: UserType
    role: str
    company_id: str | None = None
    email: str | None = None
    is_active: bool = True


class Principal(BaseModel):
    """
    The authenticated actor a request runs as.

    Resolved per request from the principal directory; the session token only
    names the user, so role and company changes apply on the next request.
    `role` keeps the raw string when it is not a known Role, which then grants
    nothing.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    user_type: UserType
    role: Role | str = Field(union_mode="left_to_right")
    company_id: str | None = None
    assigned_company_ids: frozenset[str] = frozenset()
    email: str | None = None

    @property
    def role_value(self) -> str:
        return self.role.value if isinstance(self.role, Role) else str(self.role)


class MeResponse(BaseModel):
    """Response schema for the effective-permissions endpoint."""
    user_id: str
    user_type: UserType
    role: str
    company_id: str | None
    permissions: list[str]
    can_manage_users: bool
    company_scope: list[str] | None  # None means every company
