"""FastAPI dependencies for authentication, authorization, and storage access."""

import logging

import jwt
from fastapi import Depends, HTTPException, Request
from pydantic import ValidationError

from portal.core.access_control import authorize
from portal.core.permissions import PermissionKey
from portal.core.role_rules import normalize_legacy_role
from portal.core.security import decode_session_token
from portal.core.structured_logging import build_log_context
from portal.db.repository import (
    InMemoryPrincipalDirectory,
    InMemoryQuoteRepository,
    PrincipalDirectory,
    QuoteRepository,
)
from portal.schemas.auth import Principal, TokenPayload
from portal.services.audit_service import AuditSink, InMemoryAuditSink, LoggingAuditSink

logger = logging.getLogger(__name__)

# Cookie and header names
COOKIE_NAME = "portal_session"
CSRF_HEADER = "X-Requested-With"
CSRF_HEADER_VALUE = "XMLHttpRequest"

_quote_repository = InMemoryQuoteRepository()
_principal_directory = InMemoryPrincipalDirectory()
_audit_sink = LoggingAuditSink(InMemoryAuditSink())


def get_quote_repository() -> QuoteRepository:
    """Quote storage dependency. Overridden in tests and deployments."""
    return _quote_repository


def get_audit_sink() -> AuditSink:
    """Audit sink dependency. Overridden in tests and deployments."""
    return _audit_sink


def get_principal_directory() -> PrincipalDirectory:
    """User and company assignment lookup. Overridden in tests and deployments."""
    return _principal_directory


def get_current_principal(
    request: Request,
    directory: PrincipalDirectory = Depends(get_principal_directory),
) -> Principal:
    """
    Resolve the acting principal from the session cookie.

    The token only identifies the user. Role, own company and assigned
    companies are read from the directory on every request, so a demotion
    or a removed assignment takes effect immediately.

    Raises:
        HTTPException 401: missing, expired or tampered session, unknown or
            disabled user
    """
    token = request.cookies.get(COOKIE_NAME)
    if not token:
        raise HTTPException(status_code=401, detail="Not authenticated")

    try:
        payload = TokenPayload.model_validate(decode_session_token(token))
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=401, detail="Invalid session")
    except ValidationError:
        raise HTTPException(status_code=401, detail="Invalid session")

    user = directory.get_user(payload.sub)
    if user is None:
        raise HTTPException(status_code=401, detail="User not found")
    if not user.is_active:
        raise HTTPException(status_code=401, detail="Account disabled")
    if user.user_type != payload.user_type:
        raise HTTPException(status_code=401, detail="Invalid session")

    # Unknown stored roles stay raw strings and hold no permissions.
    role = normalize_legacy_role(user.role)
    return Principal(
        id=user.id,
        user_type=user.user_type,
        role=role if role is not None else user.role,
        company_id=user.company_id,
        assigned_company_ids=directory.assigned_company_ids(user.id),
        email=user.email,
    )


def require_permission(permission: PermissionKey):
    """
    Dependency factory for permission-based authorization.

    Checks the permission only; company scope is checked by the handler once
    the resource's company is known.

    Usage:
        @router.get("/x", dependencies=[Depends(require_permission(POLICIES["quotes"].default))])
    """
    def dependency(
        request: Request,
        principal: Principal = Depends(get_current_principal),
    ) -> Principal:
        result = authorize(principal, permission)
        if not result.ok:
            logger.warning(
                "permission_denied permission=%s kind=%s",
                permission.value,
                result.error.kind,
                extra=build_log_context(
                    user_id=principal.id,
                    route=request.url.path,
                    method=request.method,
                ),
            )
            raise HTTPException(
                status_code=403,
                detail=f"Missing permission: {permission.value}",
            )
        return principal
    return dependency


def require_csrf_header(request: Request) -> None:
    """
    Verify CSRF header on mutations.

    Apply to state-changing endpoints (POST, PATCH, DELETE).

    Raises:
        HTTPException 403: Missing or invalid CSRF header
    """
    if request.headers.get(CSRF_HEADER) != CSRF_HEADER_VALUE:
        raise HTTPException(
            status_code=403,
            detail=f"Missing CSRF header. Include '{CSRF_HEADER}: {CSRF_HEADER_VALUE}'",
        )
