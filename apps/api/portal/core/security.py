"""Security utilities for JWT session tokens."""

from datetime import datetime, timedelta, timezone

import jwt

from portal.core.config import settings
from portal.db.enums import UserType


# =============================================================================
# Session Token (JWT in cookie)
# =============================================================================

def create_session_token(user_id: str, user_type: UserType) -> str:
    """
    Create signed session JWT.

    Always signs with current secret (JWT_SECRET). The token names the user
    only; role and company assignments are read from the directory on each
    request.
    """
    now = datetime.now(timezone.utc)
    payload = {
        "sub": user_id,
        "user_type": UserType(user_type).value,
        "iat": now,
        "exp": now + timedelta(hours=settings.JWT_EXPIRES_HOURS),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm="HS256")


def decode_session_token(token: str) -> dict:
    """
    Decode and verify session JWT.

    Tries current secret first, then previous (for rotation support).

    Raises:
        jwt.InvalidTokenError: If token invalid with all secrets
    """
    last_error: jwt.InvalidTokenError | None = None
    for secret in settings.jwt_secrets:
        try:
            return jwt.decode(token, secret, algorithms=["HS256"])
        except jwt.InvalidTokenError as e:
            last_error = e
            continue
    raise last_error  # type: ignore[misc]
