# =============================================================================
# app/auth/security.py - Credentials and Token Signing
# =============================================================================
# Checks the configured API credentials and issues/decodes JWT access tokens.
# =============================================================================

import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any

from jose import jwt

from app.auth.models import AuthUser
from app.config import settings

logger = logging.getLogger(__name__)


def authenticate_user(username: str, password: str) -> AuthUser | None:
    """
    Check a username/password pair against the configured credentials.

    Returns:
        AuthUser if the credentials match, None otherwise
    """
    username_ok = secrets.compare_digest(username.encode(), settings.API_USERNAME.encode())
    password_ok = secrets.compare_digest(password.encode(), settings.API_PASSWORD.encode())

    if not (username_ok and password_ok):
        logger.warning(f"Failed login for user: {username}")
        return None

    return AuthUser(
        username=username,
        is_admin=username in settings.admin_usernames_list,
    )


def create_access_token(user: AuthUser, expires_minutes: int | None = None) -> str:
    """
    Sign an access token for a user.

    Args:
        user: The authenticated user
        expires_minutes: Lifetime override (defaults to ACCESS_TOKEN_EXPIRE_MINUTES)

    Returns:
        Encoded JWT
    """
    now = datetime.now(timezone.utc)
    lifetime = timedelta(minutes=expires_minutes or settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    payload: dict[str, Any] = {
        "sub": user.username,
        "admin": user.is_admin,
        "iat": int(now.timestamp()),
        "exp": int((now + lifetime).timestamp()),
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> dict[str, Any]:
    """
    Verify and decode an access token.

    Raises:
        ExpiredSignatureError: If the token has expired
        JWTError: If the token is invalid
    """
    return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
