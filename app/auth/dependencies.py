# =============================================================================
# app/auth/dependencies.py - FastAPI Auth Dependencies
# =============================================================================
# Provides dependency injection for authentication.
#
# Tokens come from POST /api/v1/auth/token (OAuth2 password flow) and are
# sent back as "Authorization: Bearer <token>".
#
# Usage:
#   from app.auth import get_current_user, AuthUser
#
#   @router.post("/protected")
#   async def protected(user: AuthUser = Depends(get_current_user)):
#       return {"username": user.username}
# =============================================================================

import logging

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import ExpiredSignatureError, JWTError

from app.auth.models import AuthUser
from app.auth.security import decode_access_token

logger = logging.getLogger(__name__)

# Bearer token extractor; tokenUrl feeds the "Authorize" button in /docs
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/token")


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def user_from_token(token: str) -> AuthUser:
    """
    Validate a token and build the user it names.

    Shared by the HTTP dependency and the WebSocket route.

    Raises:
        HTTPException: 401 if the token is invalid, expired or has no subject
    """
    try:
        payload = decode_access_token(token)
    except ExpiredSignatureError:
        logger.warning("JWT token has expired")
        raise _unauthorized("Token has expired")
    except JWTError as e:
        logger.warning(f"JWT validation failed: {e}")
        raise _unauthorized(f"Invalid token: {str(e)}")

    username = payload.get("sub")
    if not username:
        logger.warning("JWT token missing 'sub' claim")
        raise _unauthorized("Invalid token: missing subject")

    logger.debug(f"Authenticated user: {username}")
    return AuthUser(username=username, is_admin=bool(payload.get("admin", False)))


async def get_current_user(token: str = Depends(oauth2_scheme)) -> AuthUser:
    """
    Extract and validate the user from the bearer token.

    Raises:
        HTTPException: 401 if token is missing, invalid or expired
    """
    return user_from_token(token)

