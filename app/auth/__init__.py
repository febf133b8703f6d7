# =============================================================================
# app/auth/__init__.py - Authentication Module
# =============================================================================
# Provides JWT bearer authentication with an OAuth2 password-flow token
# endpoint.
#
# Usage:
#   from app.auth import get_current_user, AuthUser
#
#   @router.post("/protected")
#   async def protected(user: AuthUser = Depends(get_current_user)):
#       return {"username": user.username}
# =============================================================================

from app.auth.dependencies import get_current_user, user_from_token
from app.auth.models import AuthUser, Token, UserResponse

__all__ = [
    "get_current_user",
    "user_from_token",
    "AuthUser",
    "Token",
    "UserResponse",
]
