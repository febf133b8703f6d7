# =============================================================================
# app/auth/models.py - Authentication Models
# =============================================================================
# Pydantic models for authentication data.
# =============================================================================

from pydantic import BaseModel, ConfigDict


class AuthUser(BaseModel):
    """
    Authenticated user extracted from an access token.

    This is the minimal user info carried by the token itself.
    """
    model_config = ConfigDict(frozen=True)

    username: str
    is_admin: bool = False


class UserResponse(BaseModel):
    """User info returned by GET /auth/me."""
    username: str
    is_admin: bool = False


class Token(BaseModel):
    """OAuth2 token response."""
    access_token: str
    token_type: str = "bearer"
    expires_in: int

