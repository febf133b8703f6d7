# =============================================================================
# app/dependencies.py - Shared Dependencies
# =============================================================================
# FastAPI dependency injection for shared resources.
# These are injected into route handlers using Depends().
# =============================================================================

from typing import Annotated

from fastapi import Depends

from app.auth import AuthUser, get_current_user
from app.config import Settings, get_settings
from lib.api_index import ApiIndex
from linting.engine import get_default_index


def get_api_index() -> ApiIndex:
    """
    Get the shared framework API index.

    Returns the process-wide index so framework modules are imported once.
    """
    return get_default_index()


# Type aliases for dependency injection
SettingsDep = Annotated[Settings, Depends(get_settings)]
ApiIndexDep = Annotated[ApiIndex, Depends(get_api_index)]
CurrentUser = Annotated[AuthUser, Depends(get_current_user)]
