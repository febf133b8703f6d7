# =============================================================================
# app/routers/symbols.py - API Reference Lookup
# =============================================================================
# Resolves a card-style reference ("@app.get()", "Depends", "fastapi.security.
# OAuth2PasswordBearer") against the installed framework.
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Path

from app.dependencies import ApiIndexDep
from core.models.lint import SymbolResponse

router = APIRouter()


@router.get("/{reference:path}", response_model=SymbolResponse)
async def resolve_symbol(
    reference: Annotated[str, Path(description="Reference as written on a card")],
    api_index: ApiIndexDep,
):
    """
    Resolve a reference.

    `found` is false for names that don't exist; `verifiable` is false when
    the owning package isn't installed.
    """
    return api_index.resolve(reference).to_dict()
