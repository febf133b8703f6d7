# =============================================================================
# app/routers/cards.py - Card Endpoints
# =============================================================================
# Upload, list, read, search and delete reference cards.
# =============================================================================

import logging
from pathlib import PurePath
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, File, Path, Query, Response, UploadFile, status

from app.config import settings
from app.dependencies import CurrentUser
from app.exceptions import CardDecodeError, FileTooLargeError, InvalidFileTypeError
from app.routers.lint import lint_in_background
from app.websocket import websocket_manager
from core.models.card import Section
from core.models.card_api import CardList, CardResponse, SearchResponse
from core.services.card_service import CardService, to_response, to_summary
from core.services.lint_service import LintService
from lib.card_renderer import render_card

logger = logging.getLogger(__name__)

router = APIRouter()

CardId = Annotated[UUID, Path(description="Card UUID")]


# =============================================================================
# Helper Functions
# =============================================================================

def _validate_upload(filename: str, content: bytes) -> str:
    """
    Check extension and size, then decode.

    Returns:
        The card text

    Raises:
        InvalidFileTypeError, FileTooLargeError, CardDecodeError
    """
    allowed = settings.allowed_extensions_list
    if PurePath(filename).suffix.lower() not in allowed:
        raise InvalidFileTypeError(filename, allowed)

    if len(content) > settings.max_upload_size_bytes:
        raise FileTooLargeError(len(content) / 1024, settings.MAX_UPLOAD_SIZE_KB)

    try:
        # utf-8-sig drops a BOM some editors add
        return content.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise CardDecodeError(filename, str(e))


# =============================================================================
# Endpoints
# =============================================================================

@router.get("", response_model=CardList)
async def list_cards(
    skip: Annotated[int, Query(ge=0, description="Cards to skip")] = 0,
    limit: Annotated[int, Query(ge=1, le=100, description="Max cards to return")] = 20,
):
    """
    List stored cards, oldest first.
    """
    records = CardService.list_cards()
    return CardList(
        cards=[to_summary(record) for record in records[skip:skip + limit]],
        total=len(records),
        skip=skip,
        limit=limit,
    )


@router.post("", response_model=CardResponse, status_code=status.HTTP_201_CREATED)
async def upload_card(
    file: Annotated[UploadFile, File(description="Markdown reference card")],
    background_tasks: BackgroundTasks,
    user: CurrentUser,
):
    """
    Upload a reference card.

    This endpoint:
    1. Validates the file (extension, size, UTF-8)
    2. Parses the Markdown into sections, tables and code blocks
    3. Stores the card under a new ID
    4. Schedules a lint run (when LINT_ON_UPLOAD is on); watch progress on
       the card's WebSocket or fetch GET /cards/{id}/lint afterwards

    Raises:
        400: Wrong extension or not UTF-8
        413: File too large
        422: Card is empty
    """
    filename = file.filename or "card.md"
    content = await file.read()
    markdown = _validate_upload(filename, content)

    record = CardService.create_card(markdown, filename=filename, owner=user.username)

    if settings.LINT_ON_UPLOAD:
        background_tasks.add_task(lint_in_background, record["id"])

    return to_response(record)


@router.get("/{card_id}", response_model=CardResponse)
async def get_card(card_id: CardId):
    """
    Get card metadata and its section outline.

    Raises:
        404: Card not found
    """
    return to_response(CardService.get_card(str(card_id)))


@router.get("/{card_id}/markdown")
async def get_card_markdown(card_id: CardId):
    """
    Get the card re-rendered as Markdown (tables re-padded).
    """
    record = CardService.get_card(str(card_id))
    return Response(
        content=render_card(record["card"]),
        media_type="text/markdown",
    )


@router.get("/{card_id}/sections/{slug}", response_model=Section)
async def get_section(
    card_id: CardId,
    slug: Annotated[str, Path(description="Section anchor, e.g. 'path-parameters'")],
):
    """
    Get one section with its prose, tables and code blocks.

    Raises:
        404: Card or section not found
    """
    return CardService.get_section(str(card_id), slug)


@router.get("/{card_id}/search", response_model=SearchResponse)
async def search_card(
    card_id: CardId,
    q: Annotated[str, Query(min_length=1, max_length=100, description="Text to find")],
):
    """
    Find table rows whose Function/Class or Purpose contains `q`
    (case-insensitive).
    """
    return SearchResponse(
        card_id=str(card_id),
        query=q,
        hits=CardService.search(str(card_id), q),
    )


@router.delete("/{card_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_card(card_id: CardId, user: CurrentUser):
    """
    Delete a card and its last lint report.

    Only the uploader or an admin may delete a card.

    Raises:
        404: Card not found (or not yours)
    """
    CardService.delete_card(str(card_id), owner=user.username, is_admin=user.is_admin)
    LintService.forget(str(card_id))
    websocket_manager.forget_card(str(card_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
