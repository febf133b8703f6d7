# =============================================================================
# core/services/card_service.py - Card Store
# =============================================================================
# Keeps parsed cards in process memory, keyed by card ID.
# Separates HTTP concerns from storage and search logic.
#
# Each record holds:
#   id, title, filename, owner, created_at, markdown, card (ReferenceCard)
# =============================================================================

import logging
import threading
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from app.exceptions import CardNotFoundError, SectionNotFoundError
from core.models.card import (
    EXAMPLE_COLUMN,
    NOTES_COLUMN,
    PURPOSE_COLUMN,
    SYMBOL_COLUMN,
    ReferenceCard,
    Section,
)
from core.models.card_api import CardResponse, CardSummary, SearchHit, SectionOutline
from lib.card_parser import parse_card

logger = logging.getLogger(__name__)

SYSTEM_OWNER = "system"

_cards: dict[str, dict[str, Any]] = {}
_lock = threading.Lock()


class CardService:
    """
    Service for card storage and lookup.

    Provides a clean interface between API routes and the card store.
    """

    @staticmethod
    def create_card(
        markdown: str,
        filename: str,
        owner: str,
        card_id: str | None = None,
    ) -> dict[str, Any]:
        """
        Parse and store a card.

        Args:
            markdown: Card source
            filename: Original filename (used as the source name)
            owner: Username that uploaded the card
            card_id: Fixed ID (bundled card); a new UUID otherwise

        Returns:
            The stored card record

        Raises:
            CardParseError: If the markdown is empty
        """
        card = parse_card(markdown, source_name=filename)

        record = {
            "id": card_id or str(uuid.uuid4()),
            "title": card.title,
            "filename": filename,
            "owner": owner,
            "created_at": datetime.now(timezone.utc),
            "markdown": markdown,
            "card": card,
        }

        with _lock:
            _cards[record["id"]] = record

        logger.info(
            f"Stored card {record['id']} ({filename}): "
            f"{len(card.sections)} sections, owner={owner}"
        )
        return record

    @staticmethod
    def get_card(card_id: str) -> dict[str, Any]:
        """
        Get a card record by ID.

        Raises:
            CardNotFoundError: If the card doesn't exist
        """
        with _lock:
            record = _cards.get(str(card_id))
        if record is None:
            raise CardNotFoundError(str(card_id))
        return record

    @staticmethod
    def list_cards() -> list[dict[str, Any]]:
        """All card records, oldest first."""
        with _lock:
            records = list(_cards.values())
        return sorted(records, key=lambda r: r["created_at"])

    @staticmethod
    def delete_card(card_id: str, owner: str, is_admin: bool = False) -> None:
        """
        Delete a card.

        Only the owner or an admin may delete. Other users get the same
        not-found error as for a missing card.

        Raises:
            CardNotFoundError: If the card doesn't exist or isn't theirs
        """
        record = CardService.get_card(card_id)
        if record["owner"] != owner and not is_admin:
            raise CardNotFoundError(str(card_id))

        with _lock:
            _cards.pop(str(card_id), None)

        logger.info(f"Deleted card {card_id} (by {owner})")

    @staticmethod
    def get_section(card_id: str, slug: str) -> Section:
        """
        Raises:
            CardNotFoundError: If the card doesn't exist
            SectionNotFoundError: If the card has no section with that slug
        """
        card: ReferenceCard = CardService.get_card(card_id)["card"]
        section = card.get_section(slug)
        if section is None:
            raise SectionNotFoundError(str(card_id), slug)
        return section

    @staticmethod
    def search(card_id: str, query: str) -> list[SearchHit]:
        """
        Table rows whose Function/Class or Purpose contains `query`
        (case-insensitive).
        """
        card: ReferenceCard = CardService.get_card(card_id)["card"]
        needle = query.strip().lower()
        hits = []

        for section, table in card.iter_tables():
            if not table.is_card_table:
                continue
            for row in table.rows:
                symbol = table.cell(row, SYMBOL_COLUMN)
                purpose = table.cell(row, PURPOSE_COLUMN)
                if needle not in symbol.lower() and needle not in purpose.lower():
                    continue
                hits.append(SearchHit(
                    section=section.slug,
                    line=row.line,
                    symbol=symbol,
                    purpose=purpose,
                    example=table.cell(row, EXAMPLE_COLUMN),
                    notes=table.cell(row, NOTES_COLUMN),
                ))

        return hits

    @staticmethod
    def load_bundled_card(path: str | Path) -> dict[str, Any] | None:
        """
        Register the card shipped with the repository.

        The ID is derived from the filename so it is the same on every start.
        Returns None (and logs) when the file is missing.
        """
        path = Path(path)
        if not path.is_file():
            logger.warning(f"Bundled card not found: {path}")
            return None

        card_id = str(uuid.uuid5(uuid.NAMESPACE_URL, f"refcard:bundled:{path.name}"))
        return CardService.create_card(
            markdown=path.read_text(encoding="utf-8"),
            filename=path.name,
            owner=SYSTEM_OWNER,
            card_id=card_id,
        )

    @staticmethod
    def clear() -> None:
        """Drop every card (tests)."""
        with _lock:
            _cards.clear()


# =============================================================================
# Response Builders
# =============================================================================

def to_summary(record: dict[str, Any]) -> CardSummary:
    card: ReferenceCard = record["card"]
    return CardSummary(
        id=record["id"],
        title=record["title"],
        filename=record["filename"],
        owner=record["owner"],
        created_at=record["created_at"],
        section_count=len(card.sections),
        symbol_count=card.symbol_count,
        framework_versions=card.framework_versions,
    )


def to_response(record: dict[str, Any]) -> CardResponse:
    card: ReferenceCard = record["card"]
    return CardResponse(
        **to_summary(record).model_dump(),
        preamble=card.preamble,
        sections=[SectionOutline.from_section(section) for section in card.sections],
    )
