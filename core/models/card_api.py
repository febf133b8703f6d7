# =============================================================================
# core/models/card_api.py - Card API Schemas
# =============================================================================
# API contract for card operations:
# - CardSummary: one entry in GET /cards
# - CardResponse: card metadata plus its section outline
# - SectionOutline: heading-level view of a section
# - SearchHit: a table row matching a search query
# =============================================================================

from datetime import datetime

from pydantic import BaseModel, Field

from core.models.card import Section


class SectionOutline(BaseModel):
    """A section without its content."""
    title: str
    slug: str
    level: int
    line: int
    table_rows: int = Field(default=0, description="Rows across the section's tables")
    code_blocks: int = Field(default=0, description="Fenced code blocks in the section")

    @classmethod
    def from_section(cls, section: Section) -> "SectionOutline":
        return cls(
            title=section.title,
            slug=section.slug,
            level=section.level,
            line=section.line,
            table_rows=sum(len(table.rows) for table in section.tables),
            code_blocks=len(section.code_blocks),
        )


class CardSummary(BaseModel):
    """
    Card listing entry.

    Example:
        {
            "id": "550e8400-e29b-41d4-a716-446655440000",
            "title": "FastAPI Complete Reference Card",
            "filename": "fastapi_reference_card.md",
            "owner": "system",
            "created_at": "2024-01-15T10:30:00Z",
            "section_count": 17,
            "symbol_count": 120
        }
    """
    id: str
    title: str
    filename: str
    owner: str
    created_at: datetime
    section_count: int
    symbol_count: int
    framework_versions: dict[str, str] = Field(default_factory=dict)


class CardList(BaseModel):
    """Paginated card listing."""
    cards: list[CardSummary]
    total: int
    skip: int
    limit: int


class CardResponse(CardSummary):
    """Card metadata with its outline."""
    preamble: str = ""
    sections: list[SectionOutline] = Field(default_factory=list)


class SearchHit(BaseModel):
    """A table row that matched a search."""
    section: str
    line: int
    symbol: str
    purpose: str
    example: str = ""
    notes: str = ""


class SearchResponse(BaseModel):
    """Search results for one card."""
    card_id: str
    query: str
    hits: list[SearchHit]
