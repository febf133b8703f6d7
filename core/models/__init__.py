# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains Pydantic schemas:
# - card.py: the parsed reference card document
# - card_api.py: card listing, outline and search schemas
# - lint.py: lint options, reports, rules and symbol lookups
#
# These models define the "contract" between API and clients.
# =============================================================================

# -----------------------------------------------------------------------------
# Card Document Models
# -----------------------------------------------------------------------------
from .card import (
    CARD_COLUMNS,
    REQUIRED_COLUMNS,
    CodeBlock,
    ReferenceCard,
    Section,
    Table,
    TableRow,
)

# -----------------------------------------------------------------------------
# Card API Models
# -----------------------------------------------------------------------------
from .card_api import (
    CardList,
    CardResponse,
    CardSummary,
    SearchHit,
    SearchResponse,
    SectionOutline,
)

# -----------------------------------------------------------------------------
# Lint Models
# -----------------------------------------------------------------------------
from .lint import (
    FindingResponse,
    LintOptions,
    LintReportResponse,
    RuleResponse,
    SymbolResponse,
)

__all__ = [
    # Card document
    "CARD_COLUMNS",
    "REQUIRED_COLUMNS",
    "CodeBlock",
    "ReferenceCard",
    "Section",
    "Table",
    "TableRow",
    # Card API
    "CardList",
    "CardResponse",
    "CardSummary",
    "SearchHit",
    "SearchResponse",
    "SectionOutline",
    # Lint
    "FindingResponse",
    "LintOptions",
    "LintReportResponse",
    "RuleResponse",
    "SymbolResponse",
]
