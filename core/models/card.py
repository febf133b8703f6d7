# =============================================================================
# core/models/card.py - Reference Card Document Schemas
# =============================================================================
# These models describe a parsed reference card:
# - ReferenceCard: the whole document (title, preamble, sections)
# - Section: one heading with its prose, tables and code blocks
# - Table / TableRow: a Markdown table (usually Function/Class | Purpose |
#   Example | Notes)
# - CodeBlock: a fenced code block
#
# The parser (lib/card_parser.py) produces these; the renderer
# (lib/card_renderer.py) turns them back into Markdown.
# =============================================================================

from typing import Iterator

from pydantic import BaseModel, Field


# Standard card columns, in order
SYMBOL_COLUMN = "Function/Class"
PURPOSE_COLUMN = "Purpose"
EXAMPLE_COLUMN = "Example"
NOTES_COLUMN = "Notes"

CARD_COLUMNS = [SYMBOL_COLUMN, PURPOSE_COLUMN, EXAMPLE_COLUMN, NOTES_COLUMN]
REQUIRED_COLUMNS = [SYMBOL_COLUMN, PURPOSE_COLUMN, EXAMPLE_COLUMN]

PYTHON_LANGUAGES = {"python", "py", "python3"}


def _normalize_header(name: str) -> str:
    """'Function / Class ' -> 'function/class'"""
    return "".join(name.split()).lower()


# =============================================================================
# Building Blocks
# =============================================================================

class CodeBlock(BaseModel):
    """A fenced code block."""

    language: str = Field(
        default="",
        description="Info string of the opening fence (empty if none)"
    )
    code: str = Field(default="", description="Block contents without fences")
    line: int = Field(..., ge=1, description="Line of the opening fence")
    terminated: bool = Field(
        default=True,
        description="False when the fence never closes"
    )

    @property
    def is_python(self) -> bool:
        return self.language.lower() in PYTHON_LANGUAGES


class TableRow(BaseModel):
    """One body row of a table."""

    cells: list[str] = Field(default_factory=list)
    line: int = Field(..., ge=1)


class Table(BaseModel):
    """
    A Markdown table.

    Columns are looked up by header name, so cards may reorder columns or
    add extra ones without breaking lookups.
    """

    header: list[str] = Field(default_factory=list)
    rows: list[TableRow] = Field(default_factory=list)
    line: int = Field(..., ge=1, description="Line of the header row")

    def column(self, name: str) -> int | None:
        """Index of a header (case and whitespace insensitive), or None."""
        wanted = _normalize_header(name)
        for index, header in enumerate(self.header):
            if _normalize_header(header) == wanted:
                return index
        return None

    def cell(self, row: TableRow, name: str) -> str:
        """Stripped cell text for a named column ("" if missing)."""
        index = self.column(name)
        if index is None or index >= len(row.cells):
            return ""
        return row.cells[index].strip()

    @property
    def is_card_table(self) -> bool:
        """True when the table has the Function/Class column."""
        return self.column(SYMBOL_COLUMN) is not None


class Section(BaseModel):
    """
    One heading and everything up to the next heading.

    Sections are kept flat; nesting is expressed through `level`.
    """

    title: str
    level: int = Field(..., ge=1, le=6)
    slug: str
    line: int = Field(..., ge=1)
    text: str = Field(default="", description="Prose lines, joined")
    tables: list[Table] = Field(default_factory=list)
    code_blocks: list[CodeBlock] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.text.strip() and not self.tables and not self.code_blocks


# =============================================================================
# Document
# =============================================================================

class ReferenceCard(BaseModel):
    """
    A parsed reference card.

    Example:
        card = parse_card(Path("docs/fastapi_reference_card.md").read_text())
        for section, table in card.iter_tables():
            ...
    """

    title: str = Field(default="Untitled")
    source_name: str = Field(default="<string>")
    preamble: str = Field(default="")
    preamble_code_blocks: list[CodeBlock] = Field(
        default_factory=list,
        description="Code blocks that open before the first section"
    )
    sections: list[Section] = Field(default_factory=list)
    framework_versions: dict[str, str] = Field(
        default_factory=dict,
        description="Framework versions stated by the card, e.g. {'fastapi': '0.110'}"
    )

    def get_section(self, slug: str) -> Section | None:
        for section in self.sections:
            if section.slug == slug:
                return section
        return None

    def iter_tables(self) -> Iterator[tuple[Section, Table]]:
        for section in self.sections:
            for table in section.tables:
                yield section, table

    def iter_code_blocks(self) -> Iterator[tuple[Section | None, CodeBlock]]:
        """Yield (section, block) pairs; preamble blocks come first with section None."""
        for block in self.preamble_code_blocks:
            yield None, block
        for section in self.sections:
            for block in section.code_blocks:
                yield section, block

    def has_subsections(self, section: Section) -> bool:
        """True when the next section is nested below this one."""
        for index, candidate in enumerate(self.sections):
            if candidate is section:
                if index + 1 >= len(self.sections):
                    return False
                return self.sections[index + 1].level > section.level
        return False

    @property
    def symbol_count(self) -> int:
        """Number of table rows with a Function/Class entry."""
        return sum(
            1
            for _, table in self.iter_tables()
            if table.is_card_table
            for row in table.rows
            if table.cell(row, SYMBOL_COLUMN)
        )
