# =============================================================================
# lib/card_parser.py - Reference Card Markdown Parser
# =============================================================================
# Turns reference card Markdown into a ReferenceCard model.
#
# Recognized structure:
# - ATX headings (# .. ######) outside code fences
# - Pipe tables with a delimiter row (| --- | :---: |)
# - Fenced code blocks (``` or ~~~, optional language)
# - "FastAPI 0.110+" style version statements in the title/preamble
#
# Everything else is kept as prose.
#
# Usage:
#   from lib.card_parser import parse_card
#   card = parse_card(markdown_text, source_name="fastapi_reference_card.md")
# =============================================================================

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

from core.models.card import CodeBlock, ReferenceCard, Section, Table, TableRow
from lib.utils import ApplicationError, slugify

logger = logging.getLogger(__name__)


# =============================================================================
# Errors
# =============================================================================

class CardParseError(ApplicationError):
    """Raised when text cannot be turned into a reference card at all."""

    def __init__(self, message: str, source_name: str = "<string>"):
        super().__init__(
            message=message,
            code="CARD_PARSE_ERROR",
            suggestion="Provide a Markdown document with a '# Title' and '## Section' headings",
            details={"source_name": source_name},
        )


# =============================================================================
# Line Patterns
# =============================================================================

HEADING_RE = re.compile(r"^ {0,3}(#{1,6})\s+(.*?)(?:\s+#+)?\s*$")
FENCE_OPEN_RE = re.compile(r"^( {0,3})(`{3,}|~{3,})\s*([^\s`]*)[^`]*$")
TABLE_DELIMITER_RE = re.compile(r"^\s*\|?\s*:?-+:?\s*(\|\s*:?-+:?\s*)*\|?\s*$")
VERSION_RE = re.compile(
    r"\b(pydantic-settings|fastapi|pydantic|starlette)\s+v?(\d+(?:\.\d+)*)\+?",
    re.IGNORECASE,
)


def _is_table_start(lines: list[str], index: int) -> bool:
    if not lines[index].lstrip().startswith("|"):
        return False
    if index + 1 >= len(lines):
        return False
    return bool(TABLE_DELIMITER_RE.match(lines[index + 1])) and "-" in lines[index + 1]


def _closes_fence(line: str, fence: str) -> bool:
    stripped = line.strip()
    if len(line) - len(line.lstrip(" ")) > 3:
        return False
    return (
        len(stripped) >= len(fence)
        and set(stripped) == {fence[0]}
    )


# =============================================================================
# Table Cells
# =============================================================================

def split_row(line: str) -> list[str]:
    """
    Split a table row into cells.

    Pipes inside backtick code spans and escaped pipes (\\|) do not split;
    escaped pipes are unescaped in the returned cell text.

    Example:
        split_row("| `a | b` | c \\| d |")  # ["`a | b`", "c | d"]
    """
    text = line.strip()
    cells: list[str] = []
    current: list[str] = []
    code_run = 0  # length of the backtick run that opened the current span
    i = 0

    while i < len(text):
        char = text[i]

        if char == "\\" and i + 1 < len(text) and text[i + 1] == "|":
            current.append("|")
            i += 2
            continue

        if char == "`":
            run = len(text[i:]) - len(text[i:].lstrip("`"))
            if code_run == 0:
                # Only open a span if a matching run closes it
                if find_backtick_run(text, i + run, run) != -1:
                    code_run = run
            elif run == code_run:
                code_run = 0
            current.append("`" * run)
            i += run
            continue

        if char == "|" and code_run == 0:
            cells.append("".join(current))
            current = []
            i += 1
            continue

        current.append(char)
        i += 1

    cells.append("".join(current))

    # Leading and trailing pipes produce empty edge cells
    if text.startswith("|"):
        cells = cells[1:]
    if cells and text.endswith("|") and not text.endswith("\\|") and not cells[-1].strip():
        cells = cells[:-1]

    return [cell.strip() for cell in cells]


def find_backtick_run(text: str, start: int, length: int) -> int:
    """Position of the next run of exactly `length` backticks, or -1."""
    i = start
    while i < len(text):
        if text[i] == "`":
            run = len(text[i:]) - len(text[i:].lstrip("`"))
            if run == length:
                return i
            i += run
        else:
            i += 1
    return -1


# =============================================================================
# Parser
# =============================================================================

@dataclass
class _SectionBuilder:
    title: str
    level: int
    line: int
    text_lines: list[str] = field(default_factory=list)
    tables: list[Table] = field(default_factory=list)
    code_blocks: list[CodeBlock] = field(default_factory=list)

    def build(self, seen_slugs: dict[str, int]) -> Section:
        base = slugify(self.title)
        count = seen_slugs.get(base, 0)
        seen_slugs[base] = count + 1
        slug = base if count == 0 else f"{base}-{count}"
        return Section(
            title=self.title,
            level=self.level,
            slug=slug,
            line=self.line,
            text="\n".join(self.text_lines).strip(),
            tables=self.tables,
            code_blocks=self.code_blocks,
        )


def parse_card(text: str, source_name: str = "<string>") -> ReferenceCard:
    """
    Parse reference card Markdown.

    The first heading, when it is level 1, becomes the card title. Text before
    the first section is the preamble. Every other heading starts a section.

    Args:
        text: Markdown source
        source_name: Name used in findings and logs (file name or URL)

    Returns:
        ReferenceCard

    Raises:
        CardParseError: If the text is empty
    """
    if not text or not text.strip():
        raise CardParseError("Card is empty", source_name=source_name)

    lines = text.splitlines()
    title: str | None = None
    preamble_lines: list[str] = []
    preamble_code_blocks: list[CodeBlock] = []
    builders: list[_SectionBuilder] = []
    current: _SectionBuilder | None = None

    i = 0
    while i < len(lines):
        line = lines[i]
        line_no = i + 1

        # Fenced code block
        fence_match = FENCE_OPEN_RE.match(line)
        if fence_match:
            fence = fence_match.group(2)
            language = fence_match.group(3) or ""
            body: list[str] = []
            j = i + 1
            terminated = False
            while j < len(lines):
                if _closes_fence(lines[j], fence):
                    terminated = True
                    break
                body.append(lines[j])
                j += 1

            block = CodeBlock(
                language=language,
                code="\n".join(body),
                line=line_no,
                terminated=terminated,
            )
            if current is None:
                # Kept verbatim in the preamble text as well
                preamble_lines.extend(lines[i:j + 1])
                preamble_code_blocks.append(block)
            else:
                current.code_blocks.append(block)
            if not terminated:
                logger.debug(f"{source_name}:{line_no}: unterminated code fence")
            i = j + 1
            continue

        # Heading
        heading_match = HEADING_RE.match(line)
        if heading_match and heading_match.group(2).strip():
            level = len(heading_match.group(1))
            heading = heading_match.group(2).strip()
            if title is None and level == 1 and not builders:
                title = heading
            else:
                current = _SectionBuilder(title=heading, level=level, line=line_no)
                builders.append(current)
            i += 1
            continue

        # Table
        if _is_table_start(lines, i):
            table = Table(header=split_row(line), line=line_no)
            j = i + 2
            while j < len(lines) and lines[j].lstrip().startswith("|"):
                table.rows.append(TableRow(cells=split_row(lines[j]), line=j + 1))
                j += 1

            if current is None:
                preamble_lines.extend(lines[i:j])
            else:
                current.tables.append(table)
            i = j
            continue

        # Prose
        if current is None:
            preamble_lines.append(line)
        else:
            current.text_lines.append(line)
        i += 1

    preamble = "\n".join(preamble_lines).strip()
    seen_slugs: dict[str, int] = {}
    sections = [builder.build(seen_slugs) for builder in builders]

    card = ReferenceCard(
        title=title or "Untitled",
        source_name=source_name,
        preamble=preamble,
        preamble_code_blocks=preamble_code_blocks,
        sections=sections,
        framework_versions=extract_versions(f"{title or ''}\n{preamble}"),
    )

    logger.debug(
        f"Parsed {source_name}: {len(card.sections)} sections, "
        f"{card.symbol_count} symbols"
    )
    return card


def extract_versions(text: str) -> dict[str, str]:
    """
    Find stated framework versions.

    Example:
        extract_versions("FastAPI 0.110+ / Pydantic v2.5")
        # {"fastapi": "0.110", "pydantic": "2.5"}
    """
    versions: dict[str, str] = {}
    for match in VERSION_RE.finditer(text):
        name = match.group(1).lower()
        versions.setdefault(name, match.group(2))
    return versions
