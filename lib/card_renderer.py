# =============================================================================
# lib/card_renderer.py - ReferenceCard -> Markdown
# =============================================================================
# Renders a parsed card back to normalized Markdown:
# - tables are re-padded so columns line up
# - pipes in cells are escaped (except inside code spans)
# - code fences are closed and made long enough for their contents
#
# Within a section, prose comes first, then tables, then code blocks.
# =============================================================================

from __future__ import annotations

from core.models.card import CodeBlock, ReferenceCard, Section, Table
from lib.card_parser import find_backtick_run


def escape_cell(cell: str) -> str:
    """Escape pipes that are not inside a backtick code span."""
    out: list[str] = []
    code_run = 0
    i = 0

    while i < len(cell):
        char = cell[i]
        if char == "`":
            run = len(cell[i:]) - len(cell[i:].lstrip("`"))
            if code_run == 0:
                if find_backtick_run(cell, i + run, run) != -1:
                    code_run = run
            elif run == code_run:
                code_run = 0
            out.append("`" * run)
            i += run
            continue
        if char == "|" and code_run == 0:
            out.append("\\|")
        else:
            out.append(char)
        i += 1

    return "".join(out)


def render_table(table: Table) -> str:
    """
    Render a table with padded columns.

    Rows keep their own cell count; short or long rows are not padded to the
    header so the rendered table shows the same shape as the source.
    """
    header = [escape_cell(cell) for cell in table.header]
    rows = [[escape_cell(cell) for cell in row.cells] for row in table.rows]

    column_count = max([len(header)] + [len(row) for row in rows])
    widths = [3] * column_count
    for cells in [header, *rows]:
        for index, cell in enumerate(cells):
            widths[index] = max(widths[index], len(cell))

    def line(cells: list[str]) -> str:
        padded = [cell.ljust(widths[index]) for index, cell in enumerate(cells)]
        return "| " + " | ".join(padded) + " |"

    lines = [
        line(header),
        line(["-" * widths[index] for index in range(len(header))]),
    ]
    lines.extend(line(cells) for cells in rows)
    return "\n".join(lines)


def render_code_block(block: CodeBlock) -> str:
    # The fence must be longer than any backtick run in the code
    longest = 0
    for chunk in block.code.split("\n"):
        stripped = chunk.strip()
        if stripped and set(stripped) == {"`"}:
            longest = max(longest, len(stripped))
    fence = "`" * max(3, longest + 1)
    return f"{fence}{block.language}\n{block.code}\n{fence}"


def render_section(section: Section) -> str:
    parts = [f"{'#' * section.level} {section.title}"]
    if section.text:
        parts.append(section.text)
    parts.extend(render_table(table) for table in section.tables)
    parts.extend(render_code_block(block) for block in section.code_blocks)
    return "\n\n".join(parts)


def render_card(card: ReferenceCard) -> str:
    """
    Render a whole card.

    Example:
        markdown = render_card(parse_card(text))
        assert parse_card(markdown).sections[0].title == card.sections[0].title
    """
    parts = [f"# {card.title}"]
    if card.preamble:
        parts.append(card.preamble)
    parts.extend(render_section(section) for section in card.sections)
    return "\n\n".join(parts) + "\n"
