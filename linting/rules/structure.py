# =============================================================================
# linting/rules/structure.py - Document Structure Rules
# =============================================================================
#   RC005 table-columns       card tables have the standard columns and
#                             consistent row widths
#   RC006 empty-cell          Function/Class and Purpose are filled in
#   RC007 duplicate-entry     a symbol appears once per section
#   RC008 empty-section       sections have content
#   RC009 unterminated-fence  code fences are closed
# =============================================================================

from __future__ import annotations

from typing import Iterable

from core.models.card import CARD_COLUMNS, PURPOSE_COLUMN, REQUIRED_COLUMNS, SYMBOL_COLUMN
from linting.registry import register_rule
from linting.types import Finding, LintContext, Rule, RuleInfo, Severity


@register_rule
class TableColumns(Rule):
    """
    Tables that use any card column must carry all required ones, and every
    row must have as many cells as the header.
    """

    @classmethod
    def info(cls) -> RuleInfo:
        return RuleInfo(
            code="RC005",
            name="table-columns",
            category="structure",
            description="Card tables need Function/Class, Purpose and Example columns; rows match the header width",
            default_severity=Severity.ERROR,
        )

    def check(self, context: LintContext) -> Iterable[Finding]:
        for section, table in context.card.iter_tables():
            uses_card_columns = any(table.column(name) is not None for name in CARD_COLUMNS)
            if uses_card_columns:
                missing = [name for name in REQUIRED_COLUMNS if table.column(name) is None]
                if missing:
                    yield self.finding(
                        f"Table is missing column(s): {', '.join(missing)}",
                        section=section.slug,
                        line=table.line,
                        suggestion=f"Use the header: | {' | '.join(CARD_COLUMNS)} |",
                    )

            width = len(table.header)
            for row in table.rows:
                if len(row.cells) != width:
                    yield self.finding(
                        f"Row has {len(row.cells)} cells, header has {width}",
                        section=section.slug,
                        line=row.line,
                        suggestion="Escape literal pipes as \\| or add the missing cells",
                    )


@register_rule
class EmptyCell(Rule):
    """Function/Class and Purpose cells must not be empty."""

    @classmethod
    def info(cls) -> RuleInfo:
        return RuleInfo(
            code="RC006",
            name="empty-cell",
            category="structure",
            description="Function/Class and Purpose cells should be filled in",
            default_severity=Severity.WARNING,
        )

    def check(self, context: LintContext) -> Iterable[Finding]:
        for section, table in context.card.iter_tables():
            if not table.is_card_table:
                continue
            for row in table.rows:
                for column in (SYMBOL_COLUMN, PURPOSE_COLUMN):
                    if table.column(column) is None or table.cell(row, column):
                        continue
                    yield self.finding(
                        f"Empty {column} cell",
                        section=section.slug,
                        line=row.line,
                        symbol=table.cell(row, SYMBOL_COLUMN),
                    )


@register_rule
class DuplicateEntry(Rule):
    """The same Function/Class entry should appear only once per section."""

    @classmethod
    def info(cls) -> RuleInfo:
        return RuleInfo(
            code="RC007",
            name="duplicate-entry",
            category="structure",
            description="A Function/Class entry should not repeat within a section",
            default_severity=Severity.WARNING,
        )

    def check(self, context: LintContext) -> Iterable[Finding]:
        for section in context.card.sections:
            seen: dict[str, int] = {}
            for table in section.tables:
                if not table.is_card_table:
                    continue
                for row in table.rows:
                    symbol = table.cell(row, SYMBOL_COLUMN)
                    if not symbol:
                        continue
                    if symbol in seen:
                        yield self.finding(
                            f"{symbol} is already listed on line {seen[symbol]}",
                            section=section.slug,
                            line=row.line,
                            symbol=symbol,
                            suggestion="Merge the two rows",
                        )
                    else:
                        seen[symbol] = row.line


@register_rule
class EmptySection(Rule):
    """Sections without prose, tables, code or subsections."""

    @classmethod
    def info(cls) -> RuleInfo:
        return RuleInfo(
            code="RC008",
            name="empty-section",
            category="structure",
            description="Sections should have content or subsections",
            default_severity=Severity.WARNING,
        )

    def check(self, context: LintContext) -> Iterable[Finding]:
        card = context.card
        for section in card.sections:
            if section.is_empty and not card.has_subsections(section):
                yield self.finding(
                    f"Section '{section.title}' is empty",
                    section=section.slug,
                    line=section.line,
                    suggestion="Add a table or an example, or remove the heading",
                )


@register_rule
class UnterminatedFence(Rule):
    """A code fence that never closes swallows the rest of the card."""

    @classmethod
    def info(cls) -> RuleInfo:
        return RuleInfo(
            code="RC009",
            name="unterminated-fence",
            category="structure",
            description="Code fences must be closed",
            default_severity=Severity.ERROR,
        )

    def check(self, context: LintContext) -> Iterable[Finding]:
        for section, block in context.card.iter_code_blocks():
            if not block.terminated:
                yield self.finding(
                    "Code fence is never closed; the rest of the card is treated as code",
                    section=section.slug if section else "",
                    line=block.line,
                    suggestion="Add a closing ``` line after the example",
                )
