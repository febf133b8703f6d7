# =============================================================================
# linting/rules/api.py - Framework API Rules
# =============================================================================
#   RC002 unknown-api        Function/Class references exist in the installed API
#   RC010 framework-version  stated versions are installed
# =============================================================================

from __future__ import annotations

from typing import Iterable

from core.models.card import SYMBOL_COLUMN
from linting.registry import register_rule
from linting.types import Finding, LintContext, Rule, RuleInfo, Severity
from lib.api_index import satisfies, split_symbols


@register_rule
class UnknownApi(Rule):
    """Every Function/Class reference must resolve in the installed framework."""

    @classmethod
    def info(cls) -> RuleInfo:
        return RuleInfo(
            code="RC002",
            name="unknown-api",
            category="api",
            description="Function/Class entries must exist in the installed framework's public API",
            default_severity=Severity.ERROR,
        )

    def check(self, context: LintContext) -> Iterable[Finding]:
        index = context.api_index

        for section, table in context.card.iter_tables():
            if not table.is_card_table:
                continue
            for row in table.rows:
                cell = table.cell(row, SYMBOL_COLUMN)
                for reference in split_symbols(cell):
                    symbol = index.resolve(reference)
                    if symbol.found:
                        continue
                    if not symbol.verifiable:
                        yield self.finding(
                            f"Cannot verify '{reference}': framework module not importable",
                            severity=Severity.WARNING,
                            section=section.slug,
                            line=row.line,
                            symbol=reference,
                            suggestion="Install the framework version the card documents",
                        )
                        continue
                    yield self.finding(
                        f"'{reference}' not found in the installed framework API",
                        section=section.slug,
                        line=row.line,
                        symbol=reference,
                        suggestion="Check the spelling, or whether the name was added after the installed version",
                    )


@register_rule
class FrameworkVersion(Rule):
    """Stated framework versions should be installed."""

    @classmethod
    def info(cls) -> RuleInfo:
        return RuleInfo(
            code="RC010",
            name="framework-version",
            category="api",
            description="Versions stated by the card should not be newer than the installed ones",
            default_severity=Severity.WARNING,
        )

    def check(self, context: LintContext) -> Iterable[Finding]:
        stated_versions = context.card.framework_versions
        installed = context.installed_versions

        if not stated_versions:
            yield self.finding(
                "Card does not state which framework versions it documents",
                severity=Severity.INFO,
                line=1,
                suggestion="Add a line such as 'FastAPI 0.110+ / Pydantic 2.5+' under the title",
            )
            return

        for name, stated in sorted(stated_versions.items()):
            have = installed.get(name)
            if have is None:
                yield self.finding(
                    f"Card documents {name} {stated} but {name} is not installed",
                    severity=Severity.INFO,
                    line=1,
                    symbol=name,
                    suggestion=f"pip install '{name}>={stated}' to verify the card",
                )
            elif not satisfies(have, stated):
                yield self.finding(
                    f"Card documents {name} {stated} but {have} is installed",
                    line=1,
                    symbol=name,
                    suggestion=f"Upgrade {name} to {stated} or later",
                )
