# =============================================================================
# linting/rules/snippets.py - Snippet Rules
# =============================================================================
# Rules over the Python found on a card:
#   RC001 snippet-syntax      every example parses
#   RC003 undeclared-import   code blocks import the framework names they use
#   RC004 unused-import       code blocks use the names they import
# =============================================================================

from __future__ import annotations

import ast
from typing import Iterable

from linting.registry import register_rule
from linting.types import Finding, LintContext, Rule, RuleInfo, Severity
from lib.snippets import Snippet, SnippetSyntaxError, analyze, parse_snippet


def _parsed_code_blocks(context: LintContext) -> Iterable[tuple[Snippet, ast.Module]]:
    """Code-block snippets that parse; syntax errors are RC001's job."""
    for snippet in context.snippets:
        if snippet.origin != "code_block":
            continue
        try:
            yield snippet, parse_snippet(snippet.code)
        except SnippetSyntaxError:
            continue


# =============================================================================
# RC001 snippet-syntax
# =============================================================================

@register_rule
class SnippetSyntax(Rule):
    """Every Python code block and Example code span must parse."""

    @classmethod
    def info(cls) -> RuleInfo:
        return RuleInfo(
            code="RC001",
            name="snippet-syntax",
            category="snippets",
            description="Python code blocks and Example cells must be valid Python",
            default_severity=Severity.ERROR,
        )

    def check(self, context: LintContext) -> Iterable[Finding]:
        for snippet in context.snippets:
            try:
                parse_snippet(snippet.code)
            except SnippetSyntaxError as e:
                if snippet.origin == "code_block":
                    # Code starts on the line after the opening fence
                    line = snippet.line + (e.lineno or 1)
                    what = "Code block"
                else:
                    line = snippet.line
                    what = "Example"
                yield self.finding(
                    f"{what} does not parse: {e.message}",
                    section=snippet.section,
                    line=line,
                    symbol=snippet.symbol,
                    suggestion="Make the example a complete statement or expression",
                )


# =============================================================================
# RC003 undeclared-import
# =============================================================================

@register_rule
class UndeclaredImport(Rule):
    """A code block must import the framework names it uses."""

    @classmethod
    def info(cls) -> RuleInfo:
        return RuleInfo(
            code="RC003",
            name="undeclared-import",
            category="snippets",
            description="Framework names used in a code block must be imported in that block",
            default_severity=Severity.ERROR,
        )

    def check(self, context: LintContext) -> Iterable[Finding]:
        for snippet, module in _parsed_code_blocks(context):
            names = analyze(module)
            if names.star_imports:
                continue

            for name in sorted(names.free_names):
                source = context.api_index.find_export(name)
                if source is None:
                    continue
                yield self.finding(
                    f"'{name}' is used but never imported",
                    section=snippet.section,
                    line=snippet.line + names.first_use.get(name, 1),
                    symbol=name,
                    suggestion=f"Add 'from {source} import {name}'",
                )


# =============================================================================
# RC004 unused-import
# =============================================================================

@register_rule
class UnusedImport(Rule):
    """A code block should not import names it never uses."""

    @classmethod
    def info(cls) -> RuleInfo:
        return RuleInfo(
            code="RC004",
            name="unused-import",
            category="snippets",
            description="Names imported in a code block should be used in that block",
            default_severity=Severity.WARNING,
        )

    def check(self, context: LintContext) -> Iterable[Finding]:
        for snippet, module in _parsed_code_blocks(context):
            names = analyze(module)
            for bound, origin in sorted(names.imported.items()):
                if origin.startswith("__future__"):
                    continue
                if bound in names.used:
                    continue
                yield self.finding(
                    f"'{bound}' is imported but never used",
                    section=snippet.section,
                    line=snippet.line + names.import_lines.get(bound, 1),
                    symbol=bound,
                    suggestion=f"Remove the import of '{bound}' or use it in the example",
                )
