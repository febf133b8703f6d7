# =============================================================================
# lib/snippets.py - Snippet Extraction and Static Analysis
# =============================================================================
# Pulls runnable-looking Python out of a reference card and inspects it
# without executing anything:
# - extract_snippets(): Python code blocks + Example-column code spans
# - parse_snippet(): ast parse with allowances for card-style fragments
# - analyze(): imported / defined / used names of a parsed snippet
#
# Usage:
#   for snippet in extract_snippets(card):
#       module = parse_snippet(snippet.code)
#       names = analyze(module)
# =============================================================================

from __future__ import annotations

import ast
import builtins
import re
import textwrap
from dataclasses import dataclass, field
from typing import Literal

from core.models.card import EXAMPLE_COLUMN, SYMBOL_COLUMN, ReferenceCard
from lib.utils import ApplicationError


BUILTIN_NAMES = frozenset(dir(builtins)) | {"__name__", "__file__", "__doc__"}

# A run of backticks, content, and the same-length run
CODE_SPAN_RE = re.compile(r"(?<!`)(`+)(?!`)(.+?)(?<!`)\1(?!`)")

DECORATOR_STUB = "\ndef _decorated():\n    pass\n"

PARSE_FLAGS = ast.PyCF_ONLY_AST | ast.PyCF_ALLOW_TOP_LEVEL_AWAIT


# =============================================================================
# Types
# =============================================================================

@dataclass
class Snippet:
    """A piece of Python taken from a card."""
    code: str
    origin: Literal["table", "code_block"]
    section: str
    line: int
    symbol: str = ""


@dataclass
class SnippetNames:
    """Names bound and referenced by a snippet."""
    imported: dict[str, str] = field(default_factory=dict)  # bound name -> dotted origin
    star_imports: list[str] = field(default_factory=list)
    defined: set[str] = field(default_factory=set)
    used: set[str] = field(default_factory=set)
    first_use: dict[str, int] = field(default_factory=dict)  # name -> line
    import_lines: dict[str, int] = field(default_factory=dict)  # bound name -> line

    @property
    def free_names(self) -> set[str]:
        """Used names that nothing in the snippet binds."""
        return self.used - self.defined - set(self.imported) - BUILTIN_NAMES


class SnippetSyntaxError(ApplicationError):
    """A snippet is not valid Python."""

    def __init__(self, message: str, lineno: int | None = None, offset: int | None = None):
        super().__init__(
            message=message,
            code="SNIPPET_SYNTAX_ERROR",
            suggestion="Make the example a complete statement or expression",
            details={"lineno": lineno, "offset": offset},
        )
        self.lineno = lineno
        self.offset = offset


# =============================================================================
# Extraction
# =============================================================================

def code_spans(cell: str) -> list[str]:
    """
    Contents of the backtick code spans in a table cell.

    A single leading and trailing space is stripped when both are present,
    as Markdown does.
    """
    spans = []
    for match in CODE_SPAN_RE.finditer(cell):
        content = match.group(2)
        if len(content) > 1 and content.startswith(" ") and content.endswith(" "):
            content = content[1:-1]
        spans.append(content)
    return spans


def extract_snippets(card: ReferenceCard) -> list[Snippet]:
    """
    Collect every Python snippet in a card, in document order per section.

    Unterminated code blocks are skipped; the unterminated-fence rule reports
    them on their own.
    """
    snippets: list[Snippet] = []

    for block in card.preamble_code_blocks:
        if block.is_python and block.terminated:
            snippets.append(Snippet(
                code=block.code, origin="code_block", section="", line=block.line,
            ))

    for section in card.sections:
        for table in section.tables:
            if table.column(EXAMPLE_COLUMN) is None:
                continue
            for row in table.rows:
                spans = code_spans(table.cell(row, EXAMPLE_COLUMN))
                if not spans:
                    continue
                snippets.append(Snippet(
                    code="\n".join(spans),
                    origin="table",
                    section=section.slug,
                    line=row.line,
                    symbol=table.cell(row, SYMBOL_COLUMN),
                ))

        for block in section.code_blocks:
            if not block.is_python or not block.terminated:
                continue
            snippets.append(Snippet(
                code=block.code,
                origin="code_block",
                section=section.slug,
                line=block.line,
            ))

    return snippets


# =============================================================================
# Parsing
# =============================================================================

def _starts_with_decorator(code: str) -> bool:
    for line in code.splitlines():
        stripped = line.strip()
        if stripped and not stripped.startswith("#"):
            return stripped.startswith("@")
    return False


def parse_snippet(code: str) -> ast.Module:
    """
    Parse a snippet.

    Allows top-level await and bare decorator lines (a stub function is
    appended so `@app.get("/")` parses on its own).

    Raises:
        SnippetSyntaxError: If the snippet is not valid Python
    """
    source = textwrap.dedent(code)
    try:
        return compile(source, "<snippet>", "exec", flags=PARSE_FLAGS)
    except SyntaxError as e:
        if _starts_with_decorator(source):
            # Decorators with nothing to decorate, possibly spanning lines
            try:
                return compile(source.rstrip() + DECORATOR_STUB, "<snippet>", "exec", flags=PARSE_FLAGS)
            except SyntaxError:
                pass
        raise SnippetSyntaxError(e.msg, lineno=e.lineno, offset=e.offset) from e


# =============================================================================
# Analysis
# =============================================================================

class _NameCollector(ast.NodeVisitor):

    def __init__(self):
        self.names = SnippetNames()

    def visit_Import(self, node: ast.Import):
        for alias in node.names:
            bound = alias.asname or alias.name.split(".")[0]
            self.names.imported[bound] = alias.name if alias.asname else bound
            self.names.import_lines.setdefault(bound, node.lineno)

    def visit_ImportFrom(self, node: ast.ImportFrom):
        module = "." * node.level + (node.module or "")
        for alias in node.names:
            if alias.name == "*":
                self.names.star_imports.append(module)
                continue
            bound = alias.asname or alias.name
            self.names.imported[bound] = f"{module}.{alias.name}"
            self.names.import_lines.setdefault(bound, node.lineno)

    def visit_Name(self, node: ast.Name):
        if isinstance(node.ctx, ast.Load):
            self.names.used.add(node.id)
            seen = self.names.first_use.get(node.id, node.lineno)
            self.names.first_use[node.id] = min(seen, node.lineno)
        else:
            self.names.defined.add(node.id)

    def _visit_function(self, node):
        self.names.defined.add(node.name)
        args = node.args
        for arg in [*args.posonlyargs, *args.args, *args.kwonlyargs]:
            self.names.defined.add(arg.arg)
        if args.vararg:
            self.names.defined.add(args.vararg.arg)
        if args.kwarg:
            self.names.defined.add(args.kwarg.arg)
        self.generic_visit(node)

    visit_FunctionDef = _visit_function
    visit_AsyncFunctionDef = _visit_function

    def visit_Lambda(self, node: ast.Lambda):
        args = node.args
        for arg in [*args.posonlyargs, *args.args, *args.kwonlyargs]:
            self.names.defined.add(arg.arg)
        self.generic_visit(node)

    def visit_ClassDef(self, node: ast.ClassDef):
        self.names.defined.add(node.name)
        self.generic_visit(node)

    def visit_ExceptHandler(self, node: ast.ExceptHandler):
        if node.name:
            self.names.defined.add(node.name)
        self.generic_visit(node)

    def visit_Global(self, node: ast.Global):
        self.names.defined.update(node.names)

    def visit_Nonlocal(self, node: ast.Nonlocal):
        self.names.defined.update(node.names)

    def visit_MatchAs(self, node):
        if node.name:
            self.names.defined.add(node.name)
        self.generic_visit(node)

    def visit_MatchStar(self, node):
        if node.name:
            self.names.defined.add(node.name)


def analyze(module: ast.Module) -> SnippetNames:
    """
    Collect imported, defined and used names.

    Scopes are flattened: a name defined anywhere in the snippet counts as
    defined everywhere. That is loose enough for short examples and strict
    enough to catch a missing import.
    """
    collector = _NameCollector()
    collector.visit(module)
    return collector.names
