# =============================================================================
# tests/test_rules.py - Lint Rule Tests
# =============================================================================
# Tests for each registered rule. Most tests lint a small card with only the
# rule under test selected, so a failure points at one rule.
#
# Run with: pytest tests/test_rules.py -v
# =============================================================================

import pytest

from lib.card_parser import parse_card
from linting import Linter, Severity, get_rule_info, list_rules


def lint(text: str, *rules: str):
    """Lint markdown with only the given rules."""
    return Linter(select=list(rules)).lint(parse_card(text, source_name="t.md"))


def card_with_rows(*rows: str, header: str = "| Function/Class | Purpose | Example | Notes |") -> str:
    lines = ["# T", "", "FastAPI 0.100+", "", "## S", "", header, "|---|---|---|---|", *rows, ""]
    return "\n".join(lines)


# =============================================================================
# Registry
# =============================================================================

class TestRuleCatalog:

    def test_all_rules_registered(self):
        assert list_rules() == [
            "RC001", "RC002", "RC003", "RC004", "RC005",
            "RC006", "RC007", "RC008", "RC009", "RC010",
        ]

    def test_categories(self):
        assert list_rules("snippets") == ["RC001", "RC003", "RC004"]
        assert list_rules("api") == ["RC002", "RC010"]
        assert list_rules("structure") == ["RC005", "RC006", "RC007", "RC008", "RC009"]

    def test_lookup_by_name(self):
        info = get_rule_info("unused-import")

        assert info.code == "RC004"
        assert info.default_severity == Severity.WARNING

    def test_unknown_rule_info(self):
        assert get_rule_info("RC999") is None


# =============================================================================
# The broken card: one problem per rule
# =============================================================================

class TestBrokenCard:

    def test_expected_findings(self, broken_card):
        report = Linter().lint(broken_card)

        assert [(f.line, f.rule, f.severity.value) for f in report.findings] == [
            (9, "RC001", "error"),
            (10, "RC002", "error"),
            (11, "RC006", "warning"),
            (11, "RC007", "warning"),
            (14, "RC004", "warning"),
            (21, "RC003", "error"),
            (25, "RC008", "warning"),
            (29, "RC009", "error"),
        ]
        assert report.counts == {"info": 0, "warning": 4, "error": 4}
        assert not report.passed

    def test_sections_are_attributed(self, broken_card):
        report = Linter().lint(broken_card)
        sections = {f.rule: f.section for f in report.findings}

        assert sections["RC001"] == "models"
        assert sections["RC008"] == "empty"
        assert sections["RC009"] == "open-fence"

    def test_clean_card_has_no_findings(self, clean_card):
        report = Linter().lint(clean_card)

        assert report.findings == []
        assert report.passed


# =============================================================================
# Snippet rules
# =============================================================================

class TestSnippetSyntax:

    def test_table_example(self):
        report = lint(card_with_rows("| `Query()` | Query param | `def f(q = Query(None)` | |"), "RC001")

        assert len(report.findings) == 1
        finding = report.findings[0]
        assert finding.line == 9
        assert finding.symbol == "`Query()`"
        assert finding.message.startswith("Example does not parse")

    def test_code_block_line_is_the_failing_line(self):
        text = "# T\n\n## S\n\n```python\nx = 1\ny = (\n```\n"
        report = lint(text, "RC001")

        assert report.findings[0].line == 7
        assert report.findings[0].message.startswith("Code block does not parse")

    def test_decorator_example_parses(self):
        report = lint(card_with_rows('| `@app.get()` | Route | `@app.get("/items")` | |'), "RC001")
        assert report.findings == []


class TestUndeclaredImport:

    def test_suggests_the_import(self):
        text = "# T\n\n## S\n\n```python\napp = FastAPI()\n```\n"
        report = lint(text, "RC003")

        finding = report.findings[0]
        assert finding.symbol == "FastAPI"
        assert finding.line == 6
        assert finding.suggestion == "Add 'from fastapi import FastAPI'"

    def test_local_names_are_ignored(self):
        text = "# T\n\n## S\n\n```python\nitems = get_items()\n```\n"
        assert lint(text, "RC003").findings == []

    def test_star_import_disables_check(self):
        text = "# T\n\n## S\n\n```python\nfrom fastapi import *\napp = FastAPI()\n```\n"
        assert lint(text, "RC003").findings == []

    def test_table_examples_are_not_checked(self):
        report = lint(card_with_rows("| `Depends()` | Dependency | `x = Depends(get_db)` | |"), "RC003")
        assert report.findings == []


class TestUnusedImport:

    def test_unused(self):
        text = "# T\n\n## S\n\n```python\nfrom fastapi import FastAPI, Query\napp = FastAPI()\n```\n"
        report = lint(text, "RC004")

        assert [(f.symbol, f.line) for f in report.findings] == [("Query", 6)]

    def test_future_imports_are_ignored(self):
        text = "# T\n\n## S\n\n```python\nfrom __future__ import annotations\nx = 1\n```\n"
        assert lint(text, "RC004").findings == []

    def test_attribute_use_counts(self):
        text = "# T\n\n## S\n\n```python\nimport fastapi\napp = fastapi.FastAPI()\n```\n"
        assert lint(text, "RC004").findings == []


# =============================================================================
# API rules
# =============================================================================

class TestUnknownApi:

    def test_every_listed_reference_is_checked(self):
        report = lint(card_with_rows("| `Query()` / `Quary()` | Params | | |"), "RC002")

        assert [f.symbol for f in report.findings] == ["Quary"]

    def test_non_card_tables_are_skipped(self):
        text = "# T\n\n## S\n\n| Name | Value |\n|---|---|\n| Nope | 1 |\n"
        assert lint(text, "RC002").findings == []

    def test_unverifiable_reference_is_a_warning(self):
        from lib.api_index import ApiIndex

        index = ApiIndex(modules=["refcard_missing_pkg"], aliases={})
        card = parse_card(card_with_rows("| `Thing` | A thing | | |"))

        report = Linter(select=["RC002"], api_index=index).lint(card)

        assert report.findings[0].severity == Severity.WARNING
        assert report.findings[0].message.startswith("Cannot verify")


class TestFrameworkVersion:

    def test_no_stated_versions(self):
        report = lint("# T\n\n## S\n\ntext\n", "RC010")

        assert report.findings[0].severity == Severity.INFO
        assert report.findings[0].line == 1

    def test_newer_than_installed(self):
        report = lint("# T\n\nFastAPI 999.0+\n\n## S\n\ntext\n", "RC010")

        finding = report.findings[0]
        assert finding.severity == Severity.WARNING
        assert finding.symbol == "fastapi"
        assert "999.0" in finding.message

    def test_satisfied(self):
        assert lint("# T\n\nFastAPI 0.1+\n\n## S\n\ntext\n", "RC010").findings == []


# =============================================================================
# Structure rules
# =============================================================================

class TestTableColumns:

    def test_missing_required_column(self):
        text = "# T\n\n## S\n\n| Function/Class | Notes |\n|---|---|\n| `a` | b |\n"
        report = lint(text, "RC005")

        assert len(report.findings) == 1
        assert report.findings[0].line == 5
        assert "Purpose" in report.findings[0].message
        assert "Example" in report.findings[0].message

    def test_row_width(self):
        report = lint(card_with_rows("| `a` | b | c | d | e |"), "RC005")

        assert report.findings[0].line == 9
        assert report.findings[0].message == "Row has 5 cells, header has 4"

    def test_other_tables_only_checked_for_width(self):
        text = "# T\n\n## S\n\n| Name | Value |\n|---|---|\n| a | 1 |\n"
        assert lint(text, "RC005").findings == []


class TestEmptyCell:

    def test_empty_symbol(self):
        report = lint(card_with_rows("| | Something | | |"), "RC006")
        assert [f.message for f in report.findings] == ["Empty Function/Class cell"]

    def test_notes_may_be_empty(self):
        assert lint(card_with_rows("| `a` | b | | |"), "RC006").findings == []


class TestDuplicateEntry:

    def test_duplicate_across_tables_in_section(self):
        text = (
            card_with_rows("| `Query` | a | | |")
            + "\n| Function/Class | Purpose | Example | Notes |\n|---|---|---|---|\n| `Query` | b | | |\n"
        )
        report = lint(text, "RC007")

        assert len(report.findings) == 1
        assert "line 9" in report.findings[0].message

    def test_same_symbol_in_different_sections(self):
        text = card_with_rows("| `Query` | a | | |") + "\n## Other\n\n| Function/Class | Purpose | Example | Notes |\n|---|---|---|---|\n| `Query` | b | | |\n"
        assert lint(text, "RC007").findings == []


class TestEmptySection:

    def test_parent_with_subsections_is_not_empty(self):
        text = "# T\n\n## Parent\n\n### Child\n\ntext\n"
        assert lint(text, "RC008").findings == []

    def test_trailing_empty_section(self):
        report = lint("# T\n\n## A\n\ntext\n\n## B\n", "RC008")
        assert [f.section for f in report.findings] == ["b"]


class TestUnterminatedFence:

    @pytest.mark.parametrize("fence", ["```", "~~~"])
    def test_open_fence(self, fence):
        report = lint(f"# T\n\n## S\n\n{fence}python\nx = 1\n", "RC009")

        assert report.findings[0].line == 5
        assert report.findings[0].severity == Severity.ERROR

    def test_open_fence_before_first_section(self):
        text = (
            "# Card\n\nFastAPI 0.110\n\n```python\nx = 1\n\n## Section\n\n"
            "| Function/Class | Purpose | Example |\n|---|---|---|\n| `Depends` | di | `Depends(f)` |\n"
        )
        report = Linter().lint(parse_card(text))

        errors = [f for f in report.findings if f.rule == "RC009"]
        assert [(f.line, f.section) for f in errors] == [(5, "")]
        assert not report.passed

    def test_closed_preamble_block_is_linted(self):
        report = lint("# T\n\n```python\nx = (\n```\n\n## S\n\ntext\n", "RC001", "RC009")

        assert [(f.rule, f.section) for f in report.findings] == [("RC001", "")]
