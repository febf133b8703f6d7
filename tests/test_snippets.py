# =============================================================================
# tests/test_snippets.py - Snippet Extraction and Analysis Tests
# =============================================================================
# Tests for lib/snippets.py:
# - Example-column code spans and python code blocks
# - Parsing card-style fragments (bare decorators, top-level await)
# - Name analysis (imports, definitions, free names)
#
# Run with: pytest tests/test_snippets.py -v
# =============================================================================

import pytest

from lib.snippets import (
    SnippetSyntaxError,
    analyze,
    code_spans,
    extract_snippets,
    parse_snippet,
)


# =============================================================================
# Extraction
# =============================================================================

class TestCodeSpans:

    def test_single_spans(self):
        assert code_spans("`a` and `b`") == ["a", "b"]

    def test_double_backticks(self):
        assert code_spans("`` b`c ``") == ["b`c"]

    def test_no_spans(self):
        assert code_spans("plain text") == []


class TestExtractSnippets:

    def test_clean_card(self, clean_card):
        snippets = extract_snippets(clean_card)

        assert [(s.origin, s.line) for s in snippets] == [
            ("table", 9),
            ("table", 10),
            ("code_block", 12),
        ]
        assert snippets[0].code == '@app.get("/")'
        assert snippets[0].symbol == "`@app.get()`"
        assert snippets[0].section == "routing"

    def test_unterminated_blocks_are_skipped(self, broken_card):
        snippets = extract_snippets(broken_card)

        assert all(s.section != "open-fence" for s in snippets)
        assert [s.line for s in snippets if s.origin == "code_block"] == [13]

    def test_non_python_blocks_are_skipped(self):
        from lib.card_parser import parse_card

        card = parse_card("# T\n\n## S\n\n```bash\npip install fastapi\n```\n")
        assert extract_snippets(card) == []

    def test_tables_without_example_column(self):
        from lib.card_parser import parse_card

        card = parse_card("# T\n\n## S\n\n| Function/Class | Purpose |\n|---|---|\n| `a` | b |\n")
        assert extract_snippets(card) == []


# =============================================================================
# Parsing
# =============================================================================

class TestParseSnippet:

    def test_bare_decorator(self):
        module = parse_snippet('@app.get("/items/{item_id}")')
        assert module.body[0].name == "_decorated"

    def test_decorator_call_spanning_lines(self):
        module = parse_snippet('@app.get(\n    "/items",\n    response_model=Item,\n)')

        decorator = module.body[0].decorator_list[0]
        assert module.body[0].name == "_decorated"
        assert decorator.keywords[0].arg == "response_model"

    def test_broken_decorated_snippet_keeps_its_own_error(self):
        with pytest.raises(SnippetSyntaxError) as exc_info:
            parse_snippet('@app.get("/")\ndef read(:\n    pass')

        assert exc_info.value.lineno == 2

    def test_top_level_await(self):
        parse_snippet("data = await file.read()")

    def test_indented_fragment(self):
        parse_snippet("    x = 1\n    y = x + 1")

    def test_syntax_error(self):
        with pytest.raises(SnippetSyntaxError) as exc_info:
            parse_snippet("x = 1\nclass Item(BaseModel) name: str")

        assert exc_info.value.code == "SNIPPET_SYNTAX_ERROR"
        assert exc_info.value.lineno == 2

    def test_bare_except_clause_does_not_parse(self):
        with pytest.raises(SnippetSyntaxError):
            parse_snippet("except WebSocketDisconnect: pass")


# =============================================================================
# Analysis
# =============================================================================

class TestAnalyze:

    def test_imports(self):
        names = analyze(parse_snippet(
            "import json\n"
            "import os.path\n"
            "import numpy as np\n"
            "from fastapi import FastAPI, Depends as D\n"
        ))

        assert names.imported == {
            "json": "json",
            "os": "os",
            "np": "numpy",
            "FastAPI": "fastapi.FastAPI",
            "D": "fastapi.Depends",
        }
        assert names.import_lines["FastAPI"] == 4

    def test_star_import(self):
        names = analyze(parse_snippet("from fastapi import *"))
        assert names.star_imports == ["fastapi"]
        assert names.imported == {}

    def test_free_names(self):
        names = analyze(parse_snippet(
            "from fastapi import FastAPI\n"
            "app = FastAPI()\n"
            "\n"
            "@app.get('/')\n"
            "async def read(q: str = Query(None), *args, **kwargs):\n"
            "    items = [x for x in range(3)]\n"
            "    return Item(q=q, items=items)\n"
        ))

        assert names.free_names == {"Query", "Item"}
        assert names.first_use["Query"] == 5
        assert names.first_use["Item"] == 7

    def test_except_and_class_bind_names(self):
        names = analyze(parse_snippet(
            "class Item:\n"
            "    pass\n"
            "try:\n"
            "    Item()\n"
            "except ValueError as err:\n"
            "    print(err)\n"
        ))

        assert names.free_names == set()
        assert {"Item", "err"} <= names.defined

    def test_lambda_arguments(self):
        names = analyze(parse_snippet("key = lambda row: row.id"))
        assert names.free_names == set()
