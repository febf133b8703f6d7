# =============================================================================
# tests/test_cli.py - Command-Line Linter Tests
# =============================================================================
# Tests for scripts/lint_card.py (exit codes and output formats)
#
# Run with: pytest tests/test_cli.py -v
# =============================================================================

import importlib.util
import json
from unittest.mock import MagicMock, patch

import httpx
import pytest

from tests.conftest import BROKEN_CARD, CLEAN_CARD, PROJECT_ROOT


def _load_cli():
    spec = importlib.util.spec_from_file_location("lint_card", PROJECT_ROOT / "scripts" / "lint_card.py")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


lint_card = _load_cli()


@pytest.fixture
def cards(tmp_path):
    clean = tmp_path / "clean.md"
    broken = tmp_path / "broken.md"
    clean.write_text(CLEAN_CARD, encoding="utf-8")
    broken.write_text(BROKEN_CARD, encoding="utf-8")
    return clean, broken


class TestExitCodes:

    def test_clean_card(self, cards, capsys):
        clean, _ = cards

        assert lint_card.main([str(clean)]) == lint_card.EXIT_OK
        assert "0 error(s), 0 warning(s), 0 info" in capsys.readouterr().out

    def test_errors(self, cards, capsys):
        _, broken = cards

        assert lint_card.main([str(broken)]) == lint_card.EXIT_FINDINGS

        out = capsys.readouterr().out
        assert f"{broken}:9: ERROR [RC001]" in out
        assert "4 error(s), 4 warning(s), 0 info" in out

    def test_fail_on_warning(self, cards):
        _, broken = cards

        assert lint_card.main([str(broken), "--select", "RC004"]) == lint_card.EXIT_OK
        assert lint_card.main([str(broken), "--select", "RC004", "--fail-on", "warning"]) == lint_card.EXIT_FINDINGS

    def test_ignore(self, cards):
        _, broken = cards

        code = lint_card.main([str(broken), "--ignore", "RC001,RC002,RC003,unterminated-fence"])

        assert code == lint_card.EXIT_OK

    def test_missing_file(self, tmp_path, capsys):
        assert lint_card.main([str(tmp_path / "nope.md")]) == lint_card.EXIT_ERROR
        assert "cannot load" in capsys.readouterr().err

    def test_empty_file(self, tmp_path):
        empty = tmp_path / "empty.md"
        empty.write_text("", encoding="utf-8")

        assert lint_card.main([str(empty)]) == lint_card.EXIT_ERROR

    def test_file_that_is_not_utf8(self, tmp_path, capsys):
        latin = tmp_path / "latin.md"
        latin.write_bytes(b"# Card\n\n\xff\xfe caf\xe9\n")

        assert lint_card.main([str(latin)]) == lint_card.EXIT_ERROR
        assert "cannot load" in capsys.readouterr().err

    def test_unknown_rule(self, cards, capsys):
        clean, _ = cards

        assert lint_card.main([str(clean), "--select", "RC999"]) == lint_card.EXIT_ERROR
        assert "Unknown rule: RC999" in capsys.readouterr().err

    def test_no_sources(self, capsys):
        assert lint_card.main([]) == lint_card.EXIT_ERROR


class TestOutput:

    def test_list_rules(self, capsys):
        assert lint_card.main(["--list-rules"]) == lint_card.EXIT_OK

        lines = capsys.readouterr().out.splitlines()
        assert len(lines) == 10
        assert lines[0].startswith("RC001  snippet-syntax")

    def test_json_single(self, cards, capsys):
        _, broken = cards

        lint_card.main([str(broken), "--format", "json"])

        payload = json.loads(capsys.readouterr().out)
        assert payload["counts"]["error"] == 4
        assert payload["summary"]["total"] == 8

    def test_json_many(self, cards, capsys):
        clean, broken = cards

        lint_card.main([str(clean), str(broken), "--format", "json"])

        payload = json.loads(capsys.readouterr().out)
        assert [report["passed"] for report in payload] == [True, False]

    def test_csv_single_header(self, cards, capsys):
        clean, broken = cards

        lint_card.main([str(broken), str(broken), "--format", "csv"])

        lines = capsys.readouterr().out.strip().splitlines()
        assert lines[0].startswith("rule,severity")
        assert len(lines) == 1 + 16

    def test_render(self, cards, capsys):
        clean, _ = cards

        assert lint_card.main([str(clean), "--render"]) == lint_card.EXIT_OK
        assert capsys.readouterr().out.startswith("# Mini Card\n")


class TestUrlSources:

    def test_fetch(self, capsys):
        response = MagicMock()
        response.text = CLEAN_CARD

        with patch.object(lint_card.httpx, "get", return_value=response) as get:
            code = lint_card.main(["https://example.com/card.md"])

        assert code == lint_card.EXIT_OK
        get.assert_called_once_with("https://example.com/card.md", timeout=10.0, follow_redirects=True)

    def test_fetch_failure(self, capsys):
        with patch.object(lint_card.httpx, "get", side_effect=httpx.ConnectError("refused")):
            code = lint_card.main(["https://example.com/card.md"])

        assert code == lint_card.EXIT_ERROR
        assert "cannot load" in capsys.readouterr().err
