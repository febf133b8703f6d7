#!/usr/bin/env python3
# =============================================================================
# scripts/lint_card.py - Command-Line Card Linter
# =============================================================================
# Lints reference cards from files or URLs, for editors and CI.
#
# Usage:
#   python scripts/lint_card.py docs/fastapi_reference_card.md
#   python scripts/lint_card.py card.md --ignore RC004 --fail-on warning
#   python scripts/lint_card.py https://example.com/card.md --format json
#   python scripts/lint_card.py --list-rules
#
# Exit codes:
#   0  no findings at or above --fail-on
#   1  findings at or above --fail-on
#   2  usage error, unreadable input or unknown rule
# =============================================================================

import argparse
import json
import logging
import os
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import httpx
from dotenv import load_dotenv

from lib.card_parser import CardParseError, parse_card
from lib.card_renderer import render_card
from lib.report import format_text, report_to_csv, summarize
from linting import Linter, UnknownRuleError, get_all_rules_info

logger = logging.getLogger("lint_card")

EXIT_OK = 0
EXIT_FINDINGS = 1
EXIT_ERROR = 2

FETCH_TIMEOUT = 10.0


def _split_codes(value: str | None) -> list[str]:
    if not value:
        return []
    return [code.strip() for code in value.split(",") if code.strip()]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lint_card",
        description="Lint FastAPI reference cards (Markdown).",
    )
    parser.add_argument("sources", nargs="*", help="Card paths or http(s) URLs")
    parser.add_argument("--select", help="Only run these rules (comma-separated codes or names)")
    parser.add_argument("--ignore", help="Skip these rules (comma-separated codes or names)")
    parser.add_argument(
        "--format",
        choices=["text", "json", "csv"],
        default="text",
        help="Output format (default: text)",
    )
    parser.add_argument(
        "--fail-on",
        choices=["error", "warning", "info"],
        default="error",
        help="Lowest severity that makes the run fail (default: error)",
    )
    parser.add_argument("--list-rules", action="store_true", help="Print the rule catalog and exit")
    parser.add_argument("--render", action="store_true", help="Print the re-rendered card instead of linting")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def load_source(source: str) -> str:
    """
    Read a card from a path or URL.

    Raises:
        OSError: Unreadable file
        UnicodeDecodeError: File is not UTF-8
        httpx.HTTPError: Failed download
    """
    if source.startswith(("http://", "https://")):
        response = httpx.get(source, timeout=FETCH_TIMEOUT, follow_redirects=True)
        response.raise_for_status()
        return response.text
    return Path(source).read_text(encoding="utf-8")


def print_rules() -> None:
    for code, info in get_all_rules_info().items():
        print(f"{code}  {info.name:<20} {info.default_severity.value:<8} {info.description}")


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    if args.list_rules:
        print_rules()
        return EXIT_OK

    if not args.sources:
        print("error: no card given (pass a path or URL, or --list-rules)", file=sys.stderr)
        return EXIT_ERROR

    try:
        linter = Linter(select=_split_codes(args.select) or None, ignore=_split_codes(args.ignore))
    except UnknownRuleError as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_ERROR

    exit_code = EXIT_OK
    json_reports = []
    csv_header_written = False

    for source in args.sources:
        try:
            text = load_source(source)
            card = parse_card(text, source_name=source)
        except (OSError, UnicodeDecodeError, httpx.HTTPError, CardParseError) as e:
            print(f"error: cannot load {source}: {e}", file=sys.stderr)
            return EXIT_ERROR

        if args.render:
            sys.stdout.write(render_card(card))
            continue

        report = linter.lint(card)
        if report.fails(args.fail_on):
            exit_code = EXIT_FINDINGS

        if args.format == "json":
            json_reports.append({**report.to_dict(), "summary": summarize(report)})
        elif args.format == "csv":
            body = report_to_csv(report)
            if csv_header_written:
                body = body.split("\n", 1)[1] if "\n" in body else ""
            sys.stdout.write(body)
            csv_header_written = True
        else:
            print(format_text(report))

    if json_reports:
        payload = json_reports[0] if len(json_reports) == 1 else json_reports
        print(json.dumps(payload, indent=2))

    return exit_code


if __name__ == "__main__":
    sys.exit(main())
