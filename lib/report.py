# =============================================================================
# lib/report.py - Lint Report Export
# =============================================================================
# Turns a LintReport into tabular and text forms:
# - findings_to_frame(): pandas DataFrame, one row per finding
# - summarize(): totals per severity / rule / section (JSON-safe)
# - report_to_csv(): CSV download body
# - format_text(): compiler-style lines for terminals and CI logs
# =============================================================================

from __future__ import annotations

from typing import Any

import numpy as np
import pandas as pd

from linting.types import LintReport, Severity

FINDING_COLUMNS = ["rule", "severity", "section", "line", "symbol", "message", "suggestion"]


def _sanitize_value(value: Any) -> Any:
    """Convert numpy/pandas scalars to JSON-serializable Python types."""
    if value is None:
        return None
    if isinstance(value, float) and np.isnan(value):
        return None
    if isinstance(value, np.integer):
        return int(value)
    if isinstance(value, np.floating):
        return None if np.isnan(value) else float(value)
    if isinstance(value, np.bool_):
        return bool(value)
    return value


def _sanitize_counts(series: pd.Series) -> dict[str, int]:
    return {str(key): _sanitize_value(count) for key, count in series.items()}


def findings_to_frame(report: LintReport) -> pd.DataFrame:
    """
    One row per finding.

    The `line` column is a nullable integer so findings without a line
    don't turn the column into floats.
    """
    rows = [finding.to_dict() for finding in report.findings]
    df = pd.DataFrame(rows, columns=FINDING_COLUMNS)
    df["line"] = df["line"].astype("Int64")
    return df


def summarize(report: LintReport) -> dict[str, Any]:
    """
    Totals per severity, rule and section.

    Example:
        {
            "passed": False,
            "total": 3,
            "by_severity": {"error": 1, "warning": 2, "info": 0},
            "by_rule": {"RC001": 1, "RC004": 2},
            "by_section": {"path-parameters": 3},
        }
    """
    df = findings_to_frame(report)

    by_severity = {severity.value: 0 for severity in Severity}
    by_severity.update(_sanitize_counts(df.groupby("severity").size()))

    sections = df["section"].replace("", "(card)")

    return {
        "card_title": report.card_title,
        "passed": report.passed,
        "total": int(len(df)),
        "by_severity": by_severity,
        "by_rule": _sanitize_counts(df.groupby("rule").size()),
        "by_section": _sanitize_counts(sections.groupby(sections).size()),
    }


def report_to_csv(report: LintReport) -> str:
    """CSV text with a header row, even when there are no findings."""
    return findings_to_frame(report).to_csv(index=False)


def format_text(report: LintReport) -> str:
    """
    Compiler-style output.

    Example:
        fastapi_reference_card.md:42: ERROR [RC001] Example does not parse: invalid syntax
        fastapi_reference_card.md: 1 error(s), 0 warning(s), 0 info
    """
    lines = []
    for finding in report.findings:
        location = f"{report.source_name}:{finding.line}" if finding.line else report.source_name
        lines.append(
            f"{location}: {finding.severity.value.upper()} [{finding.rule}] {finding.message}"
        )
        if finding.suggestion:
            lines.append(f"    suggestion: {finding.suggestion}")

    counts = report.counts
    lines.append(
        f"{report.source_name}: {counts['error']} error(s), "
        f"{counts['warning']} warning(s), {counts['info']} info"
    )
    return "\n".join(lines)
