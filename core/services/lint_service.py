# =============================================================================
# core/services/lint_service.py - Lint Business Logic
# =============================================================================
# Runs the linter over stored cards and keeps the last report per card.
# =============================================================================

import logging
import threading

from app.exceptions import ReportNotFoundError
from core.models.lint import LintOptions, LintReportResponse
from core.services.card_service import CardService
from linting import Linter, LintReport
from linting.engine import ProgressCallback

logger = logging.getLogger(__name__)

_reports: dict[str, LintReport] = {}
_lock = threading.Lock()


class LintService:
    """Service for linting stored cards."""

    @staticmethod
    def build_linter(options: LintOptions | None = None) -> Linter:
        """
        Raises:
            UnknownRuleError: If options name a rule that doesn't exist
        """
        options = options or LintOptions()
        return Linter(
            select=options.select,
            ignore=options.ignore,
            severity_overrides=options.severity_overrides,
        )

    @staticmethod
    def lint_card(
        card_id: str,
        options: LintOptions | None = None,
        progress: ProgressCallback | None = None,
    ) -> LintReport:
        """
        Lint a stored card and remember the report.

        Raises:
            CardNotFoundError: If the card doesn't exist
            UnknownRuleError: If options name a rule that doesn't exist
        """
        record = CardService.get_card(card_id)
        linter = LintService.build_linter(options)
        report = linter.lint(record["card"], progress=progress)
        LintService.store_report(card_id, report)
        return report

    @staticmethod
    def get_last_report(card_id: str) -> LintReport:
        """
        Raises:
            CardNotFoundError: If the card doesn't exist
            ReportNotFoundError: If the card has not been linted
        """
        CardService.get_card(card_id)
        with _lock:
            report = _reports.get(str(card_id))
        if report is None:
            raise ReportNotFoundError(str(card_id))
        return report

    @staticmethod
    def store_report(card_id: str, report: LintReport) -> None:
        """
        Keep a report as the card's last one.

        Raises:
            CardNotFoundError: If the card was deleted while it was linted
        """
        CardService.get_card(card_id)
        with _lock:
            _reports[str(card_id)] = report

    @staticmethod
    def forget(card_id: str) -> None:
        with _lock:
            _reports.pop(str(card_id), None)

    @staticmethod
    def clear() -> None:
        """Drop every report (tests)."""
        with _lock:
            _reports.clear()


def to_report_response(report: LintReport, card_id: str | None = None) -> LintReportResponse:
    return LintReportResponse(card_id=card_id, **report.to_dict())
