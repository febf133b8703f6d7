# =============================================================================
# linting/engine.py - Lint Engine
# =============================================================================
# Runs registered rules over a parsed card and collects a LintReport.
# A rule that crashes is reported as an internal-error finding; the rest of
# the rules still run.
# =============================================================================

from __future__ import annotations

import logging
import time
from functools import lru_cache
from typing import Callable, Type

from core.models.card import ReferenceCard
from lib.api_index import ApiIndex
from lib.card_parser import parse_card
from lib.utils import ApplicationError
from linting.registry import RULE_REGISTRY, get_rule
from linting.types import Finding, LintContext, LintReport, Rule, Severity

logger = logging.getLogger(__name__)

# (rules_done, rules_total, rule_code)
ProgressCallback = Callable[[int, int, str], None]

INTERNAL_ERROR_RULE = "internal-error"


class UnknownRuleError(ApplicationError):
    """Raised when select/ignore/overrides name a rule that doesn't exist."""

    def __init__(self, code: str):
        super().__init__(
            message=f"Unknown rule: {code}",
            code="UNKNOWN_RULE",
            suggestion=f"Use one of: {', '.join(sorted(RULE_REGISTRY))}",
            details={"rule": code},
        )


@lru_cache
def get_default_index() -> ApiIndex:
    """Shared index so framework modules are imported once per process."""
    return ApiIndex()


class Linter:
    """
    Runs card lint rules.

    Usage:
        linter = Linter(ignore=["RC004"])
        report = linter.lint(card)

        if not report.passed:
            for finding in report.findings:
                print(finding.line, finding.message)
    """

    def __init__(
        self,
        select: list[str] | None = None,
        ignore: list[str] | None = None,
        severity_overrides: dict[str, Severity | str] | None = None,
        api_index: ApiIndex | None = None,
    ):
        """
        Args:
            select: Only run these rules (codes or names). Default: all.
            ignore: Skip these rules (codes or names).
            severity_overrides: Rule code/name -> severity for all its findings.
            api_index: Index to resolve framework names against.

        Raises:
            UnknownRuleError: If any rule code or name is not registered
        """
        selected = self._resolve_codes(select) if select else sorted(RULE_REGISTRY)
        ignored = set(self._resolve_codes(ignore or []))
        self.rule_codes = [code for code in selected if code not in ignored]

        self.severity_overrides: dict[str, Severity] = {}
        for code, severity in (severity_overrides or {}).items():
            self.severity_overrides[self._resolve_codes([code])[0]] = Severity(severity)

        self.api_index = api_index or get_default_index()

    @staticmethod
    def _resolve_codes(codes: list[str]) -> list[str]:
        resolved = []
        for code in codes:
            cls = get_rule(code.strip())
            if cls is None:
                raise UnknownRuleError(code)
            resolved.append(cls.info().code)
        return resolved

    def _run_rule(self, cls: Type[Rule], context: LintContext) -> list[Finding]:
        code = cls.info().code
        try:
            findings = list(cls().check(context))
        except Exception as e:
            logger.exception(f"Rule {code} crashed: {e}")
            return [Finding(
                rule=INTERNAL_ERROR_RULE,
                severity=Severity.ERROR,
                message=f"Rule {code} failed: {e}",
                symbol=code,
                suggestion="Report this as a bug in the rule; other rules still ran",
            )]

        override = self.severity_overrides.get(code)
        if override is not None:
            for finding in findings:
                finding.severity = override
        return findings

    def lint(
        self,
        card: ReferenceCard,
        progress: ProgressCallback | None = None,
    ) -> LintReport:
        """
        Lint a parsed card.

        Args:
            card: The card to check
            progress: Called after each rule with (done, total, rule_code)

        Returns:
            LintReport with findings sorted by line, then rule
        """
        start_time = time.time()
        context = LintContext(card=card, api_index=self.api_index)
        findings: list[Finding] = []
        total = len(self.rule_codes)

        for done, code in enumerate(self.rule_codes, start=1):
            findings.extend(self._run_rule(RULE_REGISTRY[code], context))
            if progress is not None:
                progress(done, total, code)

        findings.sort(key=Finding.sort_key)

        report = LintReport(
            card_title=card.title,
            source_name=card.source_name,
            findings=findings,
            rules_run=list(self.rule_codes),
            installed_versions=context.installed_versions,
            duration_ms=(time.time() - start_time) * 1000,
        )

        logger.info(
            f"Linted {card.source_name}: {len(findings)} findings "
            f"({report.counts['error']} errors) in {report.duration_ms:.0f}ms"
        )
        return report

    def lint_text(
        self,
        text: str,
        source_name: str = "<string>",
        progress: ProgressCallback | None = None,
    ) -> LintReport:
        """Parse then lint. CardParseError propagates."""
        return self.lint(parse_card(text, source_name=source_name), progress=progress)
