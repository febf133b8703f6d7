# =============================================================================
# linting/types.py - Core Lint Types
# =============================================================================
# Defines the types shared by the rule registry, the engine and the rules:
# - Severity: error / warning / info
# - Finding: one problem at one place on a card
# - RuleInfo: rule metadata (code, name, category, default severity)
# - Rule: base class every rule subclasses
# - LintContext: what a rule gets to look at
# - LintReport: the result of linting one card
# =============================================================================

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from functools import cached_property
from typing import Any, Iterable

from core.models.card import ReferenceCard
from lib.api_index import ApiIndex, installed_versions
from lib.snippets import Snippet, extract_snippets


# =============================================================================
# Enums
# =============================================================================

class Severity(str, Enum):
    """How bad a finding is. Ordered: info < warning < error."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"

    @property
    def rank(self) -> int:
        return {"info": 0, "warning": 1, "error": 2}[self.value]


# =============================================================================
# Finding
# =============================================================================

@dataclass
class Finding:
    """
    One lint finding.

    Examples:
        Finding(rule="RC001", severity=Severity.ERROR,
                message="Example does not parse: invalid syntax",
                section="path-parameters", line=42)
    """
    rule: str
    severity: Severity
    message: str
    section: str = ""
    line: int | None = None
    symbol: str = ""
    suggestion: str | None = None

    def sort_key(self) -> tuple[int, str]:
        return (self.line or 0, self.rule)

    def to_dict(self) -> dict[str, Any]:
        return {
            "rule": self.rule,
            "severity": self.severity.value,
            "message": self.message,
            "section": self.section,
            "line": self.line,
            "symbol": self.symbol,
            "suggestion": self.suggestion,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "Finding":
        return cls(
            rule=d["rule"],
            severity=Severity(d["severity"]),
            message=d["message"],
            section=d.get("section", ""),
            line=d.get("line"),
            symbol=d.get("symbol", ""),
            suggestion=d.get("suggestion"),
        )


# =============================================================================
# Rule Metadata
# =============================================================================

@dataclass
class RuleInfo:
    """Metadata about a rule."""
    code: str
    name: str
    category: str
    description: str
    default_severity: Severity = Severity.ERROR

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "name": self.name,
            "category": self.category,
            "description": self.description,
            "default_severity": self.default_severity.value,
        }


# =============================================================================
# Context
# =============================================================================

@dataclass
class LintContext:
    """Everything a rule may inspect. Snippets are extracted once, on demand."""
    card: ReferenceCard
    api_index: ApiIndex

    @cached_property
    def snippets(self) -> list[Snippet]:
        return extract_snippets(self.card)

    @cached_property
    def installed_versions(self) -> dict[str, str]:
        return installed_versions()


# =============================================================================
# Rule Base Class
# =============================================================================

class Rule(ABC):
    """
    Base class for card lint rules.

    Subclasses implement info() and check(). Register with @register_rule.

    Usage:
        @register_rule
        class EmptySection(Rule):
            @classmethod
            def info(cls) -> RuleInfo:
                return RuleInfo(code="RC008", name="empty-section", ...)

            def check(self, context):
                for section in context.card.sections:
                    if section.is_empty:
                        yield self.finding("Section is empty", section=section.slug)
    """

    @classmethod
    @abstractmethod
    def info(cls) -> RuleInfo:
        """Return rule metadata."""

    @abstractmethod
    def check(self, context: LintContext) -> Iterable[Finding]:
        """Yield findings for the card in `context`."""

    def finding(
        self,
        message: str,
        severity: Severity | None = None,
        **kwargs: Any,
    ) -> Finding:
        """Build a finding for this rule (default severity unless given)."""
        info = self.info()
        return Finding(
            rule=info.code,
            severity=severity or info.default_severity,
            message=message,
            **kwargs,
        )


# =============================================================================
# Report
# =============================================================================

@dataclass
class LintReport:
    """Result of linting one card."""
    card_title: str
    source_name: str
    findings: list[Finding] = field(default_factory=list)
    rules_run: list[str] = field(default_factory=list)
    installed_versions: dict[str, str] = field(default_factory=dict)
    duration_ms: float = 0.0

    @property
    def counts(self) -> dict[str, int]:
        counts = {severity.value: 0 for severity in Severity}
        for finding in self.findings:
            counts[finding.severity.value] += 1
        return counts

    @property
    def passed(self) -> bool:
        """True when there are no error findings."""
        return not any(f.severity == Severity.ERROR for f in self.findings)

    @property
    def max_severity(self) -> Severity | None:
        if not self.findings:
            return None
        return max((f.severity for f in self.findings), key=lambda s: s.rank)

    def fails(self, threshold: Severity | str = Severity.ERROR) -> bool:
        """True when any finding is at or above `threshold`."""
        threshold = Severity(threshold)
        return any(f.severity.rank >= threshold.rank for f in self.findings)

    def to_dict(self) -> dict[str, Any]:
        return {
            "card_title": self.card_title,
            "source_name": self.source_name,
            "passed": self.passed,
            "counts": self.counts,
            "findings": [f.to_dict() for f in self.findings],
            "rules_run": list(self.rules_run),
            "installed_versions": dict(self.installed_versions),
            "duration_ms": round(self.duration_ms, 2),
        }

    @classmethod
    def from_dict(cls, d: dict) -> "LintReport":
        return cls(
            card_title=d["card_title"],
            source_name=d["source_name"],
            findings=[Finding.from_dict(f) for f in d.get("findings", [])],
            rules_run=list(d.get("rules_run", [])),
            installed_versions=dict(d.get("installed_versions", {})),
            duration_ms=d.get("duration_ms", 0.0),
        )
