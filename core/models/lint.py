# =============================================================================
# core/models/lint.py - Lint Request/Response Schemas
# =============================================================================
# API contract for linting:
# - LintOptions: which rules to run and severity overrides
# - FindingResponse / LintReportResponse: what a lint run returns
# - RuleResponse: rule metadata for GET /rules
# - SymbolResponse: result of resolving one API reference
# =============================================================================

from typing import Literal

from pydantic import BaseModel, Field

SeverityName = Literal["error", "warning", "info"]


class LintOptions(BaseModel):
    """
    Options for a lint run.

    Example:
        {
            "select": ["RC001", "unknown-api"],
            "ignore": [],
            "severity_overrides": {"RC004": "error"}
        }
    """

    select: list[str] | None = Field(
        default=None,
        description="Only run these rules (codes or names). Default: all rules."
    )
    ignore: list[str] = Field(
        default_factory=list,
        description="Rules to skip (codes or names)"
    )
    severity_overrides: dict[str, SeverityName] = Field(
        default_factory=dict,
        description="Rule code/name -> severity applied to all its findings"
    )


class FindingResponse(BaseModel):
    """One lint finding."""
    rule: str
    severity: SeverityName
    message: str
    section: str = ""
    line: int | None = None
    symbol: str = ""
    suggestion: str | None = None


class LintReportResponse(BaseModel):
    """A full lint report."""
    card_id: str | None = None
    card_title: str
    source_name: str
    passed: bool
    counts: dict[str, int]
    findings: list[FindingResponse]
    rules_run: list[str]
    installed_versions: dict[str, str]
    duration_ms: float


class RuleResponse(BaseModel):
    """Rule metadata."""
    code: str
    name: str
    category: str
    description: str
    default_severity: SeverityName


class SymbolResponse(BaseModel):
    """Result of resolving an API reference against the installed framework."""
    reference: str
    qualified_name: str
    kind: Literal["module", "class", "function", "attribute", "unknown"]
    found: bool
    verifiable: bool
