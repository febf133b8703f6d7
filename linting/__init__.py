# =============================================================================
# linting - Reference Card Lint Library
# =============================================================================
# Checks a parsed reference card against the installed framework:
# - examples parse as Python
# - Function/Class entries exist in the framework's public API
# - code blocks import what they use and use what they import
# - tables, sections and fences are well formed
#
# Usage:
#   from linting import Linter
#
#   report = Linter(ignore=["RC004"]).lint(card)
#   print(report.passed, report.counts)
# =============================================================================

from linting.registry import (
    register_rule,
    get_rule,
    get_rule_info,
    list_rules,
    get_all_rules_info,
    RULE_REGISTRY,
)
from linting.types import (
    Finding,
    LintContext,
    LintReport,
    Rule,
    RuleInfo,
    Severity,
)
from linting.engine import Linter, UnknownRuleError, get_default_index

# Import rules to register them
# This must come after registry imports
from linting import rules  # noqa: F401, E402

__all__ = [
    # Registry
    "register_rule",
    "get_rule",
    "get_rule_info",
    "list_rules",
    "get_all_rules_info",
    "RULE_REGISTRY",
    # Engine
    "Linter",
    "UnknownRuleError",
    "get_default_index",
    # Types
    "Finding",
    "LintContext",
    "LintReport",
    "Rule",
    "RuleInfo",
    "Severity",
]
