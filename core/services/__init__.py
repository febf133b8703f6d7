# =============================================================================
# core/services/__init__.py - Service Layer Exports
# =============================================================================

from .card_service import CardService, to_response, to_summary
from .lint_service import LintService, to_report_response

__all__ = [
    "CardService",
    "LintService",
    "to_response",
    "to_summary",
    "to_report_response",
]
