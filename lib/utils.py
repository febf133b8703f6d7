# =============================================================================
# lib/utils.py - Shared Utilities
# =============================================================================
# Common utilities used across the library and the API.
# =============================================================================

import re
from typing import Any


# =============================================================================
# Slugs
# =============================================================================

_SLUG_STRIP = re.compile(r"[^\w\- ]+", re.UNICODE)


def slugify(title: str) -> str:
    """
    Build a GitHub-style heading anchor.

    Lowercases, drops punctuation (keeping word characters, hyphens and
    spaces), then turns spaces into hyphens.

    Example:
        slugify("Request Body & Models")  # "request-body--models"
        slugify("`Depends()` Usage")      # "depends-usage"
    """
    text = title.strip().lower().replace("`", "")
    text = _SLUG_STRIP.sub("", text)
    return text.replace(" ", "-")


# =============================================================================
# Base Error Class
# =============================================================================

class ApplicationError(Exception):
    """
    Base error class for library errors raised outside of HTTP handling.

    Errors say how to fix the problem, not just what failed.

    Attributes:
        code: Error code for categorization
        message: Human-readable error message
        suggestion: Actionable suggestion for fixing the error
        details: Additional context for debugging

    Example:
        class CardParseError(ApplicationError):
            def __init__(self, message: str, **kwargs):
                super().__init__(message, code="CARD_PARSE_ERROR", **kwargs)
    """

    def __init__(
        self,
        message: str,
        code: str = "APPLICATION_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.details = details or {}

    def __str__(self) -> str:
        result = f"[{self.code}] {self.message}"
        if self.suggestion:
            result += f"\n  Suggestion: {self.suggestion}"
        return result

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for API responses."""
        return {
            "code": self.code,
            "message": self.message,
            "suggestion": self.suggestion,
            "details": self.details,
        }
