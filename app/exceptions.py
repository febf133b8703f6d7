# =============================================================================
# app/exceptions.py - Custom Exception Handlers
# =============================================================================
# Centralized exception handling for the API.
# Every error response carries a machine-readable code and, where possible,
# a suggestion telling the client how to fix the request.
# =============================================================================

from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse

from lib.utils import ApplicationError


class RefCardException(Exception):
    """
    Base exception for the RefCard API.

    All custom exceptions inherit from this class.
    Provides structured error responses with actionable suggestions.
    """

    def __init__(
        self,
        message: str,
        code: str = "REFCARD_ERROR",
        status_code: int = 500,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.suggestion = suggestion
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response dict."""
        result = {
            "detail": self.message,
            "code": self.code,
        }
        if self.suggestion:
            result["suggestion"] = self.suggestion
        if self.details:
            result["details"] = self.details
        return result


# =============================================================================
# Card Exceptions
# =============================================================================

class CardNotFoundError(RefCardException):
    """Raised when a card ID doesn't exist."""

    def __init__(self, card_id: str):
        super().__init__(
            message=f"Card not found: {card_id}",
            code="CARD_NOT_FOUND",
            status_code=404,
            suggestion="List available cards with GET /api/v1/cards",
            details={"card_id": card_id}
        )


class SectionNotFoundError(RefCardException):
    """Raised when a section slug doesn't exist on a card."""

    def __init__(self, card_id: str, slug: str):
        super().__init__(
            message=f"Section not found: {slug}",
            code="SECTION_NOT_FOUND",
            status_code=404,
            suggestion="Use a slug from the card's section outline (GET /api/v1/cards/{id})",
            details={"card_id": card_id, "slug": slug}
        )


class ReportNotFoundError(RefCardException):
    """Raised when a card has not been linted yet."""

    def __init__(self, card_id: str):
        super().__init__(
            message=f"No lint report for card: {card_id}",
            code="REPORT_NOT_FOUND",
            status_code=404,
            suggestion="Lint the card first using POST /api/v1/cards/{id}/lint",
            details={"card_id": card_id}
        )


# =============================================================================
# Upload Exceptions
# =============================================================================

class InvalidFileTypeError(RefCardException):
    """Raised when uploaded file type is not allowed."""

    def __init__(self, filename: str, allowed: list[str]):
        super().__init__(
            message=f"Invalid file type: {filename}",
            code="INVALID_FILE_TYPE",
            status_code=400,
            suggestion=f"Only these file types are supported: {', '.join(allowed)}",
            details={"filename": filename, "allowed_types": allowed}
        )


class FileTooLargeError(RefCardException):
    """Raised when uploaded file exceeds size limit."""

    def __init__(self, size_kb: float, max_kb: int):
        super().__init__(
            message=f"File too large: {size_kb:.1f}KB (max: {max_kb}KB)",
            code="FILE_TOO_LARGE",
            status_code=413,
            suggestion=f"Upload a card smaller than {max_kb}KB",
            details={"size_kb": size_kb, "max_kb": max_kb}
        )


class CardDecodeError(RefCardException):
    """Raised when an uploaded card is not UTF-8 text."""

    def __init__(self, filename: str, error: str):
        super().__init__(
            message=f"Failed to read file: {error}",
            code="CARD_DECODE_ERROR",
            status_code=400,
            suggestion="Save the card as UTF-8 encoded Markdown",
            details={"filename": filename, "error": error}
        )


# =============================================================================
# Exception Handlers
# =============================================================================

# Library error codes -> HTTP status
APPLICATION_ERROR_STATUS = {
    "CARD_PARSE_ERROR": 422,
    "SNIPPET_SYNTAX_ERROR": 422,
    "UNKNOWN_RULE": 400,
}


async def refcard_exception_handler(
    request: Request,
    exc: RefCardException
) -> JSONResponse:
    """
    Convert RefCardException to JSON response.

    Returns structured error with:
    - detail: Human-readable message
    - code: Machine-readable error code
    - suggestion: How to fix (if available)
    - details: Additional context
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


async def application_error_handler(
    request: Request,
    exc: ApplicationError
) -> JSONResponse:
    """
    Convert library errors (parser, linter) to JSON responses.

    Same body shape as RefCardException.
    """
    content: dict[str, Any] = {
        "detail": exc.message,
        "code": exc.code,
    }
    if exc.suggestion:
        content["suggestion"] = exc.suggestion
    if exc.details:
        content["details"] = exc.details

    return JSONResponse(
        status_code=APPLICATION_ERROR_STATUS.get(exc.code, 400),
        content=content
    )
