"""
Custom exceptions for the HTML audit engine.

Error philosophy:
  - ValidationError → FAIL HARD: the document is structurally unusable
    (missing mandatory elements, duplicate ids). It is the only error type
    callers of the engine ever see.
  - ParseFailure    → FAIL HARD inside the loader: the tree could not be built
    at all. Wrapped into a ValidationError at the engine boundary so callers
    deal with a single taxonomy.

Per-element problems (one malformed JSON-LD block, one image without
dimensions) are never raised. They end up as counted issues in the report.
"""

from typing import Optional


class HTMLAuditError(Exception):
    """Base exception for all HTML audit errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationError(HTMLAuditError):
    """
    Raised when a document fails structural validation, or when the
    loader could not build a tree for it.

    Every detected violation is listed, not only the first one.
    """

    type = "VALIDATION_ERROR"

    def __init__(
        self,
        message: str,
        violations: Optional[list[str]] = None,
        details: Optional[dict] = None
    ):
        super().__init__(message, details)
        self.violations = list(violations or [])

    def to_response(self) -> dict:
        """Convert to a JSON-serialisable error response."""
        return {
            "error": "ValidationError",
            "type": self.type,
            "message": self.message,
            "violations": list(self.violations),
            "details": self.details
        }


class ParseFailure(HTMLAuditError):
    """Raised when the underlying tree construction step itself fails."""

    def __init__(
        self,
        message: str,
        parser: Optional[str] = None,
        details: Optional[dict] = None
    ):
        super().__init__(message, details)
        self.parser = parser  # last parser attempted, aids debugging
