"""Error taxonomy for portfolio documents.

Each error carries the HTTP status class and machine-readable code the API
layer reports, so routes can translate them without string matching.
"""

from __future__ import annotations

from typing import Optional


class PortfolioError(Exception):
    """Base class for all portfolio document failures."""

    status_code: int = 500
    code: str = "portfolio_error"

    def __init__(self, message: str, *, field: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.field = field

    def to_detail(self) -> dict:
        detail = {"code": self.code, "message": self.message}
        if self.field:
            detail["field"] = self.field
        return detail


class ParseError(PortfolioError):
    """Raised when a document blob is not valid JSON text."""

    status_code = 400
    code = "parse_error"


class FormatError(PortfolioError):
    """A present field has a type the document model cannot use.

    Merge recovers from these by substituting the default for that field;
    import rejects a root that is not an object at all.
    """

    status_code = 400
    code = "format_error"


class ValidationError(PortfolioError):
    """Raised when a required value is blank or out of range."""

    status_code = 400
    code = "validation_error"


class NotFoundError(PortfolioError):
    """Raised when a document or a project/skill id does not exist."""

    status_code = 404
    code = "not_found"


class UnauthorizedError(PortfolioError):
    """Raised when a session acts on a document it does not own."""

    status_code = 401
    code = "unauthorized"


class StorageError(PortfolioError):
    """Raised when the underlying store fails to read or write."""

    status_code = 500
    code = "storage_error"
