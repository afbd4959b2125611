# Portfolio document core.
# The document model, default merging and project/skill editing used by the
# persistence gateway and the API routes. Nothing in this package does I/O.

from .defaults import apply_defaults, apply_defaults_with_report, default_document
from .document import PortfolioDocument, Project, Skill, parse, serialize
from .errors import (
    FormatError,
    NotFoundError,
    ParseError,
    PortfolioError,
    StorageError,
    UnauthorizedError,
    ValidationError,
)

__all__ = [
    "PortfolioDocument",
    "Project",
    "Skill",
    "parse",
    "serialize",
    "apply_defaults",
    "apply_defaults_with_report",
    "default_document",
    "PortfolioError",
    "ParseError",
    "FormatError",
    "ValidationError",
    "NotFoundError",
    "UnauthorizedError",
    "StorageError",
]
