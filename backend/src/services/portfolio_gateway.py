"""Owner-checked load/save of portfolio documents.

This is the only path between the document model and storage. Every call
takes the caller's session; a session may only touch the document whose
owner id matches its own ``user_id``.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Protocol, Tuple, Union

from portfolio.defaults import apply_defaults, apply_defaults_with_report, default_document
from portfolio.document import PortfolioDocument, parse, serialize
from portfolio.errors import FormatError, NotFoundError, StorageError, UnauthorizedError
from services.portfolio_store import PortfolioStore

logger = logging.getLogger(__name__)

UserId = Union[int, str]


class OwnerSession(Protocol):
    user_id: str


def _owner_key(user_id: UserId) -> str:
    return str(user_id).strip()


class PortfolioGateway:
    """Load and persist whole portfolio documents for their owners."""

    def __init__(self, store: PortfolioStore) -> None:
        self.store = store

    def _authorize(self, session: OwnerSession, user_id: UserId) -> str:
        owner = _owner_key(user_id)
        if session is None or not owner or _owner_key(session.user_id) != owner:
            raise UnauthorizedError(f"Session is not allowed to access portfolio {owner}")
        return owner

    def _read(self, owner: str) -> Optional[str]:
        try:
            return self.store.read(owner)
        except StorageError:
            raise
        except Exception as exc:
            raise StorageError(f"Failed to load portfolio for user {owner}: {exc}") from exc

    def _write(self, owner: str, raw: str) -> None:
        try:
            self.store.write(owner, raw)
        except StorageError:
            raise
        except Exception as exc:
            raise StorageError(f"Failed to save portfolio for user {owner}: {exc}") from exc

    def load(self, session: OwnerSession, user_id: UserId) -> PortfolioDocument:
        """Fetch, parse and complete the stored document for ``user_id``."""
        owner = self._authorize(session, user_id)
        raw = self._read(owner)
        if raw is None:
            raise NotFoundError(f"No portfolio stored for user {owner}")
        return apply_defaults(parse(raw))

    def save(self, session: OwnerSession, user_id: UserId, doc: PortfolioDocument) -> None:
        """Overwrite the stored document with ``doc``. Last save wins."""
        owner = self._authorize(session, user_id)
        self._write(owner, serialize(doc))
        logger.info("Saved portfolio for user %s (%d projects, %d skills)", owner, len(doc.projects), len(doc.skills))

    def create_default(
        self,
        session: OwnerSession,
        user_id: UserId,
        name: Optional[str] = None,
    ) -> PortfolioDocument:
        """Store the starting document for a new account."""
        document = default_document(name)
        self.save(session, user_id, document)
        return document

    def load_or_none(self, session: OwnerSession, user_id: UserId) -> Optional[PortfolioDocument]:
        try:
            return self.load(session, user_id)
        except NotFoundError:
            return None

    def export_document(self, session: OwnerSession, user_id: UserId) -> str:
        """Pretty JSON of the stored document, ready to download."""
        return serialize(self.load(session, user_id), indent=2)

    def import_document(
        self,
        session: OwnerSession,
        user_id: UserId,
        raw: Union[str, bytes],
    ) -> Tuple[PortfolioDocument, List[FormatError]]:
        """Replace the stored document with an uploaded one.

        Fields that cannot be used are reset to defaults and returned as
        warnings. An upload that is not a JSON object is rejected outright.
        """
        self._authorize(session, user_id)
        data = parse(raw)
        if not isinstance(data, dict):
            raise FormatError("Imported portfolio must be a JSON object", field="$")
        document, warnings = apply_defaults_with_report(data)
        self.save(session, user_id, document)
        logger.info("Imported portfolio for user %s with %d warnings", _owner_key(user_id), len(warnings))
        return document, warnings

    def delete(self, session: OwnerSession, user_id: UserId) -> bool:
        owner = self._authorize(session, user_id)
        try:
            return self.store.delete(owner)
        except StorageError:
            raise
        except Exception as exc:
            raise StorageError(f"Failed to delete portfolio for user {owner}: {exc}") from exc
