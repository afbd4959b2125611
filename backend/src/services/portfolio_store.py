"""Durable storage for portfolio blobs, keyed by owner id.

A store only moves opaque JSON text. Ownership checks, parsing and default
merging live in :mod:`services.portfolio_gateway`.
"""

from __future__ import annotations

import json
import logging
import threading
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from supabase import Client, create_client

from portfolio.errors import StorageError

logger = logging.getLogger(__name__)


class PortfolioStore(ABC):
    """Read and overwrite one JSON blob per user."""

    @abstractmethod
    def read(self, user_id: str) -> Optional[str]:
        """Return the stored blob, or ``None`` when the user has none."""

    @abstractmethod
    def write(self, user_id: str, raw: str) -> None:
        """Replace the whole blob for ``user_id``."""

    @abstractmethod
    def delete(self, user_id: str) -> bool:
        """Remove the blob; returns whether one existed."""


class InMemoryPortfolioStore(PortfolioStore):
    """Process-local store for development and tests."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._lock = threading.Lock()
        self._blobs: Dict[str, str] = dict(initial or {})

    def read(self, user_id: str) -> Optional[str]:
        with self._lock:
            return self._blobs.get(user_id)

    def write(self, user_id: str, raw: str) -> None:
        with self._lock:
            self._blobs[user_id] = raw

    def delete(self, user_id: str) -> bool:
        with self._lock:
            return self._blobs.pop(user_id, None) is not None


class SupabasePortfolioStore(PortfolioStore):
    """Store blobs in a Supabase table with ``owner`` and ``portfolio`` columns."""

    def __init__(
        self,
        supabase_url: Optional[str] = None,
        supabase_key: Optional[str] = None,
        *,
        table: str = "portfolios",
        client: Optional[Client] = None,
    ) -> None:
        self.table = table
        if client is not None:
            self.client = client
            return

        if not supabase_url or not supabase_key:
            raise StorageError("Supabase credentials not configured.")
        try:
            self.client = create_client(supabase_url, supabase_key)
        except Exception as exc:
            raise StorageError(f"Failed to initialize Supabase client: {exc}") from exc

    def read(self, user_id: str) -> Optional[str]:
        try:
            response = (
                self.client.table(self.table)
                .select("portfolio")
                .eq("owner", user_id)
                .limit(1)
                .execute()
            )
        except Exception as exc:
            raise StorageError(f"Failed to load portfolio for user {user_id}: {exc}") from exc

        rows = response.data or []
        if not rows:
            return None
        return self._as_text(rows[0].get("portfolio"))

    def write(self, user_id: str, raw: str) -> None:
        record = {
            "owner": user_id,
            "portfolio": raw,
            "updated_at": datetime.now(timezone.utc).isoformat(),
        }
        try:
            self.client.table(self.table).upsert(record, on_conflict="owner").execute()
        except Exception as exc:
            raise StorageError(f"Failed to save portfolio for user {user_id}: {exc}") from exc

    def delete(self, user_id: str) -> bool:
        try:
            response = self.client.table(self.table).delete().eq("owner", user_id).execute()
        except Exception as exc:
            raise StorageError(f"Failed to delete portfolio for user {user_id}: {exc}") from exc
        return bool(response.data)

    @staticmethod
    def _as_text(value: Any) -> str:
        # A jsonb column comes back decoded; a NULL column means an empty document.
        if value is None:
            return "{}"
        if isinstance(value, str):
            return value
        return json.dumps(value, ensure_ascii=False)
