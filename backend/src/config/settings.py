"""Runtime settings read from the environment (and a local ``.env``)."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import List, Optional

from dotenv import load_dotenv

load_dotenv()

STORE_SUPABASE = "supabase"
STORE_MEMORY = "memory"

_DEFAULT_CORS_ORIGINS = [
    "http://localhost",
    "http://localhost:3000",
    "http://localhost:8000",
    "http://127.0.0.1",
    "http://127.0.0.1:8000",
]


class SettingsError(Exception):
    """Raised when the environment holds an unusable setting."""


@dataclass(frozen=True)
class Settings:
    supabase_url: Optional[str] = None
    supabase_key: Optional[str] = None
    supabase_anon_key: Optional[str] = None
    portfolio_store: str = STORE_MEMORY
    portfolio_table: str = "portfolios"
    cors_origins: List[str] = field(default_factory=lambda: list(_DEFAULT_CORS_ORIGINS))
    log_level: str = "INFO"

    @property
    def supabase_configured(self) -> bool:
        return bool(self.supabase_url and self.supabase_key)


def _split_origins(raw: Optional[str]) -> List[str]:
    if not raw:
        return list(_DEFAULT_CORS_ORIGINS)
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


def load_settings() -> Settings:
    """Build settings from the current environment."""
    supabase_url = os.getenv("SUPABASE_URL")
    supabase_key = (
        os.getenv("SUPABASE_SERVICE_ROLE_KEY")
        or os.getenv("SUPABASE_KEY")
        or os.getenv("SUPABASE_ANON_KEY")
    )
    anon_key = os.getenv("SUPABASE_ANON_KEY") or os.getenv("SUPABASE_KEY")

    store = os.getenv("PORTFOLIO_STORE")
    if not store:
        store = STORE_SUPABASE if supabase_url and supabase_key else STORE_MEMORY
    store = store.strip().lower()
    if store not in (STORE_SUPABASE, STORE_MEMORY):
        raise SettingsError(f"Unknown PORTFOLIO_STORE '{store}'. Use 'supabase' or 'memory'.")

    return Settings(
        supabase_url=supabase_url,
        supabase_key=supabase_key,
        supabase_anon_key=anon_key,
        portfolio_store=store,
        portfolio_table=os.getenv("PORTFOLIO_TABLE", "portfolios"),
        cors_origins=_split_origins(os.getenv("CORS_ORIGINS")),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Cached settings for the running app; tests call ``cache_clear()``."""
    return load_settings()
