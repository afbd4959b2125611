from unittest.mock import patch

import pytest

from api import dependencies as deps_mod
from config.settings import Settings
from services.portfolio_store import InMemoryPortfolioStore, SupabasePortfolioStore


@pytest.fixture(autouse=True)
def reset_gateway(monkeypatch):
    monkeypatch.setattr(deps_mod, "_portfolio_gateway", None)


def test_memory_store_gateway_is_singleton(monkeypatch):
    monkeypatch.setattr(deps_mod, "get_settings", lambda: Settings(portfolio_store="memory"))

    gateway = deps_mod.get_portfolio_gateway()

    assert isinstance(gateway.store, InMemoryPortfolioStore)
    assert deps_mod.get_portfolio_gateway() is gateway


def test_supabase_store_uses_configured_table(monkeypatch):
    settings = Settings(
        supabase_url="https://x.supabase.co",
        supabase_key="key",
        portfolio_store="supabase",
        portfolio_table="docs",
    )
    monkeypatch.setattr(deps_mod, "get_settings", lambda: settings)

    with patch("services.portfolio_store.create_client") as create:
        gateway = deps_mod.get_portfolio_gateway()

    assert isinstance(gateway.store, SupabasePortfolioStore)
    assert gateway.store.table == "docs"
    create.assert_called_once_with("https://x.supabase.co", "key")
