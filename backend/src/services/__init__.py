"""Services that sit between the API routes and storage."""

from .portfolio_gateway import PortfolioGateway
from .portfolio_store import InMemoryPortfolioStore, PortfolioStore, SupabasePortfolioStore

__all__ = [
    "PortfolioGateway",
    "PortfolioStore",
    "InMemoryPortfolioStore",
    "SupabasePortfolioStore",
]
