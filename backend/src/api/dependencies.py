from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Any, Dict, Optional

import httpx
from fastapi import Header, HTTPException, status

from config.settings import STORE_SUPABASE, get_settings
from services.portfolio_gateway import PortfolioGateway
from services.portfolio_store import InMemoryPortfolioStore, PortfolioStore, SupabasePortfolioStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthContext:
    """The caller's session: the one user id it may act for."""

    user_id: str
    access_token: str
    email: Optional[str] = None
    name: Optional[str] = None


def _raise_auth_error(message: str, status_code: int = status.HTTP_401_UNAUTHORIZED) -> None:
    raise HTTPException(
        status_code=status_code,
        detail={"code": "unauthorized", "message": message},
    )


async def _fetch_user(access_token: str) -> Dict[str, Any]:
    settings = get_settings()
    if not settings.supabase_url or not settings.supabase_key:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"code": "configuration_error", "message": "Supabase credentials missing"},
        )

    headers = {
        "Authorization": f"Bearer {access_token}",
        "apikey": settings.supabase_key,
        "Content-Type": "application/json",
    }
    try:
        async with httpx.AsyncClient(timeout=10) as client:
            response = await client.get(f"{settings.supabase_url}/auth/v1/user", headers=headers)
    except httpx.RequestError as exc:
        logger.warning("Supabase user lookup failed: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail={"code": "upstream_error", "message": "Failed to validate access token"},
        ) from exc

    if response.status_code in (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN):
        _raise_auth_error("Invalid or expired access token")
    if response.status_code >= 400:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail={"code": "upstream_error", "message": "Failed to validate access token"},
        )

    payload = response.json()
    if not payload.get("id"):
        _raise_auth_error("Access token missing user id")
    return payload


async def get_auth_context(authorization: Optional[str] = Header(default=None)) -> AuthContext:
    if not authorization:
        _raise_auth_error("Authorization header missing")

    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        _raise_auth_error("Authorization header must be Bearer token")

    access_token = parts[1].strip()
    if not access_token:
        _raise_auth_error("Access token missing")

    user = await _fetch_user(access_token)
    metadata = user.get("user_metadata") or {}
    return AuthContext(
        user_id=user["id"],
        access_token=access_token,
        email=user.get("email"),
        name=metadata.get("name"),
    )


_portfolio_gateway: Optional[PortfolioGateway] = None


def _build_store() -> PortfolioStore:
    settings = get_settings()
    if settings.portfolio_store == STORE_SUPABASE:
        return SupabasePortfolioStore(
            settings.supabase_url,
            settings.supabase_key,
            table=settings.portfolio_table,
        )
    logger.warning("Using in-memory portfolio store; documents are lost on restart")
    return InMemoryPortfolioStore()


def get_portfolio_gateway() -> PortfolioGateway:
    """Get or create the PortfolioGateway singleton."""
    global _portfolio_gateway
    if _portfolio_gateway is None:
        _portfolio_gateway = PortfolioGateway(_build_store())
    return _portfolio_gateway
