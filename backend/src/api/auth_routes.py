"""Authentication API routes backed by Supabase auth."""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field, field_validator

from api.dependencies import AuthContext, get_auth_context, get_portfolio_gateway
from auth.session import AuthError, Session, SupabaseAuth
from portfolio.errors import PortfolioError
from services.portfolio_gateway import PortfolioGateway

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])

EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")
MIN_PASSWORD_LENGTH = 6


class AuthCredentials(BaseModel):
    email: str = Field(..., description="User email address")
    password: str = Field(..., description="User password")

    @field_validator("email")
    @classmethod
    def _strip_email(cls, value: str) -> str:
        return value.strip()


class SignupRequest(AuthCredentials):
    name: str = Field(..., description="Display name seeded into the portfolio")

    @field_validator("name")
    @classmethod
    def _require_name(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Name is required")
        return value.strip()

    @field_validator("email")
    @classmethod
    def _check_email(cls, value: str) -> str:
        if not EMAIL_PATTERN.match(value.strip()):
            raise ValueError("Invalid email format")
        return value.strip()

    @field_validator("password")
    @classmethod
    def _check_password(cls, value: str) -> str:
        if len(value) < MIN_PASSWORD_LENGTH:
            raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
        return value


class AuthSessionResponse(BaseModel):
    user_id: str
    email: str
    access_token: str
    refresh_token: Optional[str] = None
    name: Optional[str] = None
    portfolio: Optional[Dict[str, Any]] = None


class AuthSessionInfo(BaseModel):
    user_id: str
    email: Optional[str] = None
    name: Optional[str] = None
    portfolio: Optional[Dict[str, Any]] = None


def _to_session_response(session: Session, portfolio: Optional[Dict[str, Any]] = None) -> AuthSessionResponse:
    return AuthSessionResponse(
        user_id=session.user_id,
        email=session.email,
        access_token=session.access_token,
        refresh_token=session.refresh_token,
        name=session.name,
        portfolio=portfolio,
    )


def _to_context(session: Session) -> AuthContext:
    return AuthContext(
        user_id=session.user_id,
        access_token=session.access_token,
        email=session.email,
        name=session.name,
    )


def _raise_auth_error(error: AuthError) -> HTTPException:
    message = str(error)
    message_lower = message.lower()
    if "credentials missing" in message_lower:
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
        code = "configuration_error"
    elif "already registered" in message_lower or "already exists" in message_lower:
        status_code = status.HTTP_409_CONFLICT
        code = "email_taken"
    else:
        status_code = status.HTTP_401_UNAUTHORIZED
        code = "authentication_failed"
    return HTTPException(
        status_code=status_code,
        detail={"code": code, "message": message},
    )


def _portfolio_error(exc: PortfolioError) -> HTTPException:
    if exc.status_code >= 500:
        logger.exception("Portfolio storage failure during auth: %s", exc)
    return HTTPException(status_code=exc.status_code, detail=exc.to_detail())


@router.post("/signup", response_model=AuthSessionResponse, status_code=status.HTTP_201_CREATED)
def signup(
    payload: SignupRequest,
    gateway: PortfolioGateway = Depends(get_portfolio_gateway),
) -> AuthSessionResponse:
    try:
        session = SupabaseAuth().signup(payload.name, payload.email, payload.password)
    except AuthError as exc:
        raise _raise_auth_error(exc)

    try:
        document = gateway.create_default(_to_context(session), session.user_id, payload.name)
    except PortfolioError as exc:
        raise _portfolio_error(exc)
    logger.info("Created account %s with default portfolio", session.user_id)
    return _to_session_response(session, document.to_dict())


@router.post("/login", response_model=AuthSessionResponse, status_code=status.HTTP_200_OK)
def login(
    payload: AuthCredentials,
    gateway: PortfolioGateway = Depends(get_portfolio_gateway),
) -> AuthSessionResponse:
    if not payload.email or not payload.password:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"code": "validation_error", "message": "Email and password required"},
        )
    try:
        session = SupabaseAuth().login(payload.email, payload.password)
    except AuthError as exc:
        raise _raise_auth_error(exc)

    try:
        document = gateway.load_or_none(_to_context(session), session.user_id)
    except PortfolioError as exc:
        raise _portfolio_error(exc)
    return _to_session_response(session, document.to_dict() if document else None)


@router.post("/logout", status_code=status.HTTP_200_OK)
def logout(auth: AuthContext = Depends(get_auth_context)) -> dict:
    try:
        SupabaseAuth().logout(auth.access_token)
    except AuthError as exc:
        raise _raise_auth_error(exc)
    return {"ok": True, "message": "Logged out"}


@router.get("/session", response_model=AuthSessionInfo, status_code=status.HTTP_200_OK)
def get_session(
    auth: AuthContext = Depends(get_auth_context),
    gateway: PortfolioGateway = Depends(get_portfolio_gateway),
) -> AuthSessionInfo:
    try:
        document = gateway.load_or_none(auth, auth.user_id)
    except PortfolioError as exc:
        raise _portfolio_error(exc)
    return AuthSessionInfo(
        user_id=auth.user_id,
        email=auth.email,
        name=auth.name,
        portfolio=document.to_dict() if document else None,
    )
