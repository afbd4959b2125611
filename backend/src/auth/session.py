from __future__ import annotations

import json
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests
from dotenv import load_dotenv


AUTH_SIGNUP_PATH = "/auth/v1/signup"
AUTH_TOKEN_PATH = "/auth/v1/token?grant_type=password"
AUTH_LOGOUT_PATH = "/auth/v1/logout"

load_dotenv()


class AuthError(Exception):
    """Raised when authentication with Supabase fails."""


@dataclass
class Session:
    """Represents an authenticated Supabase session."""

    user_id: str
    email: str
    access_token: str
    refresh_token: Optional[str] = None
    name: Optional[str] = None


class SupabaseAuth:
    """Thin wrapper around Supabase REST auth endpoints."""

    def __init__(self, *, url: Optional[str] = None, anon_key: Optional[str] = None):
        self.base_url = url or os.getenv("SUPABASE_URL")
        self.anon_key = anon_key or os.getenv("SUPABASE_ANON_KEY") or os.getenv("SUPABASE_KEY")
        if not self.base_url or not self.anon_key:
            raise AuthError("Supabase credentials missing. Set SUPABASE_URL and SUPABASE_ANON_KEY.")

    def signup(self, name: str, email: str, password: str) -> Session:
        """Create a new user account and return a valid session."""
        self._post(
            AUTH_SIGNUP_PATH,
            {"email": email, "password": password, "data": {"name": name}},
        )
        # Supabase may not auto-return a session after signup, so perform a login.
        session = self.login(email, password)
        session.name = session.name or name
        return session

    def login(self, email: str, password: str) -> Session:
        """Authenticate a user and return a session."""
        payload = self._post(AUTH_TOKEN_PATH, {"email": email, "password": password})
        access_token = payload.get("access_token")
        user = payload.get("user") or {}
        user_id = user.get("id")
        if not access_token or not user_id:
            raise AuthError("Incomplete response from Supabase during login.")
        metadata = user.get("user_metadata") or {}
        return Session(
            user_id=user_id,
            email=user.get("email", email),
            access_token=access_token,
            refresh_token=payload.get("refresh_token"),
            name=metadata.get("name"),
        )

    def logout(self, access_token: str) -> None:
        """Revoke the session behind ``access_token``."""
        self._post(AUTH_LOGOUT_PATH, {}, access_token=access_token)

    def _post(
        self,
        path: str,
        data: Dict[str, Any],
        *,
        access_token: Optional[str] = None,
    ) -> Dict[str, Any]:
        headers = {
            "apikey": self.anon_key,
            "Content-Type": "application/json",
        }
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"
        try:
            response = requests.post(
                f"{self.base_url}{path}",
                headers=headers,
                data=json.dumps(data),
                timeout=20,
            )
        except requests.RequestException as exc:
            raise AuthError(f"Supabase request failed: {exc}") from exc
        if response.status_code >= 400:
            try:
                details = response.json()
            except ValueError:
                details = response.text
            raise AuthError(f"Supabase error {response.status_code}: {details}")
        if not response.text:
            return {}
        return response.json()
