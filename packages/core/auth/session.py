from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional, Protocol

import httpx


logger = logging.getLogger("medportal.auth")


class SessionVerificationError(RuntimeError):
    pass


@dataclass(frozen=True)
class SessionUser:
    user_id: str
    email: Optional[str]


class SessionVerifier(Protocol):
    def verify(self, token: str) -> SessionUser:
        """Return the user behind a session token or raise SessionVerificationError."""


def _supabase_url() -> str:
    return os.getenv("SUPABASE_URL", "").rstrip("/")


def _supabase_anon_key() -> str:
    return os.getenv("SUPABASE_ANON_KEY", "")


def bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


class SupabaseSessionVerifier:
    def __init__(
        self,
        base_url: str,
        anon_key: str,
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        if not base_url or not anon_key:
            raise SessionVerificationError("Session verification is not configured.")
        self._user_url = f"{base_url}/auth/v1/user"
        self._anon_key = anon_key
        self._timeout = timeout
        self._transport = transport

    def verify(self, token: str) -> SessionUser:
        try:
            with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
                response = client.get(
                    self._user_url,
                    headers={
                        "Authorization": f"Bearer {token}",
                        "apikey": self._anon_key,
                    },
                )
        except httpx.HTTPError as exc:
            raise SessionVerificationError(f"Session lookup failed: {exc}") from exc
        if response.status_code != 200:
            raise SessionVerificationError("Invalid session token")
        payload = response.json()
        user_id = payload.get("id")
        if not user_id:
            raise SessionVerificationError("Invalid session token")
        return SessionUser(user_id=user_id, email=payload.get("email"))


def session_verifier_from_env() -> SupabaseSessionVerifier:
    return SupabaseSessionVerifier(base_url=_supabase_url(), anon_key=_supabase_anon_key())
