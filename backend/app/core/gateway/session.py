"""
Gateway session verification.

The identity provider is the only source of truth for sessions. The gateway
reads the request's credentials (Authorization header or session cookie),
asks the provider who they belong to, and never mints or extends a session.

SessionVerifier is fail-closed: any provider error (expired or malformed
token, network failure, unexpected payload) means "no identity".
"""

import logging
from dataclasses import dataclass
from typing import Any, Protocol

import httpx
import jwt
from jwt.exceptions import InvalidTokenError
from starlette.requests import Request

from app.core.security import decode_session_token

_log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Identity:
    """Authenticated caller. ``id`` is the stable user identifier."""

    id: str
    email: str | None = None


class IdentityProvider(Protocol):
    async def get_session(self, request: Request) -> Identity | None: ...


def extract_token(request: Request, cookie_name: str) -> str | None:
    """
    Session token from the request:
    - Authorization: Bearer <token>
    - or the provider's session cookie.
    """
    auth = (request.headers.get("Authorization") or "").strip()
    if auth.lower().startswith("bearer "):
        token = auth[7:].strip()
        if token:
            return token
    token = (request.cookies.get(cookie_name) or "").strip()
    return token or None


def _identity_from_claims(claims: dict[str, Any]) -> Identity | None:
    sub = claims.get("sub")
    if not sub or not isinstance(sub, str):
        return None
    email = claims.get("email")
    return Identity(id=sub, email=email if isinstance(email, str) else None)


class JwtIdentityProvider:
    """Verifies the provider-issued access token locally with the shared JWT secret."""

    def __init__(self, cookie_name: str) -> None:
        self.cookie_name = cookie_name

    async def get_session(self, request: Request) -> Identity | None:
        token = extract_token(request, self.cookie_name)
        if not token:
            return None
        try:
            claims = decode_session_token(token)
        except InvalidTokenError:
            return None
        return _identity_from_claims(claims)


class RemoteIdentityProvider:
    """
    Resolves the session by asking the identity service (GET /auth/v1/user).

    Non-200 answers mean no session; transport errors propagate and are
    turned into "no identity" by SessionVerifier.
    """

    def __init__(
        self,
        base_url: str,
        cookie_name: str,
        *,
        api_key: str | None = None,
        timeout: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.cookie_name = cookie_name
        self.api_key = api_key
        self.timeout = timeout
        self._transport = transport

    async def get_session(self, request: Request) -> Identity | None:
        token = extract_token(request, self.cookie_name)
        if not token:
            return None
        headers = {"Authorization": f"Bearer {token}"}
        if self.api_key:
            headers["apikey"] = self.api_key
        async with httpx.AsyncClient(
            timeout=self.timeout, transport=self._transport
        ) as client:
            resp = await client.get(f"{self.base_url}/auth/v1/user", headers=headers)
        if resp.status_code != 200:
            return None
        data = resp.json()
        if not isinstance(data, dict):
            return None
        user_id = data.get("id")
        if not user_id or not isinstance(user_id, str):
            return None
        email = data.get("email")
        return Identity(id=user_id, email=email if isinstance(email, str) else None)


class SessionVerifier:
    """Wraps an IdentityProvider; returns an Identity or None, never raises."""

    def __init__(self, provider: IdentityProvider) -> None:
        self.provider = provider

    async def verify(self, request: Request) -> Identity | None:
        try:
            return await self.provider.get_session(request)
        except (jwt.PyJWTError, httpx.HTTPError, ValueError) as e:
            _log.debug("Session verification failed: %s", e)
            return None
        except Exception:
            _log.exception("Identity provider raised unexpectedly; treating as no session")
            return None
